"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from hotel_analytics.controllers.chatbot_controller import router as chatbot_router
from hotel_analytics.controllers.predictions_controller import router as predictions_router
from hotel_analytics.repository.data_repository import DataRepository
from hotel_analytics.services.analytics_service import AnalyticsWorkflowService
from hotel_analytics.services.chatbot_service import ChatbotService
from hotel_analytics.services.context_store import ConversationContextStore
from hotel_analytics.services.entity_extractor import EntityExtractor
from hotel_analytics.services.intent_classifier import IntentClassifier
from hotel_analytics.services.prediction_service import ForecastingService
from hotel_analytics.services.trend_analyzer import TrendAnalyzer
from hotel_analytics.utils.config import Settings, get_settings
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every service is constructed here and exposed through app.state, so each
    dependency is traceable from this function.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Core services (no direct DB access) ---
    context_store = ConversationContextStore(settings)
    forecasting_service = ForecastingService(settings, trend_analyzer=TrendAnalyzer())
    chatbot_service = ChatbotService(
        settings=settings,
        extractor=EntityExtractor(),
        classifier=IntentClassifier(),
        context_store=context_store,
        forecasting=forecasting_service,
    )
    workflow_service = AnalyticsWorkflowService(
        repository=repository,
        chatbot_service=chatbot_service,
        forecasting_service=forecasting_service,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(chatbot_router)
    app.include_router(predictions_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": settings.app_version}

    app.state.settings = settings
    app.state.repository = repository
    app.state.context_store = context_store
    app.state.forecasting_service = forecasting_service
    app.state.chatbot_service = chatbot_service
    app.state.workflow_service = workflow_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    The schema must exist before seeding; seeding is skipped when the room
    inventory is already populated.
    """
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    logger.info("Startup: seeding synthetic booking history")
    repository.seed_synthetic_data()

    logger.info("Startup complete | database=%s", repository.database_path)


# Module-level app object for uvicorn
app = create_app()
