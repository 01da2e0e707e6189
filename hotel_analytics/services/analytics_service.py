"""Workflow orchestration around the chatbot core: persistence, feedback, history."""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from hotel_analytics.domain.models import (
    ChatbotInteraction,
    ChatbotSuggestion,
    Query,
)
from hotel_analytics.repository.data_repository import DataRepository
from hotel_analytics.services.chatbot_service import DEFAULT_SUGGESTIONS, ChatbotService
from hotel_analytics.services.context_store import ConversationContextStore
from hotel_analytics.services.prediction_service import ForecastingService
from hotel_analytics.utils.config import Settings, get_settings
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class WorkflowError(Exception):
    """Base exception for analytics workflow failures."""


class FeedbackValidationError(WorkflowError):
    """Raised when a feedback rating is outside 1..5."""


class InteractionNotFoundError(WorkflowError):
    """Raised when feedback targets an unknown interaction."""


class SessionNotFoundError(WorkflowError):
    """Raised when a session has no live conversation context."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsWorkflowService:
    """Coordinates query -> respond -> persist, plus the read-side endpoints."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        chatbot_service: Optional[ChatbotService] = None,
        forecasting_service: Optional[ForecastingService] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or _utc_now
        self._repository = repository or DataRepository(self._settings)
        self._forecasting = forecasting_service or ForecastingService(self._settings)
        self._chatbot = chatbot_service or ChatbotService(
            settings=self._settings,
            context_store=ConversationContextStore(self._settings, clock=self._clock),
            forecasting=self._forecasting,
            clock=self._clock,
        )

    def _today(self) -> date:
        return self._clock().date()

    def process_query(
        self,
        *,
        text: str,
        session_id: str,
        customer_id: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        snapshot = self._repository.load_historical_snapshot()
        query = Query(
            text=text,
            session_id=session_id,
            customer_id=customer_id,
            context=dict(context or {}),
        )
        turn = self._chatbot.process(query, snapshot)
        response = turn.response

        interaction = ChatbotInteraction(
            interaction_id=str(uuid.uuid4()),
            session_id=session_id,
            customer_id=customer_id,
            query=text,
            query_intent=turn.intent.type.value if turn.intent is not None else None,
            extracted_entities=json.dumps(
                turn.entities.to_dict() if turn.entities is not None else {}
            ),
            response=response.response,
            response_type=response.response_type.value,
            confidence_level=response.confidence_level,
            processing_time_ms=response.processing_time_ms,
            user_feedback=None,
            timestamp=self._clock().isoformat(),
        )
        self._repository.save_interaction(interaction)

        payload = response.to_dict()
        payload["sessionId"] = session_id
        payload["interactionId"] = interaction.interaction_id
        return payload

    def get_suggestions(self, session_id: Optional[str] = None) -> list[dict[str, str]]:
        context = self._chatbot.context_store.get(session_id) if session_id else None
        room_type = context.extracted_entities.get("room_type") if context else None
        if not room_type:
            return [
                ChatbotSuggestion(text=text, type="quick_question").to_dict()
                for text in DEFAULT_SUGGESTIONS
            ]

        name = str(room_type).lower()
        suggestions = [
            ChatbotSuggestion(f"What will be the price for a {name} room next weekend?", "follow_up"),
            ChatbotSuggestion(f"Show me availability for {name} rooms next week", "follow_up"),
            ChatbotSuggestion(f"Show me price trends for {name} rooms next month", "follow_up"),
            ChatbotSuggestion("When is the cheapest time to book?", "quick_question"),
        ]
        return [item.to_dict() for item in suggestions]

    def submit_feedback(
        self,
        *,
        interaction_id: str,
        rating: int,
        comments: Optional[str] = None,
    ) -> dict[str, Any]:
        if not MIN_RATING <= rating <= MAX_RATING:
            raise FeedbackValidationError(
                f"rating must be between {MIN_RATING} and {MAX_RATING}"
            )
        if self._repository.get_interaction(interaction_id) is None:
            raise InteractionNotFoundError(f"interaction {interaction_id} not found")

        record = self._repository.save_feedback(interaction_id, rating, comments)
        logger.info(
            "Chatbot feedback received | interaction_id=%s | rating=%s",
            interaction_id,
            rating,
        )
        return {
            "interactionId": record.interaction_id,
            "rating": record.rating,
            "comments": record.comments,
            "createdAt": record.created_at,
        }

    def get_history(self, customer_id: str, limit: Optional[int] = None) -> list[dict[str, Any]]:
        effective_limit = limit or self._settings.interaction_history_limit
        interactions = self._repository.list_interactions(customer_id, effective_limit)
        return [interaction.to_dict() for interaction in interactions]

    def get_session_context(self, session_id: str) -> dict[str, Any]:
        context = self._chatbot.context_store.get(session_id)
        if context is None:
            raise SessionNotFoundError(f"session {session_id} has no active context")
        return context.to_dict()

    # --- Direct forecasting access -----------------------------------------

    def _range_or_period(
        self,
        start: Optional[date],
        end: Optional[date],
        period: str,
    ) -> tuple[date, date]:
        default_start, default_end = self._forecasting.resolve_period(period, self._today())
        return start or default_start, end or default_end

    def price_predictions(
        self,
        room_type: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict[str, Any]]:
        start, end = self._range_or_period(start, end, "next_week")
        snapshot = self._repository.load_historical_snapshot()
        predictions = self._forecasting.price_predictions(
            room_type, start, end, snapshot, self._today()
        )
        return [item.to_dict() for item in predictions]

    def availability_forecasts(
        self,
        period: str,
        room_type: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        start, end = self._forecasting.resolve_period(period, self._today())
        snapshot = self._repository.load_historical_snapshot()
        forecasts = self._forecasting.availability_forecasts(
            start, end, snapshot, [room_type] if room_type else None
        )
        return [item.to_dict() for item in forecasts]

    def demand_forecasts(
        self,
        period: str,
        room_type: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        start, end = self._forecasting.resolve_period(period, self._today())
        snapshot = self._repository.load_historical_snapshot()
        forecasts = self._forecasting.demand_forecasts(room_type, start, end, snapshot)
        return [item.to_dict() for item in forecasts]

    def price_trends(
        self,
        room_type: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> dict[str, Any]:
        start, end = self._range_or_period(start, end, self._settings.trend_default_period)
        snapshot = self._repository.load_historical_snapshot()
        analysis = self._forecasting.price_trends(room_type, start, end, snapshot, self._today())
        return analysis.to_dict()
