"""HTTP controller layer for the conversational assistant."""

from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from hotel_analytics.controllers.dependencies import get_workflow_service
from hotel_analytics.services.analytics_service import (
    AnalyticsWorkflowService,
    FeedbackValidationError,
    InteractionNotFoundError,
    SessionNotFoundError,
)
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/api/chatbot", tags=["chatbot"])


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChatbotQueryRequest(CamelModel):
    """Blank text is accepted here and answered with an error response."""

    query: str = Field(max_length=1000)
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    context: Optional[dict[str, Any]] = None


class ChatbotQueryResponse(CamelModel):
    response: str
    response_type: str = Field(alias="responseType")
    confidence_level: float = Field(alias="confidenceLevel", ge=0.0, le=1.0)
    data: Optional[dict[str, Any]] = None
    suggestions: list[str]
    processing_time_ms: int = Field(alias="processingTimeMs", ge=0)
    session_id: str = Field(alias="sessionId")
    interaction_id: str = Field(alias="interactionId")


class SuggestionResponse(CamelModel):
    text: str
    type: str


class FeedbackRequest(CamelModel):
    interaction_id: str = Field(alias="interactionId", min_length=1)
    rating: int = Field(ge=1, le=5)
    comments: Optional[str] = Field(default=None, max_length=2000)


class FeedbackResponse(CamelModel):
    interaction_id: str = Field(alias="interactionId")
    rating: int
    comments: Optional[str] = None
    created_at: str = Field(alias="createdAt")


class InteractionResponse(CamelModel):
    interaction_id: str = Field(alias="interactionId")
    session_id: str = Field(alias="sessionId")
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    query: str
    query_intent: Optional[str] = Field(default=None, alias="queryIntent")
    extracted_entities: str = Field(alias="extractedEntities")
    response: str
    response_type: str = Field(alias="responseType")
    confidence_level: float = Field(alias="confidenceLevel")
    processing_time_ms: int = Field(alias="processingTimeMs")
    user_feedback: Optional[int] = Field(default=None, alias="userFeedback")
    timestamp: str


class ConversationContextResponse(CamelModel):
    session_id: str = Field(alias="sessionId")
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    recent_queries: list[str] = Field(alias="recentQueries")
    extracted_entities: dict[str, Any] = Field(alias="extractedEntities")
    last_intent: Optional[str] = Field(default=None, alias="lastIntent")
    last_interaction: str = Field(alias="lastInteraction")


@router.post(
    "/query",
    response_model=ChatbotQueryResponse,
    status_code=status.HTTP_200_OK,
)
async def process_query(
    payload: ChatbotQueryRequest,
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> ChatbotQueryResponse:
    """Answer one operator query; a session id is issued when none is sent."""
    session_id = payload.session_id or str(uuid.uuid4())
    try:
        result = service.process_query(
            text=payload.query,
            session_id=session_id,
            customer_id=payload.customer_id,
            context=payload.context,
        )
        return ChatbotQueryResponse.model_validate(result)
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected chatbot query failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process query",
        ) from exc


@router.get(
    "/suggestions",
    response_model=list[SuggestionResponse],
    status_code=status.HTTP_200_OK,
)
async def get_suggestions(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> list[SuggestionResponse]:
    return [
        SuggestionResponse.model_validate(item)
        for item in service.get_suggestions(session_id)
    ]


@router.post(
    "/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
    payload: FeedbackRequest,
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> FeedbackResponse:
    try:
        result = service.submit_feedback(
            interaction_id=payload.interaction_id,
            rating=payload.rating,
            comments=payload.comments,
        )
        return FeedbackResponse.model_validate(result)
    except FeedbackValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except InteractionNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected feedback failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store feedback",
        ) from exc


@router.get(
    "/history/{customer_id}",
    response_model=list[InteractionResponse],
    status_code=status.HTTP_200_OK,
)
async def get_history(
    customer_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> list[InteractionResponse]:
    return [
        InteractionResponse.model_validate(item)
        for item in service.get_history(customer_id, limit)
    ]


@router.get(
    "/context/{session_id}",
    response_model=ConversationContextResponse,
    status_code=status.HTTP_200_OK,
)
async def get_context(
    session_id: str,
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> ConversationContextResponse:
    try:
        return ConversationContextResponse.model_validate(
            service.get_session_context(session_id)
        )
    except SessionNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
