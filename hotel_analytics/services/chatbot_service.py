"""Response dispatcher: turns one operator query into a structured reply."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional

import numpy as np

from hotel_analytics.domain.models import (
    DEFAULT_PERIOD,
    ChatbotData,
    ChatbotResponse,
    ConversationContext,
    EntityBag,
    HistoricalSnapshot,
    Intent,
    IntentType,
    Query,
    ResponseType,
    TrendDirection,
)
from hotel_analytics.services.context_store import ConversationContextStore
from hotel_analytics.services.entity_extractor import EntityExtractor
from hotel_analytics.services.intent_classifier import IntentClassifier
from hotel_analytics.services.prediction_service import (
    ForecastingService,
    ForecastValidationError,
    NoDataForRequestError,
)
from hotel_analytics.utils.config import Settings, get_settings
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)


class ChatbotError(Exception):
    """Base exception for chatbot dispatch failures."""


class EmptyQueryError(ChatbotError):
    """Raised when the query text is blank."""


DEFAULT_SUGGESTIONS = (
    "What will be the price for a deluxe room next weekend?",
    "Show me availability trends for standard rooms",
    "When is the cheapest time to book?",
    "What's the occupancy forecast for next week?",
)

PRICE_FOLLOW_UPS = (
    "Show me the price trend for the next 30 days",
    "How many rooms are available that week?",
    "When is the cheapest time to book?",
)

AVAILABILITY_FOLLOW_UPS = (
    "What will the price be next weekend?",
    "Show me price trends for next month",
    "Which room type has the best availability?",
)

TREND_FOLLOW_UPS = (
    "What will the price be next weekend?",
    "What's the occupancy forecast for next week?",
    "When should I book for the best rate?",
)

RECOMMENDATIONS = {
    "low": (
        "For budget-friendly rates, book midweek stays more than 30 days ahead "
        "and avoid weekends and holidays."
    ),
    "medium": (
        "For balanced value, book two to four weeks ahead and prefer Sunday to "
        "Thursday nights."
    ),
    "high": (
        "For premium rooms, book early to secure availability, especially for "
        "weekends, holidays and local event dates."
    ),
    "any": (
        "Booking more than 30 days ahead usually earns an early booking discount, "
        "while last-minute weekend stays carry the highest premiums."
    ),
}

HELP_TEXT = (
    "I can predict room prices, forecast availability and demand, analyse price "
    "trends and suggest when to book. Try asking about a room type and a date, "
    "for example a deluxe room next weekend."
)

EMPTY_QUERY_TEXT = "Please type a question so I can help you."
NO_DATA_TEXT = "I don't have enough historical data to answer that yet."
INVALID_REQUEST_TEXT = "I can't run that forecast:"
APOLOGY_TEXT = (
    "I'm sorry, something went wrong while processing your request. Please try again."
)

NO_DATA_CONFIDENCE = 0.3

_TREND_PHRASES = {
    TrendDirection.INCREASING: "trending upward",
    TrendDirection.DECREASING: "trending downward",
    TrendDirection.STABLE: "holding steady",
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatbotTurn:
    """Everything one query cycle produced, for callers that persist it."""

    response: ChatbotResponse
    intent: Optional[Intent] = None
    entities: Optional[EntityBag] = None


class ChatbotService:
    """Extracts, classifies, updates session state and dispatches by intent.

    ``handle`` never raises: empty queries, missing data and unexpected
    failures all come back as a ``ChatbotResponse``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractor: Optional[EntityExtractor] = None,
        classifier: Optional[IntentClassifier] = None,
        context_store: Optional[ConversationContextStore] = None,
        forecasting: Optional[ForecastingService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._extractor = extractor or EntityExtractor()
        self._classifier = classifier or IntentClassifier()
        self._context_store = context_store or ConversationContextStore(self._settings)
        self._forecasting = forecasting or ForecastingService(self._settings)
        self._clock = clock or _utc_now
        self._handlers: dict[
            IntentType,
            Callable[[Intent, EntityBag, HistoricalSnapshot, date], ChatbotResponse],
        ] = {
            IntentType.PRICE_PREDICTION: self._handle_price,
            IntentType.AVAILABILITY_FORECAST: self._handle_availability,
            IntentType.TREND_ANALYSIS: self._handle_trend,
            IntentType.BOOKING_RECOMMENDATION: self._handle_recommendation,
            IntentType.GENERAL_INQUIRY: self._handle_general,
        }

    @property
    def context_store(self) -> ConversationContextStore:
        return self._context_store

    def handle(self, query: Query, snapshot: HistoricalSnapshot) -> ChatbotResponse:
        return self.process(query, snapshot).response

    def process(self, query: Query, snapshot: HistoricalSnapshot) -> ChatbotTurn:
        started = time.perf_counter()
        intent: Optional[Intent] = None
        entities: Optional[EntityBag] = None
        try:
            if not query.text or not query.text.strip():
                raise EmptyQueryError("Query text must not be empty")

            today = self._clock().date()
            extracted = self._extractor.extract(query.text, today)
            classified = self._classifier.classify(query.text)
            previous = self._context_store.get(query.session_id)
            intent = self._resolve_intent(classified, extracted, previous)

            context = self._context_store.update(query.session_id, query, intent, extracted)
            entities = EntityBag.from_mapping(context.extracted_entities)
            response = self._handlers[intent.type](intent, entities, snapshot, today)
        except EmptyQueryError:
            response = ChatbotResponse(
                response=EMPTY_QUERY_TEXT,
                response_type=ResponseType.ERROR,
                confidence_level=0.0,
                suggestions=DEFAULT_SUGGESTIONS,
            )
        except NoDataForRequestError as exc:
            logger.info(
                "No data for chatbot request | session_id=%s | reason=%s",
                query.session_id,
                exc,
            )
            response = ChatbotResponse(
                response=f"{NO_DATA_TEXT} {exc}.",
                response_type=ResponseType.INFORMATION,
                confidence_level=NO_DATA_CONFIDENCE,
                suggestions=DEFAULT_SUGGESTIONS,
            )
        except ForecastValidationError as exc:
            logger.info(
                "Invalid forecast request | session_id=%s | reason=%s",
                query.session_id,
                exc,
            )
            response = ChatbotResponse(
                response=f"{INVALID_REQUEST_TEXT} {exc}.",
                response_type=ResponseType.ERROR,
                confidence_level=0.0,
                suggestions=DEFAULT_SUGGESTIONS,
            )
        except Exception:
            logger.exception(
                "Chatbot query failed | session_id=%s | query=%r",
                query.session_id,
                query.text,
            )
            response = ChatbotResponse(
                response=APOLOGY_TEXT,
                response_type=ResponseType.ERROR,
                confidence_level=0.0,
            )

        elapsed_ms = int(round((time.perf_counter() - started) * 1000))
        response = replace(response, processing_time_ms=elapsed_ms)
        logger.info(
            "Chatbot query handled | session_id=%s | intent=%s | response_type=%s | "
            "confidence=%.2f | duration_ms=%s",
            query.session_id,
            intent.type.value if intent is not None else None,
            response.response_type.value,
            response.confidence_level,
            elapsed_ms,
        )
        return ChatbotTurn(response=response, intent=intent, entities=entities)

    @staticmethod
    def _resolve_intent(
        classified: Intent,
        extracted: EntityBag,
        previous: Optional[ConversationContext],
    ) -> Intent:
        """Carry the previous intent into a follow-up that only adds parameters."""
        if classified.matched or not extracted.explicit or previous is None:
            return classified
        if previous.last_intent in (None, IntentType.GENERAL_INQUIRY):
            return classified
        logger.debug(
            "Follow-up intent inherited | session_id=%s | intent=%s",
            previous.session_id,
            previous.last_intent.value,
        )
        return replace(classified, type=previous.last_intent)

    def _nearest_date(self, dates: tuple[date, ...], today: date) -> date:
        if not dates:
            return today + timedelta(days=self._settings.default_forecast_lead_days)
        return min(dates, key=lambda day: abs((day - today).days))

    def _date_range(
        self,
        entities: EntityBag,
        today: date,
        fallback_period: str,
    ) -> tuple[date, date]:
        if entities.period != DEFAULT_PERIOD:
            return self._forecasting.resolve_period(entities.period, today)
        if len(entities.dates) >= 2:
            return min(entities.dates), max(entities.dates)
        if len(entities.dates) == 1:
            return entities.dates[0], entities.dates[0]
        return self._forecasting.resolve_period(fallback_period, today)

    # --- Handlers ----------------------------------------------------------

    def _handle_price(
        self,
        intent: Intent,
        entities: EntityBag,
        snapshot: HistoricalSnapshot,
        today: date,
    ) -> ChatbotResponse:
        target = self._nearest_date(entities.dates, today)
        prediction = self._forecasting.price_prediction(
            entities.room_type, target, snapshot, today, guests=entities.guests
        )
        text = (
            f"The predicted price for a {prediction.room_type} room on "
            f"{target:%A, %B %d, %Y} is ${prediction.predicted_price:.2f} "
            f"with {prediction.confidence:.0%} confidence."
        )
        if prediction.factors:
            text += f" Factors: {', '.join(prediction.factors)}."
        return ChatbotResponse(
            response=text,
            response_type=ResponseType.PREDICTION,
            confidence_level=prediction.confidence,
            data=ChatbotData(
                type="price",
                room_type=prediction.room_type,
                date_range=(target, target),
                price_predictions=(prediction,),
            ),
            suggestions=PRICE_FOLLOW_UPS,
        )

    def _handle_availability(
        self,
        intent: Intent,
        entities: EntityBag,
        snapshot: HistoricalSnapshot,
        today: date,
    ) -> ChatbotResponse:
        start, end = self._date_range(entities, today, DEFAULT_PERIOD)
        explicit_room = "room_type" in entities.explicit
        room_types = [entities.room_type] if explicit_room else None

        forecasts = self._forecasting.availability_forecasts(start, end, snapshot, room_types)
        demand = self._forecasting.demand_forecasts(
            entities.room_type if explicit_room else None, start, end, snapshot
        )

        average_available = float(np.mean([item.predicted_available_rooms for item in forecasts]))
        average_occupancy = float(np.mean([item.predicted_occupancy_rate for item in forecasts]))
        confidence = float(np.mean([item.confidence for item in forecasts]))
        subject = f"{forecasts[0].room_type} rooms" if explicit_room else "rooms per room type"

        text = (
            f"From {start.isoformat()} to {end.isoformat()}, an average of "
            f"{average_available:.1f} {subject} should be available each night, "
            f"with {average_occupancy:.0%} predicted occupancy."
        )
        return ChatbotResponse(
            response=text,
            response_type=ResponseType.PREDICTION,
            confidence_level=confidence,
            data=ChatbotData(
                type="availability",
                room_type=forecasts[0].room_type if explicit_room else None,
                date_range=(start, end),
                availability_forecasts=tuple(forecasts),
                demand_forecasts=tuple(demand),
            ),
            suggestions=AVAILABILITY_FOLLOW_UPS,
        )

    def _handle_trend(
        self,
        intent: Intent,
        entities: EntityBag,
        snapshot: HistoricalSnapshot,
        today: date,
    ) -> ChatbotResponse:
        start, end = self._date_range(entities, today, self._settings.trend_default_period)
        predictions = self._forecasting.price_predictions(
            entities.room_type, start, end, snapshot, today, guests=entities.guests
        )
        analysis = self._forecasting.analyze_trend(predictions, today)

        insights = " ".join(f"{insight}." for insight in analysis.insights)
        text = (
            f"{analysis.room_type} room prices are {_TREND_PHRASES[analysis.trend_direction]} "
            f"between {start.isoformat()} and {end.isoformat()}. {insights}"
        )
        return ChatbotResponse(
            response=text,
            response_type=ResponseType.PREDICTION,
            confidence_level=float(np.mean([item.confidence for item in predictions])),
            data=ChatbotData(
                type="trend",
                room_type=analysis.room_type,
                date_range=(start, end),
                price_predictions=tuple(predictions),
                trend_analysis=analysis,
            ),
            suggestions=TREND_FOLLOW_UPS,
        )

    def _handle_recommendation(
        self,
        intent: Intent,
        entities: EntityBag,
        snapshot: HistoricalSnapshot,
        today: date,
    ) -> ChatbotResponse:
        advice = RECOMMENDATIONS.get(entities.price_range, RECOMMENDATIONS["any"])
        return ChatbotResponse(
            response=advice,
            response_type=ResponseType.SUGGESTION,
            confidence_level=intent.confidence,
            suggestions=DEFAULT_SUGGESTIONS[:3],
        )

    def _handle_general(
        self,
        intent: Intent,
        entities: EntityBag,
        snapshot: HistoricalSnapshot,
        today: date,
    ) -> ChatbotResponse:
        return ChatbotResponse(
            response=HELP_TEXT,
            response_type=ResponseType.INFORMATION,
            confidence_level=intent.confidence,
            suggestions=DEFAULT_SUGGESTIONS,
        )
