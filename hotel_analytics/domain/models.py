"""Domain models for conversational hotel analytics.

Records are immutable. ``to_dict`` renders the wire representation used by
the HTTP layer (camelCase keys, ISO dates).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional


class IntentType(str, Enum):
    PRICE_PREDICTION = "price_prediction"
    AVAILABILITY_FORECAST = "availability_forecast"
    TREND_ANALYSIS = "trend_analysis"
    BOOKING_RECOMMENDATION = "booking_recommendation"
    GENERAL_INQUIRY = "general_inquiry"


class ResponseType(str, Enum):
    PREDICTION = "prediction"
    INFORMATION = "information"
    SUGGESTION = "suggestion"
    ERROR = "error"


class TrendDirection(str, Enum):
    INCREASING = "Increasing"
    DECREASING = "Decreasing"
    STABLE = "Stable"


DEFAULT_ROOM_TYPE = "Standard"
DEFAULT_GUESTS = 1
DEFAULT_PERIOD = "general"
DEFAULT_PRICE_RANGE = "any"
PRICE_RANGES = ("low", "medium", "high", "any")


_WIRE_KEYS = {
    "dates": "dates",
    "room_type": "roomType",
    "guests": "guests",
    "period": "period",
    "price_range": "priceRange",
}


def clamp_unit(value: float) -> float:
    """Clamp a confidence or rate into [0, 1]."""
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class Query:
    text: str
    session_id: str
    customer_id: Optional[str] = None
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Intent:
    type: IntentType
    confidence: float
    original_query: str
    keywords: tuple[str, ...] = ()
    score: int = 0

    @property
    def matched(self) -> bool:
        return self.score > 0


@dataclass(frozen=True)
class EntityBag:
    """Parameters pulled out of one query.

    ``explicit`` names the fields that were actually present in the text;
    everything else holds its default.
    """

    dates: tuple[date, ...] = ()
    room_type: str = DEFAULT_ROOM_TYPE
    guests: int = DEFAULT_GUESTS
    period: str = DEFAULT_PERIOD
    price_range: str = DEFAULT_PRICE_RANGE
    explicit: frozenset[str] = frozenset()

    def explicit_items(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.explicit)}

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EntityBag":
        known = {"dates", "room_type", "guests", "period", "price_range"}
        present = {key: value for key, value in values.items() if key in known}
        if "dates" in present:
            present["dates"] = tuple(present["dates"])
        return cls(**present, explicit=frozenset(present))

    def to_dict(self) -> dict[str, Any]:
        return {
            "dates": [item.isoformat() for item in self.dates],
            "roomType": self.room_type,
            "guests": self.guests,
            "period": self.period,
            "priceRange": self.price_range,
        }


@dataclass(frozen=True)
class ConversationContext:
    session_id: str
    customer_id: Optional[str]
    recent_queries: tuple[str, ...]
    extracted_entities: Mapping[str, Any]
    last_intent: Optional[IntentType]
    last_interaction: datetime

    def to_dict(self) -> dict[str, Any]:
        rendered = EntityBag.from_mapping(self.extracted_entities).to_dict()
        merged = {
            _WIRE_KEYS[key]: rendered[_WIRE_KEYS[key]]
            for key in self.extracted_entities
            if key in _WIRE_KEYS
        }
        return {
            "sessionId": self.session_id,
            "customerId": self.customer_id,
            "recentQueries": list(self.recent_queries),
            "extractedEntities": merged,
            "lastIntent": self.last_intent.value if self.last_intent else None,
            "lastInteraction": self.last_interaction.isoformat(),
        }


@dataclass(frozen=True)
class RoomTypeMetrics:
    """Historical aggregates for one room type, supplied by the data layer."""

    room_type: str
    total_rooms: int
    average_price: float
    occupancy_rate: float


@dataclass(frozen=True)
class HistoricalSnapshot:
    """Read-only historical inputs resolved before the forecasting core runs."""

    room_metrics: Mapping[str, RoomTypeMetrics] = field(default_factory=dict)
    local_events: Mapping[date, int] = field(default_factory=dict)

    @property
    def room_types(self) -> list[str]:
        return list(self.room_metrics)

    def metrics_for(self, room_type: str) -> Optional[RoomTypeMetrics]:
        metrics = self.room_metrics.get(room_type)
        if metrics is not None:
            return metrics
        lowered = room_type.strip().lower()
        for name, candidate in self.room_metrics.items():
            if name.lower() == lowered:
                return candidate
        return None

    def events_on(self, day: date) -> int:
        return int(self.local_events.get(day, 0))


@dataclass(frozen=True)
class PriceInput:
    room_type: str
    check_in_date: date
    days_in_advance: int
    is_weekend: bool
    is_holiday: bool
    season: str
    historical_average_price: float = 0.0
    historical_occupancy_rate: float = 0.0
    local_events: int = 0
    number_of_guests: int = DEFAULT_GUESTS


@dataclass(frozen=True)
class AvailabilityInput:
    room_type: str
    prediction_date: date
    total_rooms: int
    historical_occupancy_rate: float
    is_weekend: bool
    is_holiday: bool
    season: str
    local_events: int = 0
    data_quality: Optional[float] = None


@dataclass(frozen=True)
class DemandInput:
    room_type: str
    forecast_date: date
    total_rooms: int
    historical_occupancy_rate: float
    is_weekend: bool
    is_holiday: bool
    season: str
    local_events: int = 0


@dataclass(frozen=True)
class PricePrediction:
    room_type: str
    prediction_date: date
    predicted_price: float
    confidence: float
    model_version: str
    trend_direction: TrendDirection
    factors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "roomType": self.room_type,
            "predictionDate": self.prediction_date.isoformat(),
            "predictedPrice": round(self.predicted_price, 2),
            "confidenceLevel": self.confidence,
            "modelVersion": self.model_version,
            "trendDirection": self.trend_direction.value,
            "factors": list(self.factors),
        }


@dataclass(frozen=True)
class AvailabilityForecast:
    room_type: str
    forecast_date: date
    total_rooms: int
    predicted_available_rooms: int
    predicted_occupancy_rate: float
    confidence: float
    factors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "roomType": self.room_type,
            "forecastDate": self.forecast_date.isoformat(),
            "totalRooms": self.total_rooms,
            "predictedAvailableRooms": self.predicted_available_rooms,
            "predictedOccupancyRate": round(self.predicted_occupancy_rate, 4),
            "confidenceLevel": self.confidence,
            "factors": list(self.factors),
        }


@dataclass(frozen=True)
class DemandFactor:
    factor_name: str
    impact: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "factorName": self.factor_name,
            "impact": self.impact,
            "description": self.description,
        }


@dataclass(frozen=True)
class DemandForecast:
    room_type: str
    forecast_date: date
    predicted_demand: int
    historical_average: int
    demand_variation: float
    trend_direction: TrendDirection
    confidence: float
    demand_factors: tuple[DemandFactor, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "roomType": self.room_type,
            "forecastDate": self.forecast_date.isoformat(),
            "predictedDemand": self.predicted_demand,
            "historicalAverage": self.historical_average,
            "demandVariation": round(self.demand_variation, 4),
            "trendDirection": self.trend_direction.value,
            "confidenceLevel": self.confidence,
            "demandFactors": [factor.to_dict() for factor in self.demand_factors],
        }


@dataclass(frozen=True)
class TrendPoint:
    date: date
    value: float
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "value": round(self.value, 2),
            "label": self.label,
        }


@dataclass(frozen=True)
class TrendAnalysis:
    room_type: str
    analysis_date: date
    trend_direction: TrendDirection
    trend_strength: float
    trend_points: tuple[TrendPoint, ...]
    insights: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "roomType": self.room_type,
            "analysisDate": self.analysis_date.isoformat(),
            "trendDirection": self.trend_direction.value,
            "trendStrength": round(self.trend_strength, 4),
            "trendPoints": [point.to_dict() for point in self.trend_points],
            "insights": list(self.insights),
        }


@dataclass(frozen=True)
class ChatbotData:
    type: str
    room_type: Optional[str] = None
    date_range: Optional[tuple[date, date]] = None
    price_predictions: tuple[PricePrediction, ...] = ()
    availability_forecasts: tuple[AvailabilityForecast, ...] = ()
    demand_forecasts: tuple[DemandForecast, ...] = ()
    trend_analysis: Optional[TrendAnalysis] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type}
        if self.room_type is not None:
            payload["roomType"] = self.room_type
        if self.date_range is not None:
            start, end = self.date_range
            payload["dateRange"] = {"start": start.isoformat(), "end": end.isoformat()}
        if self.price_predictions:
            payload["pricePredictions"] = [item.to_dict() for item in self.price_predictions]
        if self.availability_forecasts:
            payload["availabilityForecasts"] = [
                item.to_dict() for item in self.availability_forecasts
            ]
        if self.demand_forecasts:
            payload["demandForecasts"] = [item.to_dict() for item in self.demand_forecasts]
        if self.trend_analysis is not None:
            payload["trendAnalysis"] = self.trend_analysis.to_dict()
        return payload


@dataclass(frozen=True)
class ChatbotResponse:
    response: str
    response_type: ResponseType
    confidence_level: float
    data: Optional[ChatbotData] = None
    suggestions: tuple[str, ...] = ()
    processing_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.response,
            "responseType": self.response_type.value,
            "confidenceLevel": self.confidence_level,
            "data": self.data.to_dict() if self.data is not None else None,
            "suggestions": list(self.suggestions),
            "processingTimeMs": self.processing_time_ms,
        }


@dataclass(frozen=True)
class ChatbotSuggestion:
    text: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "type": self.type}


@dataclass(frozen=True)
class ChatbotInteraction:
    interaction_id: str
    session_id: str
    customer_id: Optional[str]
    query: str
    query_intent: Optional[str]
    extracted_entities: str
    response: str
    response_type: str
    confidence_level: float
    processing_time_ms: int
    user_feedback: Optional[int]
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "interactionId": self.interaction_id,
            "sessionId": self.session_id,
            "customerId": self.customer_id,
            "query": self.query,
            "queryIntent": self.query_intent,
            "extractedEntities": self.extracted_entities,
            "response": self.response,
            "responseType": self.response_type,
            "confidenceLevel": self.confidence_level,
            "processingTimeMs": self.processing_time_ms,
            "userFeedback": self.user_feedback,
            "timestamp": self.timestamp,
        }
