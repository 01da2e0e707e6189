"""Deterministic heuristic models for price, availability and demand.

Each model is a pure function of its typed input and the static tables in
this module: no I/O, no clock, no randomness.
"""

from __future__ import annotations

import math
from typing import Optional

from hotel_analytics.domain.calendar import FALL, SPRING, SUMMER, WINTER
from hotel_analytics.domain.constraints import (
    validate_availability_input,
    validate_demand_input,
    validate_price_input,
)
from hotel_analytics.domain.models import (
    AvailabilityForecast,
    AvailabilityInput,
    DemandFactor,
    DemandForecast,
    DemandInput,
    PriceInput,
    PricePrediction,
    TrendDirection,
    clamp_unit,
)


BASE_PRICES: dict[str, float] = {
    "Standard": 100.0,
    "Deluxe": 150.0,
    "Executive": 200.0,
    "Suite": 250.0,
    "Presidential": 500.0,
    "Presidential Suite": 500.0,
}
DEFAULT_BASE_PRICE = 100.0

PRICE_SEASONAL_FACTORS = {WINTER: 0.8, SPRING: 1.0, SUMMER: 1.3, FALL: 1.1}
OCCUPANCY_SEASONAL_FACTORS = {WINTER: 0.8, SPRING: 1.0, SUMMER: 1.2, FALL: 1.1}

WEEKEND_PREMIUM = 0.2
HOLIDAY_PREMIUM = 0.3
LAST_MINUTE_PREMIUM = 0.15
EARLY_BOOKING_DISCOUNT = 0.1
LOCAL_EVENT_PREMIUM = 0.1
MIN_DEMAND_ADJUSTMENT = 0.5
MAX_DEMAND_ADJUSTMENT = 2.0
LAST_MINUTE_DAYS = 7
EARLY_BOOKING_DAYS = 30
DISTANT_BOOKING_DAYS = 60

DEFAULT_OCCUPANCY_RATE = 0.7
AVAILABILITY_CONFIDENCE = 0.8
STRONG_PACE_OCCUPANCY = 0.75
SOFT_PACE_OCCUPANCY = 0.5

DEMAND_EVENT_FACTOR = 1.2
DEMAND_TREND_THRESHOLD = 0.15
DEMAND_CONFIDENCE = 0.75


def lookup_base_price(room_type: str) -> Optional[float]:
    """Base nightly rate for a known room type, ``None`` when unknown."""
    return BASE_PRICES.get(room_type.strip().title())


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# --- Price -----------------------------------------------------------------

def price_demand_adjustment(model_input: PriceInput) -> float:
    adjustment = 1.0
    if model_input.is_weekend:
        adjustment += WEEKEND_PREMIUM
    if model_input.is_holiday:
        adjustment += HOLIDAY_PREMIUM
    if model_input.days_in_advance > EARLY_BOOKING_DAYS:
        adjustment -= EARLY_BOOKING_DISCOUNT
    elif model_input.days_in_advance < LAST_MINUTE_DAYS:
        adjustment += LAST_MINUTE_PREMIUM
    adjustment += LOCAL_EVENT_PREMIUM * model_input.local_events
    return max(MIN_DEMAND_ADJUSTMENT, min(MAX_DEMAND_ADJUSTMENT, adjustment))


def price_confidence(model_input: PriceInput) -> float:
    confidence = 0.7
    if model_input.days_in_advance <= EARLY_BOOKING_DAYS:
        confidence += 0.2
    if model_input.historical_average_price > 0:
        confidence += 0.1
    return clamp_unit(round(confidence, 4))


def price_trend_direction(model_input: PriceInput) -> TrendDirection:
    if model_input.is_holiday or model_input.local_events > 0:
        return TrendDirection.INCREASING
    if model_input.days_in_advance > DISTANT_BOOKING_DAYS:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def price_factors(model_input: PriceInput) -> tuple[str, ...]:
    factors: list[str] = []
    if model_input.is_weekend:
        factors.append("Weekend premium")
    if model_input.is_holiday:
        factors.append("Holiday premium")
    if model_input.local_events > 0:
        factors.append("Local events")
    if model_input.days_in_advance < LAST_MINUTE_DAYS:
        factors.append("Last-minute booking")
    if model_input.days_in_advance > EARLY_BOOKING_DAYS:
        factors.append("Early booking discount")
    return tuple(factors)


def predict_price(model_input: PriceInput, model_version: str = "v2.0") -> PricePrediction:
    validate_price_input(model_input)
    base = lookup_base_price(model_input.room_type) or DEFAULT_BASE_PRICE
    seasonal = PRICE_SEASONAL_FACTORS.get(model_input.season, 1.0)
    predicted_price = max(0.0, base * seasonal * price_demand_adjustment(model_input))
    return PricePrediction(
        room_type=model_input.room_type,
        prediction_date=model_input.check_in_date,
        predicted_price=predicted_price,
        confidence=price_confidence(model_input),
        model_version=model_version,
        trend_direction=price_trend_direction(model_input),
        factors=price_factors(model_input),
    )


# --- Availability ----------------------------------------------------------

def booking_pace_factor(occupancy_rate: float) -> Optional[str]:
    """Booking-pace signal derived from historical occupancy."""
    if occupancy_rate >= STRONG_PACE_OCCUPANCY:
        return "Strong booking pace"
    if 0.0 < occupancy_rate <= SOFT_PACE_OCCUPANCY:
        return "Soft booking pace"
    return None


def predict_availability(model_input: AvailabilityInput) -> AvailabilityForecast:
    validate_availability_input(model_input)
    base_occupancy = (
        model_input.historical_occupancy_rate
        if model_input.historical_occupancy_rate > 0
        else DEFAULT_OCCUPANCY_RATE
    )
    seasonal = OCCUPANCY_SEASONAL_FACTORS.get(model_input.season, 1.0)
    event_adjustment = 1.0 + LOCAL_EVENT_PREMIUM * model_input.local_events
    occupancy = clamp_unit(base_occupancy * seasonal * event_adjustment)

    total = model_input.total_rooms
    available = math.floor(total * (1.0 - occupancy))
    available = max(0, min(total, available))

    factors: list[str] = []
    if model_input.is_weekend:
        factors.append("Weekend demand")
    if model_input.is_holiday:
        factors.append("Holiday period")
    if model_input.local_events > 0:
        factors.append("Local events")
    pace = booking_pace_factor(model_input.historical_occupancy_rate)
    if pace is not None:
        factors.append(pace)

    confidence = (
        model_input.data_quality
        if model_input.data_quality is not None
        else AVAILABILITY_CONFIDENCE
    )
    return AvailabilityForecast(
        room_type=model_input.room_type,
        forecast_date=model_input.prediction_date,
        total_rooms=total,
        predicted_available_rooms=available,
        predicted_occupancy_rate=occupancy,
        confidence=clamp_unit(confidence),
        factors=tuple(factors),
    )


# --- Demand ----------------------------------------------------------------

def demand_factors(model_input: DemandInput) -> tuple[DemandFactor, ...]:
    factors: list[DemandFactor] = []
    if model_input.is_weekend:
        factors.append(
            DemandFactor(
                factor_name="Weekend",
                impact=WEEKEND_PREMIUM,
                description="Weekend dates typically have higher demand",
            )
        )
    if model_input.is_holiday:
        factors.append(
            DemandFactor(
                factor_name="Holiday",
                impact=HOLIDAY_PREMIUM,
                description="Holiday periods show increased booking demand",
            )
        )
    if model_input.local_events > 0:
        factors.append(
            DemandFactor(
                factor_name="Local events",
                impact=round(DEMAND_EVENT_FACTOR - 1.0, 4),
                description=f"{model_input.local_events} local event(s) scheduled",
            )
        )
    return tuple(factors)


def demand_trend_direction(variation: float) -> TrendDirection:
    if variation > DEMAND_TREND_THRESHOLD:
        return TrendDirection.INCREASING
    if variation < -DEMAND_TREND_THRESHOLD:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def predict_demand(model_input: DemandInput) -> DemandForecast:
    validate_demand_input(model_input)
    historical = round_half_up(model_input.total_rooms * model_input.historical_occupancy_rate)
    seasonal = PRICE_SEASONAL_FACTORS.get(model_input.season, 1.0)
    event_factor = DEMAND_EVENT_FACTOR if model_input.local_events > 0 else 1.0
    predicted = max(0, round_half_up(historical * seasonal * event_factor))
    variation = (predicted - historical) / historical if historical else 0.0

    return DemandForecast(
        room_type=model_input.room_type,
        forecast_date=model_input.forecast_date,
        predicted_demand=predicted,
        historical_average=historical,
        demand_variation=variation,
        trend_direction=demand_trend_direction(variation),
        confidence=DEMAND_CONFIDENCE,
        demand_factors=demand_factors(model_input),
    )
