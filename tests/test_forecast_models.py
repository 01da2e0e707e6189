"""Tests for the deterministic price, availability and demand models."""

from __future__ import annotations

from datetime import date

import pytest

from hotel_analytics.domain.calendar import FALL, SPRING, SUMMER, WINTER
from hotel_analytics.domain.models import (
    AvailabilityInput,
    DemandInput,
    PriceInput,
    TrendDirection,
)
from hotel_analytics.services.forecast_models import (
    predict_availability,
    predict_demand,
    predict_price,
    round_half_up,
)


def price_input(**overrides) -> PriceInput:
    """A Deluxe stay on Saturday 2026-10-24 booked four days ahead."""
    defaults = {
        "room_type": "Deluxe",
        "check_in_date": date(2026, 10, 24),
        "days_in_advance": 4,
        "is_weekend": True,
        "is_holiday": False,
        "season": FALL,
        "historical_average_price": 150.0,
        "historical_occupancy_rate": 0.7,
    }
    defaults.update(overrides)
    return PriceInput(**defaults)


def availability_input(**overrides) -> AvailabilityInput:
    defaults = {
        "room_type": "Standard",
        "prediction_date": date(2026, 10, 21),
        "total_rooms": 20,
        "historical_occupancy_rate": 0.75,
        "is_weekend": False,
        "is_holiday": False,
        "season": FALL,
    }
    defaults.update(overrides)
    return AvailabilityInput(**defaults)


def demand_input(**overrides) -> DemandInput:
    defaults = {
        "room_type": "Standard",
        "forecast_date": date(2026, 10, 21),
        "total_rooms": 20,
        "historical_occupancy_rate": 0.75,
        "is_weekend": False,
        "is_holiday": False,
        "season": FALL,
    }
    defaults.update(overrides)
    return DemandInput(**defaults)


# --- Price ---

def test_weekend_last_minute_deluxe_price():
    prediction = predict_price(price_input())

    assert prediction.predicted_price == pytest.approx(150 * 1.1 * 1.35)
    assert prediction.confidence == pytest.approx(1.0)
    assert prediction.model_version == "v2.0"
    assert prediction.trend_direction == TrendDirection.STABLE
    assert prediction.factors == ("Weekend premium", "Last-minute booking")


def test_price_model_is_deterministic():
    assert predict_price(price_input()) == predict_price(price_input())


def test_early_booking_discount_and_confidence():
    prediction = predict_price(price_input(days_in_advance=45, is_weekend=False))

    assert prediction.predicted_price == pytest.approx(150 * 1.1 * 0.9)
    assert prediction.confidence == pytest.approx(0.8)
    assert prediction.factors == ("Early booking discount",)
    assert prediction.trend_direction == TrendDirection.STABLE


def test_distant_booking_trends_down():
    prediction = predict_price(price_input(days_in_advance=61))

    assert prediction.trend_direction == TrendDirection.DECREASING


def test_holiday_premium_trends_up():
    prediction = predict_price(
        price_input(
            room_type="Standard",
            check_in_date=date(2026, 12, 25),
            days_in_advance=10,
            is_weekend=False,
            is_holiday=True,
            season=WINTER,
            historical_average_price=0.0,
        )
    )

    assert prediction.predicted_price == pytest.approx(100 * 0.8 * 1.3)
    assert prediction.confidence == pytest.approx(0.9)
    assert prediction.trend_direction == TrendDirection.INCREASING
    assert prediction.factors == ("Holiday premium",)


def test_demand_adjustment_is_capped():
    prediction = predict_price(
        price_input(
            room_type="Standard",
            days_in_advance=10,
            is_weekend=False,
            season=SPRING,
            local_events=20,
        )
    )

    assert prediction.predicted_price == pytest.approx(200.0)
    assert "Local events" in prediction.factors
    assert prediction.trend_direction == TrendDirection.INCREASING


def test_unknown_room_type_uses_default_base():
    prediction = predict_price(
        price_input(room_type="Penthouse", days_in_advance=10, is_weekend=False, season=SPRING)
    )

    assert prediction.predicted_price == pytest.approx(100.0)


def test_base_price_lookup_is_case_insensitive():
    prediction = predict_price(
        price_input(room_type="presidential", days_in_advance=10, is_weekend=False, season=SPRING)
    )

    assert prediction.predicted_price == pytest.approx(500.0)


def test_invalid_price_input_raises():
    with pytest.raises(ValueError):
        predict_price(price_input(local_events=-1))
    with pytest.raises(ValueError):
        predict_price(price_input(room_type="  "))


# --- Availability ---

def test_availability_from_historical_occupancy():
    forecast = predict_availability(availability_input(is_weekend=True))

    assert forecast.predicted_occupancy_rate == pytest.approx(0.825)
    assert forecast.predicted_available_rooms == 3
    assert forecast.confidence == pytest.approx(0.8)
    assert forecast.factors == ("Weekend demand", "Strong booking pace")


def test_availability_saturates_at_full_occupancy():
    forecast = predict_availability(
        availability_input(historical_occupancy_rate=0.95, season=SUMMER, local_events=2)
    )

    assert forecast.predicted_occupancy_rate == 1.0
    assert forecast.predicted_available_rooms == 0
    assert "Local events" in forecast.factors


def test_availability_defaults_occupancy_when_absent():
    forecast = predict_availability(
        availability_input(total_rooms=10, historical_occupancy_rate=0.0, season=SPRING)
    )

    assert forecast.predicted_occupancy_rate == pytest.approx(0.7)
    assert forecast.predicted_available_rooms == 3
    assert forecast.factors == ()


def test_soft_booking_pace_factor():
    forecast = predict_availability(availability_input(historical_occupancy_rate=0.4))

    assert "Soft booking pace" in forecast.factors


def test_data_quality_overrides_confidence():
    forecast = predict_availability(availability_input(data_quality=0.55))

    assert forecast.confidence == pytest.approx(0.55)


def test_zero_inventory_has_no_availability():
    forecast = predict_availability(availability_input(total_rooms=0))

    assert forecast.predicted_available_rooms == 0


@pytest.mark.parametrize("total", [0, 1, 8, 20, 150])
@pytest.mark.parametrize("occupancy", [0.0, 0.3, 0.75, 1.0])
@pytest.mark.parametrize("season", [WINTER, SPRING, SUMMER, FALL])
def test_available_rooms_stay_within_inventory(total, occupancy, season):
    forecast = predict_availability(
        availability_input(total_rooms=total, historical_occupancy_rate=occupancy, season=season, local_events=1)
    )

    assert 0 <= forecast.predicted_available_rooms <= total
    assert 0.0 <= forecast.predicted_occupancy_rate <= 1.0


def test_invalid_availability_input_raises():
    with pytest.raises(ValueError):
        predict_availability(availability_input(total_rooms=-1))
    with pytest.raises(ValueError):
        predict_availability(availability_input(historical_occupancy_rate=1.5))


# --- Demand ---

def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_fall_demand_is_stable():
    forecast = predict_demand(demand_input())

    assert forecast.historical_average == 15
    assert forecast.predicted_demand == 17
    assert forecast.demand_variation == pytest.approx(2 / 15)
    assert forecast.trend_direction == TrendDirection.STABLE
    assert forecast.confidence == pytest.approx(0.75)


def test_summer_demand_increases():
    forecast = predict_demand(demand_input(season=SUMMER))

    assert forecast.predicted_demand == 20
    assert forecast.trend_direction == TrendDirection.INCREASING


def test_winter_demand_variation_is_signed():
    forecast = predict_demand(demand_input(season=WINTER))

    assert forecast.predicted_demand == 12
    assert forecast.demand_variation == pytest.approx(-0.2)
    assert forecast.trend_direction == TrendDirection.DECREASING


def test_local_events_lift_demand():
    forecast = predict_demand(demand_input(season=SUMMER, local_events=1))

    assert forecast.predicted_demand == 23


def test_zero_history_has_zero_variation():
    forecast = predict_demand(demand_input(historical_occupancy_rate=0.0))

    assert forecast.historical_average == 0
    assert forecast.demand_variation == 0.0
    assert forecast.trend_direction == TrendDirection.STABLE


def test_demand_factors_are_named():
    forecast = predict_demand(demand_input(is_weekend=True, is_holiday=True, local_events=2))

    names = [factor.factor_name for factor in forecast.demand_factors]
    impacts = [factor.impact for factor in forecast.demand_factors]
    assert names == ["Weekend", "Holiday", "Local events"]
    assert impacts == pytest.approx([0.2, 0.3, 0.2])
    assert forecast.demand_factors[0].description == "Weekend dates typically have higher demand"
