from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from hotel_analytics.domain.models import HistoricalSnapshot, RoomTypeMetrics, TrendDirection
from hotel_analytics.services.prediction_service import (
    ForecastingService,
    ForecastValidationError,
    NoDataForRequestError,
)
from hotel_analytics.utils.config import get_settings


TODAY = date(2026, 10, 20)


def _snapshot(local_events: dict[date, int] | None = None) -> HistoricalSnapshot:
    metrics = {
        "Standard": RoomTypeMetrics("Standard", 20, 100.0, 0.75),
        "Deluxe": RoomTypeMetrics("Deluxe", 15, 150.0, 0.70),
        "Suite": RoomTypeMetrics("Suite", 8, 250.0, 0.60),
        "Executive": RoomTypeMetrics("Executive", 10, 200.0, 0.65),
    }
    return HistoricalSnapshot(room_metrics=metrics, local_events=local_events or {})


@pytest.fixture
def service() -> ForecastingService:
    return ForecastingService(get_settings())


@pytest.mark.parametrize(
    ("period", "expected"),
    [
        ("this_week", (date(2026, 10, 20), date(2026, 10, 27))),
        ("next_week", (date(2026, 10, 21), date(2026, 10, 27))),
        ("this_month", (date(2026, 10, 20), date(2026, 11, 19))),
        ("next_month", (date(2026, 10, 21), date(2026, 11, 20))),
        ("next30days", (date(2026, 10, 21), date(2026, 11, 19))),
        ("weekend", (date(2026, 10, 24), date(2026, 10, 25))),
        ("next_weekend", (date(2026, 10, 24), date(2026, 10, 25))),
        ("holiday", (date(2026, 12, 25), date(2026, 12, 25))),
        ("fall", (date(2026, 10, 21), date(2026, 11, 30))),
        ("winter", (date(2026, 12, 1), date(2027, 2, 28))),
        ("spring", (date(2027, 3, 1), date(2027, 5, 29))),
        ("summer", (date(2027, 6, 1), date(2027, 8, 29))),
        ("general", (date(2026, 10, 21), date(2026, 10, 27))),
        (None, (date(2026, 10, 21), date(2026, 10, 27))),
    ],
)
def test_resolve_period(service, period, expected):
    assert service.resolve_period(period, TODAY) == expected


def test_reversed_range_is_rejected(service):
    with pytest.raises(ForecastValidationError):
        service.price_predictions("Deluxe", date(2026, 11, 2), date(2026, 11, 1), _snapshot(), TODAY)


def test_range_longer_than_limit_is_rejected():
    service = ForecastingService(replace(get_settings(), max_forecast_days=10))

    with pytest.raises(ForecastValidationError):
        service.price_predictions("Deluxe", date(2026, 11, 1), date(2026, 11, 11), _snapshot(), TODAY)


def test_price_predictions_cover_each_day(service):
    predictions = service.price_predictions(
        "Deluxe", date(2026, 10, 23), date(2026, 10, 25), _snapshot(), TODAY
    )

    assert [item.prediction_date for item in predictions] == [
        date(2026, 10, 23),
        date(2026, 10, 24),
        date(2026, 10, 25),
    ]
    assert predictions[1].predicted_price == pytest.approx(222.75)
    assert predictions[0].factors == ("Last-minute booking",)


def test_price_uses_local_events_from_snapshot(service):
    prediction = service.price_prediction("Deluxe", date(2026, 11, 4), _snapshot({date(2026, 11, 4): 1}), TODAY)

    assert "Local events" in prediction.factors
    assert prediction.trend_direction == TrendDirection.INCREASING


def test_known_base_price_without_history_is_allowed(service):
    prediction = service.price_prediction("presidential", date(2026, 11, 4), _snapshot(), TODAY)

    assert prediction.room_type == "Presidential"
    assert prediction.confidence == pytest.approx(0.9)


def test_unknown_room_type_without_history_has_no_data(service):
    with pytest.raises(NoDataForRequestError):
        service.price_prediction("Penthouse", date(2026, 11, 4), _snapshot(), TODAY)


def test_unknown_room_type_with_history_uses_default_base(service):
    snapshot = HistoricalSnapshot(
        room_metrics={"Penthouse": RoomTypeMetrics("Penthouse", 2, 900.0, 0.5)}
    )

    prediction = service.price_prediction("penthouse", date(2026, 11, 4), snapshot, TODAY)

    assert prediction.room_type == "Penthouse"
    assert prediction.predicted_price == pytest.approx(100 * 1.1)


def test_availability_for_all_inventory_types(service):
    forecasts = service.availability_forecasts(date(2026, 10, 24), date(2026, 10, 25), _snapshot())

    assert len(forecasts) == 8
    assert {item.room_type for item in forecasts} == {"Standard", "Deluxe", "Suite", "Executive"}
    for item in forecasts:
        assert 0 <= item.predicted_available_rooms <= item.total_rooms


def test_availability_for_missing_inventory_type_has_no_data(service):
    with pytest.raises(NoDataForRequestError):
        service.availability_forecasts(
            date(2026, 10, 24), date(2026, 10, 25), _snapshot(), room_types=["Presidential"]
        )


def test_availability_with_empty_inventory_has_no_data(service):
    with pytest.raises(NoDataForRequestError):
        service.availability_forecasts(date(2026, 10, 24), date(2026, 10, 25), HistoricalSnapshot())


def test_demand_for_one_room_type(service):
    forecasts = service.demand_forecasts("suite", date(2026, 10, 24), date(2026, 10, 24), _snapshot())

    assert len(forecasts) == 1
    assert forecasts[0].room_type == "Suite"
    assert forecasts[0].historical_average == 5
    assert [factor.factor_name for factor in forecasts[0].demand_factors] == ["Weekend"]


def test_price_trends_analyse_the_range(service):
    analysis = service.price_trends("Standard", date(2026, 10, 21), date(2026, 11, 19), _snapshot(), TODAY)

    assert len(analysis.trend_points) == 30
    assert analysis.analysis_date == TODAY
    assert analysis.trend_strength >= 0.0


def test_season_window_is_capped_to_forecast_limit():
    service = ForecastingService(replace(get_settings(), max_forecast_days=30))

    assert service.resolve_period("winter", TODAY) == (date(2026, 12, 1), date(2026, 12, 30))


def test_invalid_guest_count_is_a_validation_error(service):
    with pytest.raises(ForecastValidationError):
        service.price_prediction("Deluxe", date(2026, 11, 4), _snapshot(), TODAY, guests=0)
