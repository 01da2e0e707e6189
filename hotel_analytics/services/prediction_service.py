"""Date-range forecasting over the heuristic price, availability and demand models."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional

from hotel_analytics.domain.calendar import (
    FALL,
    SPRING,
    SUMMER,
    WINTER,
    add_months,
    is_holiday,
    is_weekend,
    iter_days,
    next_holiday,
    next_saturday,
    next_season_window,
    season_for,
)
from hotel_analytics.domain.models import (
    DEFAULT_GUESTS,
    AvailabilityForecast,
    AvailabilityInput,
    DemandForecast,
    DemandInput,
    HistoricalSnapshot,
    PriceInput,
    PricePrediction,
    TrendAnalysis,
)
from hotel_analytics.services.forecast_models import (
    lookup_base_price,
    predict_availability,
    predict_demand,
    predict_price,
)
from hotel_analytics.services.trend_analyzer import TrendAnalyzer
from hotel_analytics.utils.config import Settings, get_settings
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)

SEASON_TOKENS = {"spring": SPRING, "summer": SUMMER, "fall": FALL, "winter": WINTER}


class ForecastError(Exception):
    """Base exception for forecasting failures."""


class ForecastValidationError(ForecastError):
    """Raised when a forecast request is malformed (bad range, bad input)."""


class NoDataForRequestError(ForecastError):
    """Raised when no baseline exists for the requested room type."""


class ForecastingService:
    """Runs the pure models day by day over validated date ranges.

    Historical inputs always come from a ``HistoricalSnapshot`` resolved by the
    caller, so nothing here touches storage.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        trend_analyzer: Optional[TrendAnalyzer] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._trend_analyzer = trend_analyzer or TrendAnalyzer()

    def resolve_period(self, period: Optional[str], today: date) -> tuple[date, date]:
        """Map a period token onto an inclusive ``(start, end)`` range."""
        token = (period or "").strip().lower()
        if token == "this_week":
            return today, today + timedelta(days=7)
        if token == "next_week":
            return today + timedelta(days=1), today + timedelta(days=7)
        if token == "this_month":
            return today, today + timedelta(days=30)
        if token == "next_month":
            return today + timedelta(days=1), add_months(today, 1)
        if token == "next30days":
            return today + timedelta(days=1), today + timedelta(days=30)
        if token in {"weekend", "next_weekend"}:
            saturday = next_saturday(today)
            return saturday, saturday + timedelta(days=1)
        if token == "holiday":
            holiday = next_holiday(today)
            return holiday, holiday
        if token in SEASON_TOKENS:
            start, end = next_season_window(SEASON_TOKENS[token], today)
            # Full seasons can run past the forecast window.
            limit = start + timedelta(days=self._settings.max_forecast_days - 1)
            return start, min(end, limit)
        return today + timedelta(days=1), today + timedelta(days=7)

    def validate_range(self, start: date, end: date) -> list[date]:
        if start > end:
            raise ForecastValidationError("start date must be on or before end date")
        days = iter_days(start, end)
        if len(days) > self._settings.max_forecast_days:
            raise ForecastValidationError(
                f"date range must not exceed {self._settings.max_forecast_days} days"
            )
        return days

    def price_prediction(
        self,
        room_type: str,
        target: date,
        snapshot: HistoricalSnapshot,
        today: date,
        guests: int = DEFAULT_GUESTS,
    ) -> PricePrediction:
        if not room_type or not room_type.strip():
            raise ForecastValidationError("room_type must be non-empty")

        metrics = snapshot.metrics_for(room_type)
        average_price = metrics.average_price if metrics is not None else 0.0
        if lookup_base_price(room_type) is None and average_price <= 0:
            raise NoDataForRequestError(f"No pricing data for room type '{room_type}'")

        model_input = PriceInput(
            room_type=metrics.room_type if metrics is not None else room_type.strip().title(),
            check_in_date=target,
            days_in_advance=max(0, (target - today).days),
            is_weekend=is_weekend(target),
            is_holiday=is_holiday(target),
            season=season_for(target),
            historical_average_price=average_price,
            historical_occupancy_rate=metrics.occupancy_rate if metrics is not None else 0.0,
            local_events=snapshot.events_on(target),
            number_of_guests=guests,
        )
        try:
            return predict_price(model_input, self._settings.price_model_version)
        except ValueError as exc:
            raise ForecastValidationError(str(exc)) from exc

    def price_predictions(
        self,
        room_type: str,
        start: date,
        end: date,
        snapshot: HistoricalSnapshot,
        today: date,
        guests: int = DEFAULT_GUESTS,
    ) -> list[PricePrediction]:
        days = self.validate_range(start, end)
        predictions = [
            self.price_prediction(room_type, day, snapshot, today, guests) for day in days
        ]
        logger.info(
            "Price predictions computed | room_type=%s | start=%s | end=%s | count=%s",
            room_type,
            start,
            end,
            len(predictions),
        )
        return predictions

    def _inventory_types(
        self,
        snapshot: HistoricalSnapshot,
        room_types: Optional[Iterable[str]],
    ) -> list[str]:
        requested = list(room_types) if room_types is not None else snapshot.room_types
        if not requested:
            raise NoDataForRequestError("No room inventory is available")
        resolved = []
        for room_type in requested:
            metrics = snapshot.metrics_for(room_type)
            if metrics is None:
                raise NoDataForRequestError(f"No inventory data for room type '{room_type}'")
            resolved.append(metrics.room_type)
        return resolved

    def availability_forecasts(
        self,
        start: date,
        end: date,
        snapshot: HistoricalSnapshot,
        room_types: Optional[Iterable[str]] = None,
        data_quality: Optional[float] = None,
    ) -> list[AvailabilityForecast]:
        days = self.validate_range(start, end)
        forecasts: list[AvailabilityForecast] = []
        for room_type in self._inventory_types(snapshot, room_types):
            metrics = snapshot.metrics_for(room_type)
            for day in days:
                model_input = AvailabilityInput(
                    room_type=room_type,
                    prediction_date=day,
                    total_rooms=metrics.total_rooms,
                    historical_occupancy_rate=metrics.occupancy_rate,
                    is_weekend=is_weekend(day),
                    is_holiday=is_holiday(day),
                    season=season_for(day),
                    local_events=snapshot.events_on(day),
                    data_quality=data_quality,
                )
                try:
                    forecasts.append(predict_availability(model_input))
                except ValueError as exc:
                    raise ForecastValidationError(str(exc)) from exc
        logger.info(
            "Availability forecasts computed | start=%s | end=%s | count=%s",
            start,
            end,
            len(forecasts),
        )
        return forecasts

    def demand_forecasts(
        self,
        room_type: Optional[str],
        start: date,
        end: date,
        snapshot: HistoricalSnapshot,
    ) -> list[DemandForecast]:
        days = self.validate_range(start, end)
        room_types = [room_type] if room_type else None
        forecasts: list[DemandForecast] = []
        for resolved in self._inventory_types(snapshot, room_types):
            metrics = snapshot.metrics_for(resolved)
            for day in days:
                model_input = DemandInput(
                    room_type=resolved,
                    forecast_date=day,
                    total_rooms=metrics.total_rooms,
                    historical_occupancy_rate=metrics.occupancy_rate,
                    is_weekend=is_weekend(day),
                    is_holiday=is_holiday(day),
                    season=season_for(day),
                    local_events=snapshot.events_on(day),
                )
                try:
                    forecasts.append(predict_demand(model_input))
                except ValueError as exc:
                    raise ForecastValidationError(str(exc)) from exc
        return forecasts

    def price_trends(
        self,
        room_type: str,
        start: date,
        end: date,
        snapshot: HistoricalSnapshot,
        today: date,
    ) -> TrendAnalysis:
        predictions = self.price_predictions(room_type, start, end, snapshot, today)
        return self.analyze_trend(predictions, today)

    def analyze_trend(self, predictions: list[PricePrediction], today: date) -> TrendAnalysis:
        return self._trend_analyzer.analyze(predictions, analysis_date=today)
