"""Domain-level validation rules for forecasting inputs."""

from __future__ import annotations

from hotel_analytics.domain.models import AvailabilityInput, DemandInput, PriceInput


def _validate_rate(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0 and 1")


def validate_price_input(model_input: PriceInput) -> None:
    if not model_input.room_type.strip():
        raise ValueError("room_type must be non-empty")
    if model_input.historical_average_price < 0.0:
        raise ValueError("historical_average_price must be >= 0")
    _validate_rate("historical_occupancy_rate", model_input.historical_occupancy_rate)
    if model_input.local_events < 0:
        raise ValueError("local_events must be >= 0")
    if model_input.number_of_guests < 1:
        raise ValueError("number_of_guests must be >= 1")


def validate_availability_input(model_input: AvailabilityInput) -> None:
    if model_input.total_rooms < 0:
        raise ValueError("total_rooms must be >= 0")
    _validate_rate("historical_occupancy_rate", model_input.historical_occupancy_rate)
    if model_input.local_events < 0:
        raise ValueError("local_events must be >= 0")
    if model_input.data_quality is not None:
        _validate_rate("data_quality", model_input.data_quality)


def validate_demand_input(model_input: DemandInput) -> None:
    if model_input.total_rooms < 0:
        raise ValueError("total_rooms must be >= 0")
    _validate_rate("historical_occupancy_rate", model_input.historical_occupancy_rate)
    if model_input.local_events < 0:
        raise ValueError("local_events must be >= 0")
