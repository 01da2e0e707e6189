"""End-to-end tests for query dispatch through the chatbot core."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timezone

import pytest

from hotel_analytics.domain.models import (
    HistoricalSnapshot,
    IntentType,
    Query,
    ResponseType,
    RoomTypeMetrics,
)
from hotel_analytics.services import prediction_service
from hotel_analytics.services.chatbot_service import (
    APOLOGY_TEXT,
    DEFAULT_SUGGESTIONS,
    RECOMMENDATIONS,
    ChatbotService,
)
from hotel_analytics.services.context_store import ConversationContextStore
from hotel_analytics.services.forecast_models import predict_price
from hotel_analytics.services.prediction_service import ForecastingService
from hotel_analytics.utils.config import get_settings


TUESDAY_NOON = datetime(2026, 10, 20, 12, 0, tzinfo=timezone.utc)


def _snapshot() -> HistoricalSnapshot:
    return HistoricalSnapshot(
        room_metrics={
            "Standard": RoomTypeMetrics("Standard", 20, 100.0, 0.75),
            "Deluxe": RoomTypeMetrics("Deluxe", 15, 150.0, 0.70),
            "Suite": RoomTypeMetrics("Suite", 8, 250.0, 0.60),
            "Executive": RoomTypeMetrics("Executive", 10, 200.0, 0.65),
        }
    )


def _build_service(**overrides) -> ChatbotService:
    settings = replace(get_settings(), **overrides)
    clock = lambda: TUESDAY_NOON  # noqa: E731
    return ChatbotService(
        settings=settings,
        context_store=ConversationContextStore(settings, clock=clock),
        forecasting=ForecastingService(settings),
        clock=clock,
    )


def _ask(service: ChatbotService, text: str, session_id: str = "s1"):
    return service.process(Query(text=text, session_id=session_id), _snapshot())


def test_deluxe_next_weekend_price_query():
    service = _build_service()

    turn = _ask(service, "What will be the price for a deluxe room next weekend?")
    response = turn.response

    assert turn.intent.type == IntentType.PRICE_PREDICTION
    assert turn.entities.room_type == "Deluxe"
    assert turn.entities.dates == (date(2026, 10, 24),)
    assert response.response_type == ResponseType.PREDICTION
    assert response.data.type == "price"
    prediction = response.data.price_predictions[0]
    assert prediction.room_type == "Deluxe"
    assert prediction.prediction_date == date(2026, 10, 24)
    assert prediction.predicted_price == pytest.approx(150 * 1.1 * (1 + 0.2 + 0.15))
    assert "$222.75" in response.response
    assert "100% confidence" in response.response
    assert response.confidence_level == pytest.approx(1.0)
    assert len(response.suggestions) == 3
    assert response.processing_time_ms >= 0


def test_price_without_date_defaults_to_lead_days():
    service = _build_service(default_forecast_lead_days=7)

    response = _ask(service, "What is the price of a suite?").response

    assert response.data.price_predictions[0].prediction_date == date(2026, 10, 27)


def test_price_uses_date_nearest_today():
    service = _build_service()

    response = _ask(service, "price for standard on 2026-12-01 or tomorrow").response

    assert response.data.price_predictions[0].prediction_date == date(2026, 10, 21)


def test_session_merge_carries_room_type_into_follow_up():
    service = _build_service()

    _ask(service, "Show me Suite pricing")
    turn = _ask(service, "for next week")

    context = service.context_store.get("s1")
    assert context.extracted_entities["room_type"] == "Suite"
    assert context.extracted_entities["period"] == "next_week"
    assert context.recent_queries == ("Show me Suite pricing", "for next week")
    assert turn.intent.type == IntentType.PRICE_PREDICTION
    assert turn.response.data.room_type == "Suite"
    assert turn.response.data.price_predictions[0].prediction_date == date(2026, 10, 27)


def test_follow_up_after_general_inquiry_stays_general():
    service = _build_service()

    _ask(service, "hello")
    turn = _ask(service, "for next week")

    assert turn.intent.type == IntentType.GENERAL_INQUIRY
    assert turn.response.response_type == ResponseType.INFORMATION


def test_sessions_do_not_share_entities():
    service = _build_service()

    _ask(service, "Show me Suite pricing", session_id="a")
    turn = _ask(service, "What is the price?", session_id="b")

    assert turn.response.data.room_type == "Standard"


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_query_returns_error_response(text):
    service = _build_service()

    response = service.handle(Query(text=text, session_id="s1"), _snapshot())

    assert response.response_type == ResponseType.ERROR
    assert response.confidence_level == 0.0
    assert service.context_store.get("s1") is None


def test_availability_for_all_room_types_with_demand():
    service = _build_service()

    response = _ask(service, "Show me availability for next week").response

    assert response.response_type == ResponseType.PREDICTION
    assert response.data.type == "availability"
    assert response.data.date_range == (date(2026, 10, 21), date(2026, 10, 27))
    assert len(response.data.availability_forecasts) == 28
    assert len(response.data.demand_forecasts) == 28
    assert response.data.room_type is None
    assert "occupancy" in response.response


def test_availability_for_one_room_type():
    service = _build_service()

    response = _ask(service, "How many deluxe rooms are available this weekend?").response

    assert response.data.type == "availability"
    assert {item.room_type for item in response.data.availability_forecasts} == {"Deluxe"}
    assert response.data.date_range == (date(2026, 10, 24), date(2026, 10, 25))


def test_missing_inventory_returns_information_response():
    service = _build_service()

    response = _ask(service, "Is there availability for presidential rooms?").response

    assert response.response_type == ResponseType.INFORMATION
    assert response.confidence_level == pytest.approx(0.3)
    assert response.data is None


def test_trend_query_uses_trend_analyzer():
    service = _build_service()

    response = _ask(service, "Show me price trends for standard rooms").response

    assert response.response_type == ResponseType.PREDICTION
    assert response.data.type == "trend"
    assert response.data.trend_analysis is not None
    assert len(response.data.trend_analysis.trend_points) == 30
    assert response.data.date_range == (date(2026, 10, 21), date(2026, 11, 19))


def test_trend_query_between_two_dates():
    service = _build_service()

    response = _ask(service, "Show price trends for suite from 2026-11-01 to 2026-11-10").response

    assert response.data.type == "trend"
    assert response.data.date_range == (date(2026, 11, 1), date(2026, 11, 10))
    assert len(response.data.trend_analysis.trend_points) == 10


def test_recommendation_keyed_by_price_range():
    service = _build_service()

    response = _ask(service, "Can you recommend the best cheap option?").response

    assert response.response_type == ResponseType.SUGGESTION
    assert response.response == RECOMMENDATIONS["low"]
    assert response.data is None


def test_general_inquiry_returns_help_and_suggestions():
    service = _build_service()

    response = _ask(service, "hello").response

    assert response.response_type == ResponseType.INFORMATION
    assert response.suggestions == DEFAULT_SUGGESTIONS
    assert len(response.suggestions) == 4


def test_unexpected_failure_becomes_error_response(monkeypatch):
    service = _build_service()

    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(service._forecasting, "price_prediction", explode)

    response = _ask(service, "What will be the price for a deluxe room next weekend?").response

    assert response.response_type == ResponseType.ERROR
    assert response.confidence_level == 0.0
    assert response.response == APOLOGY_TEXT
    assert "boom" not in response.response


def test_response_serializes_to_camel_case():
    service = _build_service()

    payload = _ask(service, "What will be the price for a deluxe room next weekend?").response.to_dict()

    assert payload["responseType"] == "prediction"
    assert payload["data"]["type"] == "price"
    assert payload["data"]["pricePredictions"][0]["predictedPrice"] == 222.75
    assert payload["data"]["dateRange"] == {"start": "2026-10-24", "end": "2026-10-24"}


def test_typed_dates_override_period_from_earlier_turn():
    service = _build_service()

    _ask(service, "show price trends for deluxe next month")
    response = _ask(service, "show price trends from 2026-12-01 to 2026-12-05").response

    assert response.data.type == "trend"
    assert response.data.room_type == "Deluxe"
    assert response.data.date_range == (date(2026, 12, 1), date(2026, 12, 5))


def test_range_over_forecast_limit_is_reported_not_apologised(caplog):
    service = _build_service(max_forecast_days=90)

    with caplog.at_level(logging.INFO):
        response = _ask(service, "price trends from 2026-11-01 to 2027-06-01").response

    assert response.response_type == ResponseType.ERROR
    assert response.response != APOLOGY_TEXT
    assert "90 days" in response.response
    assert not [record for record in caplog.records if record.levelno >= logging.ERROR]


def test_season_period_resolves_to_that_season():
    service = _build_service()

    response = _ask(service, "Show me availability in summer").response

    assert response.data.type == "availability"
    assert response.data.date_range == (date(2027, 6, 1), date(2027, 8, 29))


def test_guest_count_reaches_price_model(monkeypatch):
    service = _build_service()
    seen = []

    def recording_predict_price(model_input, model_version):
        seen.append(model_input.number_of_guests)
        return predict_price(model_input, model_version)

    monkeypatch.setattr(prediction_service, "predict_price", recording_predict_price)

    _ask(service, "What will be the price for a deluxe room for 3 guests next weekend?")

    assert seen == [3]
