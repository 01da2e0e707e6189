"""HTTP controller layer for direct forecasting access."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from hotel_analytics.controllers.dependencies import get_workflow_service
from hotel_analytics.services.analytics_service import AnalyticsWorkflowService
from hotel_analytics.services.prediction_service import (
    ForecastValidationError,
    NoDataForRequestError,
)
from hotel_analytics.services.trend_analyzer import TrendAnalysisError
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/api/predictions", tags=["predictions"])


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PricePredictionResponse(CamelModel):
    room_type: str = Field(alias="roomType")
    prediction_date: date = Field(alias="predictionDate")
    predicted_price: float = Field(alias="predictedPrice", ge=0.0)
    confidence_level: float = Field(alias="confidenceLevel", ge=0.0, le=1.0)
    model_version: str = Field(alias="modelVersion")
    trend_direction: str = Field(alias="trendDirection")
    factors: list[str]


class AvailabilityForecastResponse(CamelModel):
    room_type: str = Field(alias="roomType")
    forecast_date: date = Field(alias="forecastDate")
    total_rooms: int = Field(alias="totalRooms", ge=0)
    predicted_available_rooms: int = Field(alias="predictedAvailableRooms", ge=0)
    predicted_occupancy_rate: float = Field(alias="predictedOccupancyRate", ge=0.0, le=1.0)
    confidence_level: float = Field(alias="confidenceLevel", ge=0.0, le=1.0)
    factors: list[str]


class DemandFactorResponse(CamelModel):
    factor_name: str = Field(alias="factorName")
    impact: float
    description: str


class DemandForecastResponse(CamelModel):
    room_type: str = Field(alias="roomType")
    forecast_date: date = Field(alias="forecastDate")
    predicted_demand: int = Field(alias="predictedDemand", ge=0)
    historical_average: int = Field(alias="historicalAverage", ge=0)
    demand_variation: float = Field(alias="demandVariation")
    trend_direction: str = Field(alias="trendDirection")
    confidence_level: float = Field(alias="confidenceLevel", ge=0.0, le=1.0)
    demand_factors: list[DemandFactorResponse] = Field(alias="demandFactors")


class TrendPointResponse(CamelModel):
    point_date: date = Field(alias="date")
    value: float
    label: str


class TrendAnalysisResponse(CamelModel):
    room_type: str = Field(alias="roomType")
    analysis_date: date = Field(alias="analysisDate")
    trend_direction: str = Field(alias="trendDirection")
    trend_strength: float = Field(alias="trendStrength", ge=0.0)
    trend_points: list[TrendPointResponse] = Field(alias="trendPoints")
    insights: list[str]


def _forecast_http_error(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, (ForecastValidationError, TrendAnalysisError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NoDataForRequestError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    logger.exception("Unexpected %s failure", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to generate {action}",
    )


@router.get(
    "/pricing",
    response_model=list[PricePredictionResponse],
    status_code=status.HTTP_200_OK,
)
async def get_price_predictions(
    room_type: str = Query(alias="roomType", min_length=1),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> list[PricePredictionResponse]:
    try:
        rows = service.price_predictions(room_type, start_date, end_date)
    except Exception as exc:
        raise _forecast_http_error(exc, "price predictions") from exc
    return [PricePredictionResponse.model_validate(row) for row in rows]


@router.get(
    "/availability",
    response_model=list[AvailabilityForecastResponse],
    status_code=status.HTTP_200_OK,
)
async def get_availability_forecasts(
    period: str = Query(default="next_week"),
    room_type: Optional[str] = Query(default=None, alias="roomType"),
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> list[AvailabilityForecastResponse]:
    try:
        rows = service.availability_forecasts(period, room_type)
    except Exception as exc:
        raise _forecast_http_error(exc, "availability forecasts") from exc
    return [AvailabilityForecastResponse.model_validate(row) for row in rows]


@router.get(
    "/demand",
    response_model=list[DemandForecastResponse],
    status_code=status.HTTP_200_OK,
)
async def get_demand_forecasts(
    room_type: Optional[str] = Query(default=None, alias="roomType"),
    period: str = Query(default="next_week"),
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> list[DemandForecastResponse]:
    try:
        rows = service.demand_forecasts(period, room_type)
    except Exception as exc:
        raise _forecast_http_error(exc, "demand forecasts") from exc
    return [DemandForecastResponse.model_validate(row) for row in rows]


@router.get(
    "/trends",
    response_model=TrendAnalysisResponse,
    status_code=status.HTTP_200_OK,
)
async def get_price_trends(
    room_type: str = Query(alias="roomType", min_length=1),
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    service: AnalyticsWorkflowService = Depends(get_workflow_service),
) -> TrendAnalysisResponse:
    try:
        analysis = service.price_trends(room_type, start_date, end_date)
    except Exception as exc:
        raise _forecast_http_error(exc, "price trends") from exc
    return TrendAnalysisResponse.model_validate(analysis)
