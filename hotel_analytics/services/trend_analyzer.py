"""Trend synthesis over a series of price predictions."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from hotel_analytics.domain.models import (
    PricePrediction,
    TrendAnalysis,
    TrendDirection,
    TrendPoint,
)
from hotel_analytics.utils.logger import get_logger


logger = get_logger(__name__)

DIRECTION_THRESHOLD = 0.1

INSIGHTS: dict[TrendDirection, tuple[str, ...]] = {
    TrendDirection.INCREASING: (
        "Prices are expected to rise over this period",
        "Consider booking earlier for better rates",
    ),
    TrendDirection.DECREASING: (
        "Prices are expected to decline over this period",
        "You might get better deals by waiting",
    ),
    TrendDirection.STABLE: (
        "Prices are expected to remain stable",
        "Current timing appears optimal for booking",
    ),
}


class TrendAnalysisError(Exception):
    """Raised when a trend cannot be computed from the given series."""


def classify_direction(first: float, last: float) -> TrendDirection:
    if first <= 0:
        return TrendDirection.STABLE
    change = (last - first) / first
    if change > DIRECTION_THRESHOLD:
        return TrendDirection.INCREASING
    if change < -DIRECTION_THRESHOLD:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def trend_strength(series: pd.Series) -> float:
    """Mean absolute fractional change between consecutive points."""
    changes = series.pct_change().replace([np.inf, -np.inf], np.nan).dropna().abs()
    if changes.empty:
        return 0.0
    return float(changes.mean())


class TrendAnalyzer:
    def analyze(
        self,
        predictions: Sequence[PricePrediction],
        analysis_date: Optional[date] = None,
    ) -> TrendAnalysis:
        if not predictions:
            raise TrendAnalysisError("At least one price prediction is required")

        ordered = sorted(predictions, key=lambda item: item.prediction_date)
        series = pd.Series(
            [item.predicted_price for item in ordered],
            index=pd.to_datetime([item.prediction_date for item in ordered]),
            dtype="float64",
        )

        if len(series) == 1:
            direction = TrendDirection.STABLE
            strength = 0.0
        else:
            direction = classify_direction(float(series.iloc[0]), float(series.iloc[-1]))
            strength = trend_strength(series)

        points = tuple(
            TrendPoint(
                date=item.prediction_date,
                value=item.predicted_price,
                label=item.prediction_date.strftime("%b %d"),
            )
            for item in ordered
        )

        insights = list(INSIGHTS[direction])
        if len(series) > 1:
            cheapest = series.idxmin()
            insights.append(
                f"Lowest predicted rate is ${series.min():.2f} on {cheapest.date().isoformat()}"
            )

        logger.debug(
            "Trend analysed | room_type=%s | points=%s | direction=%s | strength=%.4f",
            ordered[0].room_type,
            len(points),
            direction.value,
            strength,
        )
        return TrendAnalysis(
            room_type=ordered[0].room_type,
            analysis_date=analysis_date or datetime.now().date(),
            trend_direction=direction,
            trend_strength=strength,
            trend_points=points,
            insights=tuple(insights),
        )
