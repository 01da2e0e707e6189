"""Calendar rules shared by the extractor and the forecasting models."""

from __future__ import annotations

from datetime import date, timedelta

import pandas as pd


WINTER = "Winter"
SPRING = "Spring"
SUMMER = "Summer"
FALL = "Fall"

SATURDAY = 5

_SEASON_BY_MONTH = {
    12: WINTER, 1: WINTER, 2: WINTER,
    3: SPRING, 4: SPRING, 5: SPRING,
    6: SUMMER, 7: SUMMER, 8: SUMMER,
    9: FALL, 10: FALL, 11: FALL,
}

# (month, day) pairs treated as holidays every year.
FIXED_HOLIDAYS = frozenset({(1, 1), (7, 4), (12, 25)})


def season_for(day: date) -> str:
    return _SEASON_BY_MONTH[day.month]


def is_weekend(day: date) -> bool:
    return day.weekday() >= SATURDAY


def is_holiday(day: date) -> bool:
    return (day.month, day.day) in FIXED_HOLIDAYS


def next_saturday(reference: date) -> date:
    """Upcoming Saturday; a Saturday reference resolves to itself."""
    return reference + timedelta(days=(SATURDAY - reference.weekday() + 7) % 7)


def add_months(day: date, months: int) -> date:
    """Calendar-month offset that clips to the last day of shorter months."""
    return (pd.Timestamp(day) + pd.DateOffset(months=months)).date()


def iter_days(start: date, end: date) -> list[date]:
    """Every day from ``start`` to ``end`` inclusive."""
    if end < start:
        return []
    return [stamp.date() for stamp in pd.date_range(start=start, end=end, freq="D")]


_SEASON_START_MONTH = {SPRING: 3, SUMMER: 6, FALL: 9, WINTER: 12}


def next_season_window(season: str, reference: date) -> tuple[date, date]:
    """Days after ``reference`` in the current or next occurrence of ``season``.

    Each season spans three calendar months starting on the first of
    ``_SEASON_START_MONTH``; winter runs from December into the new year.
    """
    start = date(reference.year, _SEASON_START_MONTH[season], 1)
    if season == WINTER and reference.month <= 2:
        start = date(reference.year - 1, 12, 1)
    end = add_months(start, 3) - timedelta(days=1)
    if end <= reference:
        start = add_months(start, 12)
        end = add_months(start, 3) - timedelta(days=1)
    return max(start, reference + timedelta(days=1)), end


def next_holiday(reference: date) -> date:
    """First fixed holiday strictly after ``reference``."""
    candidates = (
        date(year, month, day)
        for year in (reference.year, reference.year + 1)
        for month, day in FIXED_HOLIDAYS
    )
    return min(day for day in candidates if day > reference)
