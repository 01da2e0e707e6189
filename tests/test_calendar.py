from __future__ import annotations

from datetime import date

import pytest

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


@pytest.mark.parametrize(
    ("day", "season"),
    [
        (date(2026, 1, 15), WINTER),
        (date(2026, 4, 1), SPRING),
        (date(2026, 7, 4), SUMMER),
        (date(2026, 10, 20), FALL),
        (date(2026, 12, 1), WINTER),
    ],
)
def test_season_for(day, season):
    assert season_for(day) == season


def test_next_saturday():
    assert next_saturday(date(2026, 10, 20)) == date(2026, 10, 24)
    assert next_saturday(date(2026, 10, 24)) == date(2026, 10, 24)
    assert next_saturday(date(2026, 10, 25)) == date(2026, 10, 31)


def test_weekend_and_holiday_flags():
    assert is_weekend(date(2026, 10, 17))
    assert not is_weekend(date(2026, 10, 20))
    assert is_holiday(date(2026, 12, 25))
    assert not is_holiday(date(2026, 12, 24))


def test_add_months_clips_to_month_end():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 10, 21), 1) == date(2026, 11, 21)


def test_iter_days_is_inclusive():
    assert iter_days(date(2026, 10, 30), date(2026, 11, 1)) == [
        date(2026, 10, 30),
        date(2026, 10, 31),
        date(2026, 11, 1),
    ]
    assert iter_days(date(2026, 11, 2), date(2026, 11, 1)) == []


@pytest.mark.parametrize(
    ("season", "reference", "expected"),
    [
        (FALL, date(2026, 10, 20), (date(2026, 10, 21), date(2026, 11, 30))),
        (FALL, date(2026, 11, 30), (date(2027, 9, 1), date(2027, 11, 30))),
        (WINTER, date(2026, 10, 20), (date(2026, 12, 1), date(2027, 2, 28))),
        (WINTER, date(2027, 1, 15), (date(2027, 1, 16), date(2027, 2, 28))),
        (SUMMER, date(2026, 10, 20), (date(2027, 6, 1), date(2027, 8, 31))),
        (SPRING, date(2027, 2, 10), (date(2027, 3, 1), date(2027, 5, 31))),
    ],
)
def test_next_season_window(season, reference, expected):
    assert next_season_window(season, reference) == expected


def test_next_holiday_is_strictly_after_reference():
    assert next_holiday(date(2026, 10, 20)) == date(2026, 12, 25)
    assert next_holiday(date(2026, 12, 25)) == date(2027, 1, 1)
    assert next_holiday(date(2027, 1, 1)) == date(2027, 7, 4)
