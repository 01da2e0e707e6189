"""Rule-based entity extraction for operator queries."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional

from hotel_analytics.domain.calendar import add_months, next_saturday
from hotel_analytics.domain.models import (
    DEFAULT_GUESTS,
    DEFAULT_PERIOD,
    DEFAULT_PRICE_RANGE,
    DEFAULT_ROOM_TYPE,
    EntityBag,
)


ROOM_TYPES = ("standard", "deluxe", "suite", "executive", "presidential")
PRESIDENTIAL_SUITE = "presidential suite"

# Longer phrases first so "next weekend" never resolves as "next week".
PERIOD_PHRASES: tuple[tuple[str, str], ...] = (
    ("next weekend", "next_weekend"),
    ("this weekend", "weekend"),
    ("next month", "next_month"),
    ("this month", "this_month"),
    ("next week", "next_week"),
    ("this week", "this_week"),
    ("holiday", "holiday"),
    ("weekend", "weekend"),
    ("summer", "summer"),
    ("winter", "winter"),
    ("spring", "spring"),
    ("autumn", "fall"),
    ("fall", "fall"),
)

PRICE_RANGE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("low", ("cheap", "affordable", "budget")),
    ("high", ("expensive", "luxury", "premium")),
    ("medium", ("mid", "moderate")),
)

_ISO_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_DATE_MENTION = re.compile(
    r"\b(?:(?P<iso>\d{4}-\d{2}-\d{2})|(?P<relative>tomorrow|next weekend|next week|next month))\b",
    re.IGNORECASE,
)
_GUEST_COUNT = re.compile(r"(\d+)\s*(?:guest|person|people)")
_STANDALONE_COUNT = re.compile(r"\b([1-9]|10)\b")


class EntityExtractor:
    """Pulls dates, room type, guests, period and price range out of text.

    Relative phrases are resolved against an explicit reference date so the
    same text always produces the same entities for the same day.
    """

    def extract(self, text: str, reference_date: Optional[date] = None) -> EntityBag:
        today = reference_date or datetime.now().date()
        lowered = text.lower()
        explicit: set[str] = set()

        dates = self.extract_dates(text, today)
        if dates:
            explicit.add("dates")

        room_type = self._extract_room_type(lowered)
        if room_type is not None:
            explicit.add("room_type")

        guests = self._extract_guest_count(lowered)
        if guests is not None:
            explicit.add("guests")

        period = self._extract_period(lowered)
        if period is not None:
            explicit.add("period")

        price_range = self._extract_price_range(lowered)
        if price_range is not None:
            explicit.add("price_range")

        return EntityBag(
            dates=tuple(dates),
            room_type=room_type or DEFAULT_ROOM_TYPE,
            guests=guests or DEFAULT_GUESTS,
            period=period or DEFAULT_PERIOD,
            price_range=price_range or DEFAULT_PRICE_RANGE,
            explicit=frozenset(explicit),
        )

    def extract_dates(self, text: str, reference_date: date) -> list[date]:
        """Collect ISO and relative date mentions in the order they appear."""
        found: list[date] = []
        for match in _DATE_MENTION.finditer(text):
            iso_value = match.group("iso")
            if iso_value is not None:
                try:
                    found.append(datetime.strptime(iso_value, "%Y-%m-%d").date())
                except ValueError:
                    continue
                continue
            found.append(self._resolve_relative(match.group("relative").lower(), reference_date))
        return found

    @staticmethod
    def _resolve_relative(phrase: str, reference_date: date) -> date:
        if phrase == "tomorrow":
            return reference_date + timedelta(days=1)
        if phrase == "next week":
            return reference_date + timedelta(days=7)
        if phrase == "next month":
            return add_months(reference_date, 1)
        return next_saturday(reference_date)

    @staticmethod
    def _extract_room_type(lowered: str) -> Optional[str]:
        """First vocabulary entry found in the text, in ``ROOM_TYPES`` order."""
        # "presidential suite" names one room type, not a Suite.
        if PRESIDENTIAL_SUITE in lowered:
            return "Presidential"
        for room_type in ROOM_TYPES:
            if room_type in lowered:
                return room_type.capitalize()
        return None

    @staticmethod
    def _extract_guest_count(lowered: str) -> Optional[int]:
        match = _GUEST_COUNT.search(lowered)
        if match is not None and int(match.group(1)) >= 1:
            return int(match.group(1))

        # ISO dates contain bare month/day numbers that are not guest counts.
        without_dates = _ISO_DATE.sub(" ", lowered)
        standalone = _STANDALONE_COUNT.search(without_dates)
        if standalone is not None:
            return int(standalone.group(1))
        return None

    @staticmethod
    def _extract_period(lowered: str) -> Optional[str]:
        for phrase, token in PERIOD_PHRASES:
            if phrase in lowered:
                return token
        return None

    @staticmethod
    def _extract_price_range(lowered: str) -> Optional[str]:
        for bucket, keywords in PRICE_RANGE_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return bucket
        return None
