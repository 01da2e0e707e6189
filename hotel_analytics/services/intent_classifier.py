"""Keyword-table intent classification."""

from __future__ import annotations

from hotel_analytics.domain.models import Intent, IntentType


INTENT_KEYWORDS: dict[IntentType, tuple[str, ...]] = {
    IntentType.PRICE_PREDICTION: (
        "price", "cost", "rate", "pricing", "expensive", "cheap", "affordable",
        "how much", "what will", "predict", "forecast", "estimate",
    ),
    IntentType.AVAILABILITY_FORECAST: (
        "available", "availability", "rooms", "vacant", "occupied", "occupancy",
        "book", "booking", "reserve", "free", "open",
    ),
    IntentType.TREND_ANALYSIS: (
        "trend", "trends", "pattern", "patterns", "analysis", "statistics",
        "historical", "past", "future", "increase", "decrease",
    ),
    IntentType.BOOKING_RECOMMENDATION: (
        "recommend", "suggestion", "best", "optimal", "when", "should",
        "advice", "better", "ideal",
    ),
    IntentType.GENERAL_INQUIRY: (
        "what", "how", "when", "where", "why", "help", "information",
    ),
}

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were",
})

MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 1.0
MIN_TOKEN_LENGTH = 3


def normalize_query(text: str) -> str:
    return text.lower().strip()


def extract_keywords(normalized: str) -> tuple[str, ...]:
    return tuple(
        token
        for token in normalized.split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    )


class IntentClassifier:
    """Scores a query against static intent keyword sets.

    Every keyword found as a substring adds its length to the intent score,
    so longer, more specific phrases outweigh short generic ones. Ties go to
    the intent declared first in the table.
    """

    def __init__(self, keywords: dict[IntentType, tuple[str, ...]] | None = None) -> None:
        self._keywords = dict(keywords or INTENT_KEYWORDS)

    def classify(self, text: str) -> Intent:
        normalized = normalize_query(text)
        tokens = extract_keywords(normalized)

        scores = {
            intent_type: sum(len(keyword) for keyword in keywords if keyword in normalized)
            for intent_type, keywords in self._keywords.items()
        }
        best_type = max(scores, key=lambda intent_type: scores[intent_type])
        best_score = scores[best_type]
        if best_score <= 0:
            best_type = IntentType.GENERAL_INQUIRY

        return Intent(
            type=best_type,
            confidence=self._confidence(best_type, normalized),
            original_query=text,
            keywords=tokens,
            score=best_score,
        )

    def _confidence(self, intent_type: IntentType, normalized: str) -> float:
        keywords = self._keywords.get(intent_type, ())
        if not keywords:
            return MIN_CONFIDENCE
        matched = sum(1 for keyword in keywords if keyword in normalized)
        return min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, matched / len(keywords)))
