"""Search-interest estimate: simulated stand-in for a trends API.

No live query is made. Interest is derived from whether the keywords name a
popular business model, a per-country multiplier, and a bounded random jitter.
Pass a seeded ``random.Random`` to pin the jitter.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from ..models import TrendDirection, TrendsMetrics

logger = logging.getLogger(__name__)

POPULAR_KEYWORDS = [
    "food delivery",
    "video call",
    "language learning",
    "stock trading",
    "design",
    "productivity",
]

POPULAR_KEYWORD_BOOST = 30

COUNTRY_MULTIPLIERS: dict[str, float] = {
    "BR": 1.2,  # high mobile adoption
    "IN": 1.4,  # growing digital economy
    "NG": 1.1,
    "ID": 1.3,  # large online population
    "MX": 1.0,
}

JITTER_MIN = 0.7
JITTER_SPAN = 0.6


def has_popular_keyword(keywords: list[str]) -> bool:
    return any(popular in keyword.lower() for keyword in keywords for popular in POPULAR_KEYWORDS)


def trend_direction_for(interest: int) -> TrendDirection:
    if interest > 60:
        return TrendDirection.UP
    if interest < 20:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def calculate_interest_score(interest: int, direction: TrendDirection, popular: bool) -> float:
    """Normalize an interest level (0-100) into a 0-10 score."""
    score = (interest / 100) * 5
    if direction == TrendDirection.UP:
        score += 2
    elif direction == TrendDirection.DOWN:
        score -= 1
    if popular:
        score += 1
    return round(min(max(score, 0.0), 10.0), 1)


class SearchInterestProvider:
    """Estimates search interest for keywords in a country."""

    source = "trends"

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    async def measure(self, country: str, keywords: list[str]) -> TrendsMetrics:
        try:
            return self._simulate(country, keywords)
        except Exception as exc:
            logger.warning("Search interest estimate failed for %s: %s", country, exc)
            return TrendsMetrics.neutral(str(exc))

    def _simulate(self, country: str, keywords: list[str]) -> TrendsMetrics:
        popular = has_popular_keyword(keywords)
        base = POPULAR_KEYWORD_BOOST if popular else 0
        base *= COUNTRY_MULTIPLIERS.get(country, 1.0)
        base *= JITTER_MIN + self._rng.random() * JITTER_SPAN

        interest = min(max(round(base), 0), 100)
        direction = trend_direction_for(interest)
        return TrendsMetrics(
            search_volume=interest * 100,
            interest=interest,
            trend_direction=direction,
            interest_score=calculate_interest_score(interest, direction, popular),
        )
