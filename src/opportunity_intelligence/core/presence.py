"""Presence signal aggregation.

Runs the three signal sources for one market concurrently and joins their
scores into a presence level, a confidence, and a list of named strong signals.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from .models import (
    DeveloperActivityMetrics,
    MediaCoverageMetrics,
    OverallPresence,
    PresenceLevel,
    PresenceSignals,
    TrendDirection,
    TrendsMetrics,
)

logger = logging.getLogger(__name__)

STRONG_THRESHOLD = 5.0
MODERATE_THRESHOLD = 2.0

CONFIDENCE_BY_LEVEL: dict[PresenceLevel, float] = {
    PresenceLevel.HIGH: 0.9,
    PresenceLevel.MEDIUM: 0.75,
    PresenceLevel.LOW: 0.6,
    PresenceLevel.NONE: 0.4,
}


class PresenceSignalProvider(Protocol):
    """One source of presence evidence. ``measure`` must not raise."""

    source: str

    async def measure(self, country: str, keywords: list[str]): ...


def aggregate_presence(
    github: DeveloperActivityMetrics,
    news: MediaCoverageMetrics,
    trends: TrendsMetrics,
) -> OverallPresence:
    """Combine the three sub-scores into an overall presence verdict."""
    strong_signals: list[str] = []
    signal_count = 0

    for score, label in (
        (github.activity_score, "Active developer community"),
        (news.coverage_score, "Media coverage present"),
        (trends.interest_score, "High search interest"),
    ):
        if score >= STRONG_THRESHOLD:
            strong_signals.append(label)
            signal_count += 1
        elif score >= MODERATE_THRESHOLD:
            signal_count += 1

    if github.recent_repos > 5:
        strong_signals.append("Recent development activity")
    if news.recent_mentions > 10:
        strong_signals.append("Recent media mentions")
    if trends.trend_direction == TrendDirection.UP:
        strong_signals.append("Growing search interest")

    scores = [github.activity_score, news.coverage_score, trends.interest_score]
    average = sum(scores) / len(scores)
    strong_count = len(strong_signals)

    if strong_count >= 3 or average >= 7:
        level = PresenceLevel.HIGH
    elif strong_count >= 2 or average >= 5:
        level = PresenceLevel.MEDIUM
    elif signal_count >= 2 or average >= 2:
        level = PresenceLevel.LOW
    else:
        level = PresenceLevel.NONE

    return OverallPresence(
        presence_level=level,
        confidence=round(CONFIDENCE_BY_LEVEL[level], 2),
        signal_count=signal_count,
        strong_signals=strong_signals,
    )


async def measure_presence(
    github: PresenceSignalProvider,
    news: PresenceSignalProvider,
    trends: PresenceSignalProvider,
    country: str,
    keywords: list[str],
) -> PresenceSignals:
    """Measure all three sources concurrently, then aggregate.

    Providers absorb their own failures. Anything that still escapes
    propagates to the caller, which degrades the whole market.
    """
    github_metrics, news_metrics, trends_metrics = await asyncio.gather(
        github.measure(country, keywords),
        news.measure(country, keywords),
        trends.measure(country, keywords),
    )
    overall = aggregate_presence(github_metrics, news_metrics, trends_metrics)
    logger.info(
        "Presence for %s: %s (github=%.1f news=%.1f trends=%.1f)",
        country,
        overall.presence_level.value,
        github_metrics.activity_score,
        news_metrics.coverage_score,
        trends_metrics.interest_score,
    )
    return PresenceSignals(github=github_metrics, news=news_metrics, trends=trends_metrics, overall=overall)
