"""Shared fixtures: stub signal providers and metric builders."""

from __future__ import annotations

import pytest

from opportunity_intelligence.core.catalog import KNOWN_MODELS
from opportunity_intelligence.core.markets import SEED_MARKETS
from opportunity_intelligence.core.models import (
    DeveloperActivityMetrics,
    MediaCoverageMetrics,
    OverallPresence,
    PresenceLevel,
    PresenceSignals,
    TrendDirection,
    TrendsMetrics,
)
from opportunity_intelligence.core.presence import aggregate_presence


class StubProvider:
    """Returns fixed metrics and records every call."""

    def __init__(self, source: str, metrics, fail_for: tuple[str, ...] = ()):
        self.source = source
        self.metrics = metrics
        self.fail_for = fail_for
        self.calls: list[tuple[str, list[str]]] = []

    async def measure(self, country: str, keywords: list[str]):
        self.calls.append((country, list(keywords)))
        if country in self.fail_for:
            raise RuntimeError(f"{self.source} exploded for {country}")
        if callable(self.metrics):
            return self.metrics(country)
        return self.metrics


def make_presence(
    github: float = 0.0,
    news: float = 0.0,
    trends: float = 0.0,
    strong_signals: list[str] | None = None,
    level: PresenceLevel = PresenceLevel.NONE,
) -> PresenceSignals:
    return PresenceSignals(
        github=DeveloperActivityMetrics(activity_score=github),
        news=MediaCoverageMetrics(coverage_score=news),
        trends=TrendsMetrics(interest_score=trends),
        overall=OverallPresence(
            presence_level=level,
            confidence=0.4,
            signal_count=0,
            strong_signals=strong_signals or [],
        ),
    )


@pytest.fixture
def presence_factory():
    return make_presence


@pytest.fixture
def aggregated_presence():
    """Build PresenceSignals with a real aggregated overall section."""

    def _build(github: float, news: float, trends: float, **extra) -> PresenceSignals:
        gh = DeveloperActivityMetrics(activity_score=github, recent_repos=extra.get("recent_repos", 0))
        nw = MediaCoverageMetrics(coverage_score=news, recent_mentions=extra.get("recent_mentions", 0))
        tr = TrendsMetrics(
            interest_score=trends,
            trend_direction=extra.get("trend_direction", TrendDirection.STABLE),
        )
        return PresenceSignals(github=gh, news=nw, trends=tr, overall=aggregate_presence(gh, nw, tr))

    return _build


@pytest.fixture
def brazil():
    return next(m for m in SEED_MARKETS if m.country_code == "BR")


@pytest.fixture
def doordash():
    return KNOWN_MODELS["doordash"]


@pytest.fixture
def stub_providers():
    """Three providers returning modest, fixed activity."""
    return (
        StubProvider("github", DeveloperActivityMetrics(repo_count=2, recent_repos=1, activity_score=2.8)),
        StubProvider("news", MediaCoverageMetrics(article_count=3, source_diversity=2, coverage_score=1.7)),
        StubProvider("trends", TrendsMetrics(interest=36, search_volume=3600, interest_score=2.8)),
    )
