"""Presence signal client tests: GitHub, NewsAPI, and simulated trends."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import httpx
import pytest

from opportunity_intelligence.core.clients.github import DeveloperActivityProvider, calculate_activity_score
from opportunity_intelligence.core.clients.newsapi import (
    MediaCoverageProvider,
    calculate_coverage_score,
    country_search_term,
)
from opportunity_intelligence.core.clients.trends import (
    SearchInterestProvider,
    calculate_interest_score,
    trend_direction_for,
)
from opportunity_intelligence.core.models import SignalStatus, TrendDirection


def _iso(days_ago: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days_ago)).strftime("%Y-%m-%dT%H:%M:%SZ")


def _run(coro):
    return asyncio.run(coro)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================================
# GitHub
# =============================================================================


REPOS = {
    1: {"id": 1, "created_at": _iso(10), "stargazers_count": 50, "language": "Python"},
    2: {"id": 2, "created_at": "2015-06-01T00:00:00Z", "stargazers_count": 100, "language": "Go"},
    3: {"id": 3, "created_at": _iso(100), "stargazers_count": 0, "language": None},
}


def test_github_dedupes_and_scores():
    seen_queries = []

    def handler(request: httpx.Request) -> httpx.Response:
        query = request.url.params["q"]
        seen_queries.append(query)
        assert request.headers["Authorization"] == "token secret"
        ids = [1, 2] if "payments" in query else [2, 3]
        return httpx.Response(200, json={"total_count": len(ids), "items": [REPOS[i] for i in ids]})

    async def scenario():
        async with _client(handler) as client:
            provider = DeveloperActivityProvider(token="secret", client=client)
            return await provider.measure("BR", ["payments", "wallet"])

    metrics = _run(scenario())

    assert sorted(seen_queries) == [
        "location:BR payments in:name,description",
        "location:BR wallet in:name,description",
    ]
    assert metrics.status == SignalStatus.OK
    assert metrics.repo_count == 3
    assert metrics.recent_repos == 2
    assert metrics.total_stars == 150
    assert metrics.languages == ["Python", "Go"]
    # 0.5*3 + 0.8*2 + 0.01*150 + 1
    assert metrics.activity_score == pytest.approx(5.6)


def test_github_without_token_sends_no_authorization():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        return httpx.Response(200, json={"items": []})

    async def scenario():
        async with _client(handler) as client:
            return await DeveloperActivityProvider(token="", client=client).measure("NG", ["chat"])

    metrics = _run(scenario())
    assert metrics.repo_count == 0
    assert metrics.activity_score == 0.0
    assert metrics.status == SignalStatus.OK


def test_github_rate_limit_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"message": "API rate limit exceeded"})

    async def scenario():
        async with _client(handler) as client:
            return await DeveloperActivityProvider(token="", client=client).measure("IN", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert "rate limit" in metrics.error
    assert metrics.activity_score == 0.0
    assert metrics.repo_count == 0


def test_github_transport_error_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with _client(handler) as client:
            return await DeveloperActivityProvider(token="", client=client).measure("MX", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.activity_score == 0.0


def test_github_server_error_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    async def scenario():
        async with _client(handler) as client:
            return await DeveloperActivityProvider(token="", client=client).measure("MX", ["chat"])

    assert _run(scenario()).status == SignalStatus.DEGRADED


def test_github_list_payload_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[1, 2])

    async def scenario():
        async with _client(handler) as client:
            return await DeveloperActivityProvider(token="", client=client).measure("BR", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert "list" in metrics.error
    assert metrics.activity_score == 0.0


def test_github_non_object_items_return_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": ["repo-a", "repo-b"]})

    async def scenario():
        async with _client(handler) as client:
            return await DeveloperActivityProvider(token="", client=client).measure("BR", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.repo_count == 0
    assert metrics.activity_score == 0.0


def test_github_non_string_created_at_counts_repo_as_not_recent():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": [{"id": 1, "created_at": 1700000000}]})

    async def scenario():
        async with _client(handler) as client:
            return await DeveloperActivityProvider(token="", client=client).measure("BR", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.OK
    assert metrics.repo_count == 1
    assert metrics.recent_repos == 0
    # 0.5*1
    assert metrics.activity_score == pytest.approx(0.5)


@pytest.mark.parametrize(
    "repos,recent,stars,expected",
    [
        (0, 0, 0, 0.0),
        (1, 0, 20, 0.7),
        (4, 1, 20, 4.0),
        (100, 100, 10_000, 10.0),
    ],
)
def test_activity_score(repos, recent, stars, expected):
    assert calculate_activity_score(repos, recent, stars) == pytest.approx(expected)


# =============================================================================
# NewsAPI
# =============================================================================


def _article(url: str, days_ago: int, source: str) -> dict:
    return {"url": url, "publishedAt": _iso(days_ago), "source": {"id": None, "name": source}, "title": url}


def test_news_dedupes_by_url_and_scores():
    seen_queries = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen_queries.append(request.url.params["q"])
        assert request.url.params["apiKey"] == "k"
        articles = [_article("https://a", 3, "TechCrunch"), _article("https://b", 90, "Reuters")]
        if "wallet" in request.url.params["q"]:
            articles = [_article("https://a", 3, "TechCrunch")]
        return httpx.Response(200, json={"status": "ok", "totalResults": len(articles), "articles": articles})

    async def scenario():
        async with _client(handler) as client:
            return await MediaCoverageProvider(api_key="k", client=client).measure("BR", ["payments", "wallet"])

    metrics = _run(scenario())

    assert sorted(seen_queries) == ["payments Brazil OR Brasil", "wallet Brazil OR Brasil"]
    assert metrics.status == SignalStatus.OK
    assert metrics.article_count == 2
    assert metrics.recent_mentions == 1
    assert metrics.source_diversity == 2
    assert metrics.top_sources == ["TechCrunch", "Reuters"]
    # 0.3*2 + 0.5*1 + 0.4*2
    assert metrics.coverage_score == pytest.approx(1.9)


def test_news_keeps_top_five_sources_in_first_seen_order():
    articles = [_article(f"https://x/{i}", 1, f"Source {i}") for i in range(8)]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"articles": articles})

    async def scenario():
        async with _client(handler) as client:
            return await MediaCoverageProvider(api_key="k", client=client).measure("NG", ["chat"])

    metrics = _run(scenario())
    assert metrics.source_diversity == 8
    assert metrics.top_sources == [f"Source {i}" for i in range(5)]


def test_news_without_api_key_makes_no_request():
    handler = MagicMock(side_effect=AssertionError("should not be called"))

    async def scenario():
        async with _client(handler) as client:
            return await MediaCoverageProvider(api_key="", client=client).measure("BR", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.coverage_score == 0.0
    handler.assert_not_called()


def test_news_rate_limit_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"status": "error", "code": "rateLimited"})

    async def scenario():
        async with _client(handler) as client:
            return await MediaCoverageProvider(api_key="k", client=client).measure("ID", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.article_count == 0
    assert metrics.top_sources == []


def test_news_malformed_payload_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    async def scenario():
        async with _client(handler) as client:
            return await MediaCoverageProvider(api_key="k", client=client).measure("ID", ["chat"])

    assert _run(scenario()).status == SignalStatus.DEGRADED


def test_news_string_source_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"articles": [{"url": "https://a", "source": "Reuters"}]})

    async def scenario():
        async with _client(handler) as client:
            return await MediaCoverageProvider(api_key="k", client=client).measure("BR", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.coverage_score == 0.0
    assert metrics.article_count == 0


def test_news_list_payload_returns_neutral_metrics():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"url": "https://a"}])

    async def scenario():
        async with _client(handler) as client:
            return await MediaCoverageProvider(api_key="k", client=client).measure("BR", ["chat"])

    metrics = _run(scenario())
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.coverage_score == 0.0


def test_news_missing_key_is_warned_about_once(caplog):
    handler = MagicMock(side_effect=AssertionError("should not be called"))

    async def scenario():
        async with _client(handler) as client:
            provider = MediaCoverageProvider(api_key="", client=client)
            return [await provider.measure(code, ["chat"]) for code in ("BR", "IN", "MX")]

    with caplog.at_level(logging.WARNING, logger="opportunity_intelligence.core.clients.newsapi"):
        results = _run(scenario())

    assert all(m.status == SignalStatus.DEGRADED for m in results)
    assert sum("NEWS_API_KEY" in r.getMessage() for r in caplog.records) == 1


    assert _run(scenario()).status == SignalStatus.DEGRADED


def test_country_search_term():
    assert country_search_term("MX") == "Mexico OR México"
    assert country_search_term("KE") == "KE"


def test_coverage_score_caps_at_ten():
    assert calculate_coverage_score(1000, 1000, 1000) == 10.0
    assert calculate_coverage_score(0, 0, 0) == 0.0


# =============================================================================
# Search interest (simulated)
# =============================================================================


def _fixed_rng(value: float) -> MagicMock:
    rng = MagicMock()
    rng.random.return_value = value
    return rng


def test_trends_with_popular_keyword_and_pinned_jitter():
    provider = SearchInterestProvider(rng=_fixed_rng(0.5))
    metrics = _run(provider.measure("IN", ["Food Delivery", "marketplace"]))

    # 30 * 1.4 * 1.0
    assert metrics.interest == 42
    assert metrics.search_volume == 4200
    assert metrics.trend_direction == TrendDirection.STABLE
    # 0.42*5 + 1
    assert metrics.interest_score == pytest.approx(3.1)
    assert metrics.status == SignalStatus.OK


def test_trends_unlisted_country_uses_default_multiplier():
    metrics = _run(SearchInterestProvider(rng=_fixed_rng(0.5)).measure("US", ["stock trading"]))
    assert metrics.interest == 30


def test_trends_jitter_bounds():
    low = _run(SearchInterestProvider(rng=_fixed_rng(0.0)).measure("MX", ["design"]))
    high = _run(SearchInterestProvider(rng=_fixed_rng(0.999999)).measure("MX", ["design"]))
    assert low.interest == 21
    assert high.interest == 39


def test_trends_without_popular_keyword_is_down_and_zero():
    metrics = _run(SearchInterestProvider(rng=_fixed_rng(0.9)).measure("BR", ["payments"]))
    assert metrics.interest == 0
    assert metrics.search_volume == 0
    assert metrics.trend_direction == TrendDirection.DOWN
    assert metrics.interest_score == 0.0


def test_trends_failure_returns_neutral_metrics():
    rng = MagicMock()
    rng.random.side_effect = ValueError("no entropy")
    metrics = _run(SearchInterestProvider(rng=rng).measure("BR", ["design"]))
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.interest_score == 0.0


def test_trends_unexpected_rng_error_returns_neutral_metrics():
    rng = MagicMock()
    rng.random.side_effect = RuntimeError("generator closed")
    metrics = _run(SearchInterestProvider(rng=rng).measure("BR", ["design"]))
    assert metrics.status == SignalStatus.DEGRADED
    assert metrics.interest_score == 0.0


    assert metrics.interest_score == 0.0


@pytest.mark.parametrize(
    "interest,direction",
    [(61, TrendDirection.UP), (60, TrendDirection.STABLE), (20, TrendDirection.STABLE), (19, TrendDirection.DOWN)],
)
def test_trend_direction_thresholds(interest, direction):
    assert trend_direction_for(interest) == direction


def test_interest_score():
    assert calculate_interest_score(80, TrendDirection.UP, True) == pytest.approx(7.0)
    assert calculate_interest_score(100, TrendDirection.UP, True) == pytest.approx(8.0)
    assert calculate_interest_score(10, TrendDirection.DOWN, False) == 0.0
