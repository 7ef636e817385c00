"""NewsAPI client: media-coverage presence signal.

API docs: https://newsapi.org/docs/endpoints/everything
Requires an API key. Developer plan: 100 requests/day.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from ..errors import RateLimitedError
from ..models import MediaCoverageMetrics

logger = logging.getLogger(__name__)

API_BASE = "https://newsapi.org/v2"
RECENT_WINDOW = timedelta(days=30)
TOP_SOURCES_LIMIT = 5

# Disambiguation terms appended to each keyword query
COUNTRY_SEARCH_TERMS: dict[str, str] = {
    "BR": "Brazil OR Brasil",
    "IN": "India",
    "NG": "Nigeria",
    "ID": "Indonesia",
    "MX": "Mexico OR México",
}


def country_search_term(country_code: str) -> str:
    return COUNTRY_SEARCH_TERMS.get(country_code, country_code)


def _parse_published(value: object) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def calculate_coverage_score(article_count: int, recent_mentions: int, source_diversity: int) -> float:
    """Normalize article counts into a 0-10 coverage score."""
    score = 0.3 * min(article_count, 13.3)
    score += 0.5 * min(recent_mentions, 6)
    score += 0.4 * min(source_diversity, 7.5)
    return round(min(max(score, 0.0), 10.0), 1)


class MediaCoverageProvider:
    """Measures news coverage for keywords in a country."""

    source = "news"

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self._api_key = api_key if api_key is not None else os.environ.get("NEWS_API_KEY", "")
        if not self._api_key:
            logger.warning("NEWS_API_KEY not set, media coverage signal disabled")
        self._client = client
        self._timeout = timeout

    async def measure(self, country: str, keywords: list[str]) -> MediaCoverageMetrics:
        """Search news per keyword and summarize unique articles.

        Never raises. Without an API key no request is made and neutral
        metrics are returned.
        """
        if not self._api_key:
            return MediaCoverageMetrics.neutral("NEWS_API_KEY not configured")
        try:
            if self._client is not None:
                return await self._measure(self._client, country, keywords)
            async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=10.0)) as client:
                return await self._measure(client, country, keywords)
        except Exception as exc:
            logger.warning("News coverage lookup failed for %s: %s", country, exc)
            return MediaCoverageMetrics.neutral(str(exc))

    async def _measure(
        self,
        client: httpx.AsyncClient,
        country: str,
        keywords: list[str],
    ) -> MediaCoverageMetrics:
        term = country_search_term(country)
        queries = [f"{keyword} {term}" for keyword in keywords]
        results = await asyncio.gather(*(self._search_news(client, q) for q in queries))

        unique: dict[str, dict] = {}
        for articles in results:
            for article in articles:
                unique.setdefault(article["url"], article)

        cutoff = datetime.now(timezone.utc) - RECENT_WINDOW
        recent = 0
        sources: list[str] = []
        for article in unique.values():
            published = _parse_published(article.get("publishedAt"))
            if published is not None and published > cutoff:
                recent += 1
            name = (article.get("source") or {}).get("name")
            if name and name not in sources:
                sources.append(name)

        return MediaCoverageMetrics(
            article_count=len(unique),
            recent_mentions=recent,
            source_diversity=len(sources),
            coverage_score=calculate_coverage_score(len(unique), recent, len(sources)),
            top_sources=sources[:TOP_SOURCES_LIMIT],
        )

    async def _search_news(self, client: httpx.AsyncClient, query: str) -> list[dict]:
        params = {
            "q": query,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": 100,
            "apiKey": self._api_key,
        }
        response = await client.get(f"{API_BASE}/everything", params=params)
        if response.status_code == 429:
            raise RateLimitedError("News", response.status_code)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected NewsAPI payload: {type(data).__name__}")
        return data.get("articles", [])
