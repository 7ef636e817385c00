"""GitHub repository search client: developer-activity presence signal.

API docs: https://docs.github.com/en/rest/search/search#search-repositories
Rate limit: 10 searches/minute unauthenticated, 30/minute with a token.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from ..errors import RateLimitedError
from ..models import DeveloperActivityMetrics

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
USER_AGENT = "opportunity-intelligence-mcp"
RECENT_WINDOW = timedelta(days=365)


def _parse_timestamp(value: object) -> Optional[datetime]:
    """Parse GitHub's ISO-8601 timestamps (``2024-03-01T12:00:00Z``)."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def calculate_activity_score(repo_count: int, recent_repos: int, total_stars: int) -> float:
    """Normalize repository counts into a 0-10 activity score."""
    score = 0.5 * min(repo_count, 6)
    score += 0.8 * min(recent_repos, 5)
    score += 0.01 * min(total_stars, 200)
    if recent_repos > 0:
        score += 1
    return round(min(max(score, 0.0), 10.0), 1)


class DeveloperActivityProvider:
    """Measures open-source activity for keywords scoped to a country."""

    source = "github"

    def __init__(
        self,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self._token = token if token is not None else os.environ.get("GITHUB_TOKEN", "")
        self._client = client
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self._token:
            headers["Authorization"] = f"token {self._token}"
        return headers

    async def measure(self, country: str, keywords: list[str]) -> DeveloperActivityMetrics:
        """Search repositories per keyword and summarize the unique results.

        Never raises: rate limiting, transport and payload errors produce
        degraded neutral metrics.
        """
        try:
            if self._client is not None:
                return await self._measure(self._client, country, keywords)
            async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=10.0)) as client:
                return await self._measure(client, country, keywords)
        except Exception as exc:
            logger.warning("GitHub activity lookup failed for %s: %s", country, exc)
            return DeveloperActivityMetrics.neutral(str(exc))

    async def _measure(
        self,
        client: httpx.AsyncClient,
        country: str,
        keywords: list[str],
    ) -> DeveloperActivityMetrics:
        queries = [f"location:{country} {keyword} in:name,description" for keyword in keywords]
        results = await asyncio.gather(*(self._search_repositories(client, q) for q in queries))

        unique: dict[int, dict] = {}
        for items in results:
            for repo in items:
                unique.setdefault(repo["id"], repo)

        cutoff = datetime.now(timezone.utc) - RECENT_WINDOW
        recent = 0
        languages: list[str] = []
        total_stars = 0
        for repo in unique.values():
            created_at = _parse_timestamp(repo.get("created_at"))
            if created_at is not None and created_at > cutoff:
                recent += 1
            language = repo.get("language")
            if language and language not in languages:
                languages.append(language)
            total_stars += int(repo.get("stargazers_count") or 0)

        return DeveloperActivityMetrics(
            repo_count=len(unique),
            total_stars=total_stars,
            recent_repos=recent,
            languages=languages,
            activity_score=calculate_activity_score(len(unique), recent, total_stars),
        )

    async def _search_repositories(self, client: httpx.AsyncClient, query: str) -> list[dict]:
        params = {"q": query, "sort": "updated", "per_page": 100}
        response = await client.get(f"{API_BASE}/search/repositories", params=params, headers=self._headers())
        if response.status_code == 403:
            raise RateLimitedError("GitHub", response.status_code)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Unexpected GitHub search payload: {type(data).__name__}")
        return data.get("items", [])
