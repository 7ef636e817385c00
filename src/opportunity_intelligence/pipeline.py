"""Opportunity analysis pipeline.

Classifies the business model once, then measures presence and scores every
candidate market concurrently. A failing market is replaced by a degraded row;
it never fails the batch. Results are sorted by score, highest first.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from typing import Optional, Protocol

from .core.classifier import identify_business_model, keywords_for
from .core.clients.github import DeveloperActivityProvider
from .core.clients.newsapi import MediaCoverageProvider
from .core.clients.trends import SearchInterestProvider
from .core.errors import InputValidationError, MarketDataUnavailableError
from .core.markets import DEFAULT_MARKETS, MarketDataSource
from .core.models import (
    AnalysisResult,
    BusinessModelInput,
    BusinessModelProfile,
    Market,
    MarketOpportunity,
    OpportunityRequest,
)
from .core.presence import PresenceSignalProvider, measure_presence
from .core.scoring import score_opportunity

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def analysis_timeout() -> float:
    """HTTP timeout for the signal clients from ANALYSIS_TIMEOUT_SECONDS."""
    raw = os.environ.get("ANALYSIS_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError:
        timeout = 0.0
    if not timeout > 0:
        logger.warning("Invalid ANALYSIS_TIMEOUT_SECONDS=%r, using %.0fs", raw, DEFAULT_TIMEOUT_SECONDS)
        return DEFAULT_TIMEOUT_SECONDS
    return timeout


class ResultSink(Protocol):
    """Accepts finished analyses for storage."""

    async def record(
        self,
        query: Optional[str],
        startup_url: Optional[str],
        result: AnalysisResult,
    ) -> None: ...


class OpportunityPipeline:
    """Runs classification, presence measurement, and scoring for a batch of markets."""

    def __init__(
        self,
        github: Optional[PresenceSignalProvider] = None,
        news: Optional[PresenceSignalProvider] = None,
        trends: Optional[PresenceSignalProvider] = None,
    ):
        timeout = analysis_timeout()
        self.github = github or DeveloperActivityProvider(timeout=timeout)
        self.news = news or MediaCoverageProvider(timeout=timeout)
        self.trends = trends or SearchInterestProvider()

    async def run(self, data: BusinessModelInput, markets: list[Market]) -> AnalysisResult:
        business_model = identify_business_model(data)
        keywords = keywords_for(business_model)
        logger.info(
            "Classified input as %r (%s); analyzing %d markets",
            business_model.name,
            business_model.category,
            len(markets),
        )

        opportunities = await asyncio.gather(
            *(self._analyze_market(market, business_model, keywords) for market in markets)
        )
        ranked = sorted(opportunities, key=lambda o: o.score, reverse=True)

        return AnalysisResult(
            business_model=business_model,
            opportunities=ranked,
            analysis_time=datetime.now(timezone.utc),
        )

    async def _analyze_market(
        self,
        market: Market,
        business_model: BusinessModelProfile,
        keywords: list[str],
    ) -> MarketOpportunity:
        try:
            presence = await measure_presence(self.github, self.news, self.trends, market.country_code, keywords)
            score = score_opportunity(presence, market, business_model)
        except Exception as exc:
            logger.error("Error analyzing market %s: %s", market.country_code, exc, exc_info=True)
            return MarketOpportunity.degraded(market, str(exc))
        return MarketOpportunity.completed(market, presence, score)


def validate_request(request: OpportunityRequest) -> BusinessModelInput:
    """Build classifier input from a request, or raise InputValidationError."""
    business_type = (request.business_type or "").strip() or None
    startup_url = (request.startup_url or "").strip() or None
    if not business_type and not startup_url:
        raise InputValidationError("Either startup_url or business_type is required")
    return BusinessModelInput(name=business_type, url=startup_url, description=business_type)


async def analyze_opportunities(
    request: OpportunityRequest,
    markets_source: MarketDataSource,
    pipeline: Optional[OpportunityPipeline] = None,
    sink: Optional[ResultSink] = None,
) -> AnalysisResult:
    """Rank candidate markets for a startup URL or business type.

    Raises:
        InputValidationError: neither a business type nor a URL was given.
        MarketDataUnavailableError: the market data source failed.
    """
    data = validate_request(request)
    country_codes = [c.strip().upper() for c in (request.target_markets or DEFAULT_MARKETS) if c.strip()]

    try:
        markets = await markets_source.fetch_markets(country_codes)
    except MarketDataUnavailableError:
        raise
    except Exception as exc:
        logger.error("Market data fetch failed: %s", exc, exc_info=True)
        raise MarketDataUnavailableError("Failed to fetch market data") from exc

    pipeline = pipeline or OpportunityPipeline()
    result = await pipeline.run(data, markets)

    if sink is not None:
        try:
            await sink.record(request.business_type, request.startup_url, result)
        except Exception as exc:
            logger.warning("Failed to store search: %s", exc)

    return result
