"""Opportunity Intelligence MCP Server.

FastMCP server that ranks countries by how under-served a business model is.
Run: opportunity-intelligence-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .core.classifier import identify_business_model, keywords_for
from .core.errors import HistoryUnavailableError, InputValidationError, MarketDataUnavailableError
from .core.markets import DEFAULT_MARKETS
from .core.models import AnalysisResult, BusinessModelInput, OpportunityRequest
from .db import close_db, init_db
from .pipeline import OpportunityPipeline, analyze_opportunities
from .storage import DatabaseMarketSource, SearchHistorySink, get_recent_searches

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)
# find_opportunities writes search history and has a random component
ANALYSIS = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Initialize the database and seed market profiles on first run."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    await init_db()
    try:
        yield
    finally:
        await close_db()


mcp = FastMCP(
    "Opportunity Intelligence",
    instructions="Find countries where a startup's business model is under-served. Give a business type or a startup URL; get markets ranked by opportunity score with developer, media, and search-interest signals.",
    lifespan=lifespan,
)


def _summarize(result: AnalysisResult) -> str:
    if not result.opportunities:
        return f"Classified as {result.business_model.name}. No matching markets found."
    top = result.opportunities[0]
    return (
        f"Classified as {result.business_model.name} ({result.business_model.category}). "
        f"Best market: {top.country} at {top.score:.1f}/10 across {len(result.opportunities)} markets analyzed."
    )


# ─── Tool 1: Find Opportunities ──────────────────────────────────────────────


@mcp.tool(annotations=ANALYSIS)
async def find_opportunities(
    business_type: str = "",
    startup_url: str = "",
    target_markets: Optional[list[str]] = None,
) -> dict:
    """Rank candidate countries by how under-served a business model is.

    Args:
        business_type: Free-text business model or company name (e.g., 'food delivery marketplace', 'Affirm').
        startup_url: Startup website (e.g., 'https://www.affirm.com').
        target_markets: ISO-2 country codes. Default: BR, IN, NG, ID, MX.
    """
    request = OpportunityRequest(
        business_type=business_type or None,
        startup_url=startup_url or None,
        target_markets=target_markets,
    )
    try:
        result = await analyze_opportunities(
            request,
            markets_source=DatabaseMarketSource(),
            pipeline=OpportunityPipeline(),
            sink=SearchHistorySink(),
        )
    except InputValidationError as exc:
        return {"error": str(exc), "error_type": "invalid_input"}
    except MarketDataUnavailableError as exc:
        return {"error": str(exc), "error_type": "market_data_unavailable"}

    payload = result.model_dump(mode="json")
    payload["summary"] = _summarize(result)
    return payload


# ─── Tool 2: Classify Business Model ─────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def classify_business_model(name: str = "", url: str = "", description: str = "") -> dict:
    """Identify the business model profile for a company name, URL, or description.

    Args:
        name: Company or business model name (e.g., 'Duolingo').
        url: Company website.
        description: Free-text description used for keyword classification.
    """
    profile = identify_business_model(BusinessModelInput(
        name=name or None,
        url=url or None,
        description=description or None,
    ))
    return {
        "business_model": profile.model_dump(mode="json"),
        "search_keywords": keywords_for(profile),
        "summary": f"{profile.name} ({profile.category}, {profile.business_type.value})",
    }


# ─── Tool 3: Markets ─────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def list_markets(country_codes: Optional[list[str]] = None) -> dict:
    """Economic and demographic profiles of the candidate markets.

    Args:
        country_codes: ISO-2 country codes. Default: BR, IN, NG, ID, MX.
    """
    codes = [c.strip().upper() for c in (country_codes or DEFAULT_MARKETS)]
    try:
        markets = await DatabaseMarketSource().fetch_markets(codes)
    except MarketDataUnavailableError as exc:
        return {"error": str(exc), "error_type": "market_data_unavailable"}
    return {
        "markets": [m.model_dump(mode="json") for m in markets],
        "count": len(markets),
        "summary": f"{len(markets)} of {len(codes)} requested markets available",
    }


# ─── Tool 4: Search History (Stateful) ───────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def recent_searches(limit: int = 10) -> dict:
    """Previously run opportunity analyses, newest first.

    Args:
        limit: Maximum number of searches. Default 10.
    """
    try:
        searches = await get_recent_searches(limit)
    except HistoryUnavailableError as exc:
        return {"error": str(exc), "error_type": "history_unavailable"}
    return {
        "searches": searches,
        "count": len(searches),
        "summary": f"{len(searches)} stored searches" if searches else "No searches stored yet.",
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
