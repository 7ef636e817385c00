"""Database-backed market source and search history.

Markets are read from the local ``markets`` table, seeded from the built-in
profiles on first run. Finished analyses are written to ``user_searches``.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .core.errors import HistoryUnavailableError, MarketDataUnavailableError
from .core.markets import SEED_MARKETS
from .core.models import AnalysisResult, Market
from .db import get_session_factory
from .sqlmodels import MarketRecord, UserSearch

logger = logging.getLogger(__name__)


def _to_market(record: MarketRecord) -> Market:
    return Market(
        country_code=record.country_code,
        country_name=record.country_name,
        population=record.population,
        internet_penetration=record.internet_penetration,
        gdp_per_capita=record.gdp_per_capita,
        languages=tuple(record.languages or ()),
        app_stores=tuple(record.app_stores or ()),
        primary_search_engine=record.primary_search_engine,
    )


async def seed_markets(markets: Optional[list[Market]] = None) -> int:
    """Insert seed market profiles if the table is empty. Returns rows inserted."""
    markets = SEED_MARKETS if markets is None else markets
    session_factory = get_session_factory()
    async with session_factory() as session:
        existing = await session.scalar(select(func.count()).select_from(MarketRecord))
        if existing:
            return 0
        for m in markets:
            session.add(MarketRecord(
                country_code=m.country_code,
                country_name=m.country_name,
                population=m.population,
                internet_penetration=m.internet_penetration,
                gdp_per_capita=m.gdp_per_capita,
                languages=list(m.languages),
                app_stores=list(m.app_stores),
                primary_search_engine=m.primary_search_engine,
            ))
        await session.commit()
    return len(markets)


class DatabaseMarketSource:
    """Reads market profiles from SQLite."""

    async def fetch_markets(self, country_codes: list[str]) -> list[Market]:
        session_factory = get_session_factory()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(MarketRecord).where(MarketRecord.country_code.in_(country_codes))
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise MarketDataUnavailableError(f"Failed to fetch market data: {exc}") from exc

        by_code = {r.country_code: _to_market(r) for r in rows}
        return [by_code[code] for code in country_codes if code in by_code]


class SearchHistorySink:
    """Persists each finished analysis to the ``user_searches`` table."""

    async def record(
        self,
        query: Optional[str],
        startup_url: Optional[str],
        result: AnalysisResult,
    ) -> None:
        payload = result.model_dump(mode="json")
        session_factory = get_session_factory()
        async with session_factory() as session:
            session.add(UserSearch(
                search_query=query,
                startup_url=startup_url,
                business_model=result.business_model.name,
                results={
                    "business_model": payload["business_model"],
                    "opportunities": payload["opportunities"],
                },
            ))
            await session.commit()
        logger.info("Stored search %r (%d opportunities)", query or startup_url, len(result.opportunities))


async def get_recent_searches(limit: int = 10) -> list[dict]:
    """Retrieve the most recent stored searches, newest first.

    Returns:
        List of dicts with query, url, business model, market count, and the
        top-ranked opportunity.
    """
    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            result = await session.execute(
                select(UserSearch).order_by(UserSearch.created_at.desc(), UserSearch.id.desc()).limit(limit)
            )
            rows = result.scalars().all()
    except SQLAlchemyError as exc:
        raise HistoryUnavailableError(f"Failed to read search history: {exc}") from exc

    searches = []
    for r in rows:
        opportunities = (r.results or {}).get("opportunities", [])
        top = opportunities[0] if opportunities else None
        searches.append({
            "id": r.id,
            "search_query": r.search_query,
            "startup_url": r.startup_url,
            "business_model": r.business_model,
            "market_count": len(opportunities),
            "top_opportunity": {
                "country": top["country"],
                "country_code": top["country_code"],
                "score": top["score"],
            } if top else None,
            "created_at": r.created_at.isoformat(),
        })
    return searches
