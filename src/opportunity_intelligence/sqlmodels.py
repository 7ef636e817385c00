"""SQLAlchemy models for local SQLite storage.

Stores market profiles (seeded on first run) and the history of analyses.
Presence signals are always measured live; only finished results are kept.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class MarketRecord(Base):
    """A country's economic and demographic profile."""

    __tablename__ = "markets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    country_code: Mapped[str] = mapped_column(String(2), unique=True, nullable=False)
    country_name: Mapped[str] = mapped_column(String(100), nullable=False)
    population: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    internet_penetration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    gdp_per_capita: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    languages: Mapped[list] = mapped_column(JSON, default=list)
    app_stores: Mapped[list] = mapped_column(JSON, default=list)
    primary_search_engine: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


class UserSearch(Base):
    """One stored analysis request and its ranked results."""

    __tablename__ = "user_searches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    search_query: Mapped[str | None] = mapped_column(Text, nullable=True)
    startup_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    business_model: Mapped[str] = mapped_column(String(200), nullable=False)
    results: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_user_searches_created", "created_at"),
    )
