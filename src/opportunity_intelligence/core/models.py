"""Pydantic data models shared by the pipeline and the server.

Both the FastMCP server and the pipeline use these models as the common
interface for classification, presence measurement, and scoring.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BusinessType(str, Enum):
    """Who the business sells to."""

    B2C = "B2C"
    B2B = "B2B"
    B2B2C = "B2B2C"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PresenceLevel(str, Enum):
    """How much existing activity was found for a business model in a market."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class MarketSizeCategory(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class SignalSource(str, Enum):
    """Presence signal sources."""

    GITHUB = "github"
    NEWS = "news"
    TRENDS = "trends"


class SignalStatus(str, Enum):
    """Whether a signal source produced a real measurement or a neutral fallback."""

    OK = "ok"
    DEGRADED = "degraded"


class AnalysisStatus(str, Enum):
    COMPLETED = "completed"
    DEGRADED = "degraded"


class BusinessModelProfile(BaseModel):
    """Identity of the venture being analyzed. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    name: str
    keywords: tuple[str, ...]
    category: str
    business_type: BusinessType
    technical_complexity: Complexity
    regulatory_complexity: Complexity


class BusinessModelInput(BaseModel):
    """Free-form description of a business model to classify."""

    name: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class Market(BaseModel):
    """A country's economic and demographic snapshot."""

    model_config = ConfigDict(frozen=True)

    country_code: str = Field(min_length=2, max_length=2, description="ISO 3166-1 alpha-2")
    country_name: str
    population: int = Field(ge=0)
    internet_penetration: float = Field(ge=0.0, le=100.0, description="Percent of population online")
    gdp_per_capita: float = Field(ge=0.0, description="USD")
    languages: tuple[str, ...] = ()
    app_stores: tuple[str, ...] = ()
    primary_search_engine: Optional[str] = None


# ─── Presence signals ────────────────────────────────────────────────────────


class DeveloperActivityMetrics(BaseModel):
    """Open-source repository activity for a set of keywords in a country."""

    repo_count: int = 0
    total_stars: int = 0
    recent_repos: int = Field(0, description="Repositories created in the last 365 days")
    languages: list[str] = Field(default_factory=list)
    activity_score: float = Field(0.0, ge=0.0, le=10.0)
    status: SignalStatus = SignalStatus.OK
    error: Optional[str] = None

    @classmethod
    def neutral(cls, error: Optional[str] = None) -> DeveloperActivityMetrics:
        return cls(status=SignalStatus.DEGRADED, error=error)


class MediaCoverageMetrics(BaseModel):
    """News coverage for a set of keywords in a country."""

    article_count: int = 0
    recent_mentions: int = Field(0, description="Articles published in the last 30 days")
    source_diversity: int = 0
    coverage_score: float = Field(0.0, ge=0.0, le=10.0)
    top_sources: list[str] = Field(default_factory=list)
    status: SignalStatus = SignalStatus.OK
    error: Optional[str] = None

    @classmethod
    def neutral(cls, error: Optional[str] = None) -> MediaCoverageMetrics:
        return cls(status=SignalStatus.DEGRADED, error=error)


class TrendsMetrics(BaseModel):
    """Estimated search interest for a set of keywords in a country."""

    search_volume: int = 0
    interest: int = Field(0, ge=0, le=100)
    trend_direction: TrendDirection = TrendDirection.STABLE
    interest_score: float = Field(0.0, ge=0.0, le=10.0)
    status: SignalStatus = SignalStatus.OK
    error: Optional[str] = None

    @classmethod
    def neutral(cls, error: Optional[str] = None) -> TrendsMetrics:
        return cls(status=SignalStatus.DEGRADED, error=error)


class OverallPresence(BaseModel):
    presence_level: PresenceLevel
    confidence: float = Field(ge=0.0, le=1.0)
    signal_count: int = Field(ge=0, le=3, description="Sub-signals at or above the moderate threshold")
    strong_signals: list[str] = Field(default_factory=list)


class PresenceSignals(BaseModel):
    """All presence measurements for one (business model, country) pair."""

    github: DeveloperActivityMetrics
    news: MediaCoverageMetrics
    trends: TrendsMetrics
    overall: OverallPresence

    @property
    def raw_scores(self) -> tuple[float, float, float]:
        return (self.github.activity_score, self.news.coverage_score, self.trends.interest_score)

    @property
    def mean_score(self) -> float:
        scores = self.raw_scores
        return sum(scores) / len(scores)


# ─── Opportunity scoring ─────────────────────────────────────────────────────


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    market_gap: float = Field(ge=0.0, le=10.0, description="Higher = less existing presence")
    market_size: float = Field(ge=0.0, le=10.0)
    market_readiness: float = Field(ge=0.0, le=10.0)
    competition_level: float = Field(ge=0.0, le=10.0, description="Higher = more competition")


class OpportunityScore(BaseModel):
    """Final verdict for one (business model, market) pair."""

    model_config = ConfigDict(frozen=True)

    overall: float = Field(ge=0.0, le=10.0)
    breakdown: ScoreBreakdown
    reasoning: tuple[str, ...]
    competition_level: PresenceLevel
    market_size: MarketSizeCategory
    recommendation: str


ANALYSIS_FAILED_INSIGHT = "Analysis failed - please try again"


class MarketOpportunity(BaseModel):
    """One ranked row of an analysis run."""

    country: str
    country_code: str
    score: float = Field(ge=0.0, le=10.0)
    competition_level: PresenceLevel
    market_size: int = Field(ge=0, description="Population")
    presence_signals: Optional[PresenceSignals] = None
    opportunity_score: Optional[OpportunityScore] = None
    quick_insights: list[str] = Field(default_factory=list)
    status: AnalysisStatus = AnalysisStatus.COMPLETED
    error: Optional[str] = None

    @classmethod
    def completed(
        cls,
        market: Market,
        presence: PresenceSignals,
        score: OpportunityScore,
    ) -> MarketOpportunity:
        return cls(
            country=market.country_name,
            country_code=market.country_code,
            score=score.overall,
            competition_level=score.competition_level,
            market_size=market.population,
            presence_signals=presence,
            opportunity_score=score,
            quick_insights=list(score.reasoning[:3]),
        )

    @classmethod
    def degraded(cls, market: Market, error: Optional[str] = None) -> MarketOpportunity:
        """Minimal stand-in row for a market whose analysis failed."""
        return cls(
            country=market.country_name,
            country_code=market.country_code,
            score=0.0,
            competition_level=PresenceLevel.HIGH,
            market_size=market.population,
            quick_insights=[ANALYSIS_FAILED_INSIGHT],
            status=AnalysisStatus.DEGRADED,
            error=error,
        )


class OpportunityRequest(BaseModel):
    """Caller-facing request: a startup URL and/or a business type description."""

    startup_url: Optional[str] = None
    business_type: Optional[str] = None
    target_markets: Optional[list[str]] = None


class AnalysisResult(BaseModel):
    business_model: BusinessModelProfile
    opportunities: list[MarketOpportunity]
    analysis_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
