"""Opportunity scoring engine.

Combines a market's economic profile, the business-model profile, and the
aggregated presence signals into one weighted 0-10 score with a breakdown,
short reasoning lines, and a recommendation. Pure functions only: the same
inputs always produce the same score.
"""

from __future__ import annotations

import logging

from .models import (
    BusinessModelProfile,
    BusinessType,
    Complexity,
    Market,
    MarketSizeCategory,
    OpportunityScore,
    PresenceSignals,
    ScoreBreakdown,
)

logger = logging.getLogger(__name__)

WEIGHTS = {
    "market_gap": 0.35,
    "market_size": 0.25,
    "market_readiness": 0.25,
    "competition_level": 0.15,
}

# Highest threshold first; the first one at or below ``overall`` applies.
RECOMMENDATIONS: list[tuple[float, str]] = [
    (8.0, "Excellent opportunity - high market gap with favorable conditions"),
    (6.5, "Strong opportunity - good market potential with manageable competition"),
    (5.0, "Moderate opportunity - consider market entry strategy carefully"),
    (3.0, "Limited opportunity - significant challenges or competition present"),
    (float("-inf"), "Poor opportunity - high competition or unfavorable market conditions"),
]

TECHNICAL_PENALTY = {Complexity.HIGH: 1.0, Complexity.MEDIUM: 0.5, Complexity.LOW: 0.0}
REGULATORY_PENALTY = {Complexity.HIGH: 1.5, Complexity.MEDIUM: 0.5, Complexity.LOW: 0.0}


def _clamp(value: float, low: float = 0.0, high: float = 10.0) -> float:
    return max(low, min(high, value))


def score_market_gap(presence: PresenceSignals) -> float:
    """Higher = bigger gap (less existing presence)."""
    return max(0.0, 10 - presence.mean_score)


def score_market_size(market: Market, business_model: BusinessModelProfile) -> float:
    score = 0.0

    population = market.population
    if population > 200_000_000:
        score += 4
    elif population > 100_000_000:
        score += 3
    elif population > 50_000_000:
        score += 2
    else:
        score += 1

    score += (market.internet_penetration / 100) * 3

    gdp = market.gdp_per_capita
    if gdp > 8000:
        score += 2
    elif gdp > 4000:
        score += 1.5
    elif gdp > 2000:
        score += 1
    else:
        score += 0.5

    if business_model.business_type == BusinessType.B2C and market.internet_penetration > 60:
        score += 1
    elif business_model.business_type == BusinessType.B2B and gdp > 5000:
        score += 1

    return min(score, 10.0)


def score_market_readiness(market: Market, business_model: BusinessModelProfile) -> float:
    score = (market.internet_penetration / 100) * 4

    gdp = market.gdp_per_capita
    if gdp > 5000:
        score += 3
    elif gdp > 2500:
        score += 2
    else:
        score += 1

    score -= TECHNICAL_PENALTY[business_model.technical_complexity]
    score -= REGULATORY_PENALTY[business_model.regulatory_complexity]

    if "English" in market.languages:
        score += 1
    if len(market.app_stores) >= 2:
        score += 1

    return _clamp(score)


def score_competition(presence: PresenceSignals) -> float:
    """Higher = more competition.

    Same quantity as the gap score, inverted. Both feed the overall score,
    so presence is effectively counted twice (0.35 and 0.15 weights).
    """
    return presence.mean_score


def compute_overall(breakdown: ScoreBreakdown) -> float:
    score = (
        breakdown.market_gap * WEIGHTS["market_gap"]
        + breakdown.market_size * WEIGHTS["market_size"]
        + breakdown.market_readiness * WEIGHTS["market_readiness"]
        + (10 - breakdown.competition_level) * WEIGHTS["competition_level"]
    )
    return round(_clamp(score), 1)


def recommendation_for(overall: float) -> str:
    for threshold, text in RECOMMENDATIONS:
        if overall >= threshold:
            return text
    return RECOMMENDATIONS[-1][1]


def market_size_category(market: Market) -> MarketSizeCategory:
    if market.population > 200_000_000:
        return MarketSizeCategory.LARGE
    if market.population > 50_000_000:
        return MarketSizeCategory.MEDIUM
    return MarketSizeCategory.SMALL


def build_reasoning(
    breakdown: ScoreBreakdown,
    presence: PresenceSignals,
    market: Market,
    business_model: BusinessModelProfile,
) -> list[str]:
    reasoning = []

    if breakdown.market_gap >= 7:
        reasoning.append("Minimal existing competition detected")
    elif breakdown.market_gap >= 4:
        reasoning.append("Limited market presence found")
    else:
        reasoning.append("Established players present in market")

    if market.population > 200_000_000:
        reasoning.append(f"Large addressable market ({market.population / 1_000_000:.0f}M population)")

    if market.internet_penetration >= 70:
        reasoning.append("High internet adoption supports digital business models")
    elif market.internet_penetration >= 50:
        reasoning.append("Growing internet adoption creates emerging opportunities")

    if market.gdp_per_capita > 5000:
        reasoning.append("Strong purchasing power in target market")
    elif market.gdp_per_capita > 2000:
        reasoning.append("Emerging middle class with growing spending power")

    if business_model.technical_complexity == Complexity.LOW:
        reasoning.append("Low technical barriers to entry")
    elif business_model.technical_complexity == Complexity.HIGH:
        reasoning.append("High technical complexity may limit competitors")

    if presence.overall.strong_signals:
        reasoning.append(f"Market shows interest: {presence.overall.strong_signals[0].lower()}")

    return reasoning


def score_opportunity(
    presence: PresenceSignals,
    market: Market,
    business_model: BusinessModelProfile,
) -> OpportunityScore:
    """Score one market for one business model."""
    breakdown = ScoreBreakdown(
        market_gap=score_market_gap(presence),
        market_size=score_market_size(market, business_model),
        market_readiness=score_market_readiness(market, business_model),
        competition_level=score_competition(presence),
    )
    overall = compute_overall(breakdown)

    return OpportunityScore(
        overall=overall,
        breakdown=breakdown,
        reasoning=tuple(build_reasoning(breakdown, presence, market, business_model)),
        competition_level=presence.overall.presence_level,
        market_size=market_size_category(market),
        recommendation=recommendation_for(overall),
    )
