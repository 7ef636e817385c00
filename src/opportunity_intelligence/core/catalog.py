"""Static registry of known business-model profiles.

Known companies are keyed by a short identifying token (brand name or the
leftmost label of the company's domain). Iteration order matters: name
matching is by substring and the first token found wins, so tokens must not
be substrings of one another or of common words.
"""

from __future__ import annotations

from typing import Iterator, Optional

from .models import BusinessModelProfile, BusinessType, Complexity


def _profile(
    name: str,
    keywords: list[str],
    category: str,
    business_type: BusinessType,
    technical: Complexity,
    regulatory: Complexity,
) -> BusinessModelProfile:
    return BusinessModelProfile(
        name=name,
        keywords=tuple(keywords),
        category=category,
        business_type=business_type,
        technical_complexity=technical,
        regulatory_complexity=regulatory,
    )


B2C, B2B, B2B2C = BusinessType.B2C, BusinessType.B2B, BusinessType.B2B2C
LOW, MEDIUM, HIGH = Complexity.LOW, Complexity.MEDIUM, Complexity.HIGH

KNOWN_MODELS: dict[str, BusinessModelProfile] = {
    "affirm": _profile("Buy Now Pay Later (BNPL)", ["buy now pay later", "installment", "financing", "payment plans"], "Fintech", B2C, MEDIUM, HIGH),
    "doordash": _profile("Food Delivery Marketplace", ["food delivery", "restaurant delivery", "meal delivery"], "Marketplace", B2C, MEDIUM, MEDIUM),
    "robinhood": _profile("Commission-free Trading", ["stock trading", "investing", "commission-free", "retail trading"], "Fintech", B2C, HIGH, HIGH),
    "duolingo": _profile("Gamified Learning Platform", ["language learning", "education", "gamification", "mobile learning"], "Education", B2C, MEDIUM, LOW),
    "canva": _profile("Online Design Tool", ["graphic design", "templates", "design tool", "visual content"], "SaaS", B2C, MEDIUM, LOW),
    "notion": _profile("All-in-one Workspace", ["notes", "productivity", "collaboration", "workspace", "documentation"], "Productivity", B2B2C, MEDIUM, LOW),
    "discord": _profile("Community Chat Platform", ["chat", "community", "gaming", "voice chat", "server"], "Communication", B2C, MEDIUM, LOW),
    "calendly": _profile("Scheduling Tool", ["calendar", "booking", "scheduling", "appointments", "meetings"], "SaaS", B2B, LOW, LOW),
    "zoom": _profile("Video Conferencing", ["video call", "meeting", "conferencing", "webinar", "remote"], "Communication", B2B, HIGH, MEDIUM),
    "substack": _profile("Newsletter Platform", ["newsletter", "publishing", "subscription", "content creator"], "Publishing", B2C, LOW, LOW),
}

# Keyword fallback, evaluated top to bottom. The first rule with any trigger
# contained in the input text wins.
CATEGORY_RULES: list[tuple[tuple[str, ...], BusinessModelProfile]] = [
    (
        ("payment", "finance", "banking", "loan", "credit", "trading", "invest"),
        _profile("Financial Services", ["fintech", "financial services"], "Fintech", B2C, HIGH, HIGH),
    ),
    (
        ("marketplace", "delivery", "booking", "platform", "connect"),
        _profile("Marketplace Platform", ["marketplace", "platform"], "Marketplace", B2C, MEDIUM, MEDIUM),
    ),
    (
        ("software", "saas", "tool", "productivity", "management", "automation"),
        _profile("SaaS Tool", ["saas", "software", "tool"], "SaaS", B2B, MEDIUM, LOW),
    ),
    (
        ("education", "learning", "course", "training", "teach"),
        _profile("Education Platform", ["education", "learning"], "Education", B2C, MEDIUM, LOW),
    ),
    (
        ("chat", "messaging", "communication", "social", "community"),
        _profile("Communication Platform", ["communication", "social"], "Communication", B2C, MEDIUM, LOW),
    ),
    (
        ("ecommerce", "shop", "retail", "store", "sell"),
        _profile("E-commerce Platform", ["ecommerce", "retail"], "E-commerce", B2C, MEDIUM, MEDIUM),
    ),
]

DEFAULT_PROFILE = _profile("Digital Platform", ["digital", "platform"], "Technology", B2C, MEDIUM, LOW)


def lookup(token: str) -> Optional[BusinessModelProfile]:
    """Exact lookup of a catalog token."""
    return KNOWN_MODELS.get(token)


def known_models() -> Iterator[tuple[str, BusinessModelProfile]]:
    """Catalog entries in match-priority order."""
    return iter(KNOWN_MODELS.items())
