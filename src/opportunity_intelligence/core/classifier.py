"""Business-model classification.

Resolves a name, URL, or free-text description into one complete
BusinessModelProfile: catalog name match, then exact domain match, then
keyword rules, then a fixed default. Never fails.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

from . import catalog
from .models import BusinessModelInput, BusinessModelProfile

logger = logging.getLogger(__name__)


def identify_business_model(data: BusinessModelInput) -> BusinessModelProfile:
    """Classify the input into a business-model profile.

    A name matches when any catalog token is a substring of it; URLs only match
    on the exact leftmost domain label. Anything unmatched falls through to
    keyword classification over ``keywords`` and ``description``.
    """
    if data.name:
        normalized = data.name.lower()
        for token, profile in catalog.known_models():
            if token in normalized:
                logger.debug("Matched catalog token %r in name %r", token, data.name)
                return profile

    if data.url:
        domain = _extract_domain(data.url)
        if domain:
            profile = catalog.lookup(domain)
            if profile is not None:
                logger.debug("Matched catalog domain %r", domain)
                return profile

    return _classify_by_keywords(data.keywords, data.description or "")


def _extract_domain(url: str) -> Optional[str]:
    """Return the leftmost hostname label with any ``www.`` prefix removed."""
    candidate = url.strip()
    if not candidate.startswith("http"):
        candidate = f"https://{candidate}"
    try:
        hostname = urlsplit(candidate).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    hostname = hostname.lower()
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname.split(".")[0] or None


def _classify_by_keywords(keywords: list[str], description: str) -> BusinessModelProfile:
    text = " ".join([*keywords, description]).lower()
    for triggers, profile in catalog.CATEGORY_RULES:
        if any(trigger in text for trigger in triggers):
            return profile
    return catalog.DEFAULT_PROFILE


def keywords_for(profile: BusinessModelProfile) -> list[str]:
    """Search keywords fed to the presence signal sources."""
    return [*profile.keywords, profile.name.lower(), profile.category.lower()]
