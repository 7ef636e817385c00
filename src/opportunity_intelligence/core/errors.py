"""Exceptions raised across the analysis boundary."""

from __future__ import annotations


class OpportunityError(Exception):
    """Base class for opportunity analysis errors."""


class InputValidationError(OpportunityError, ValueError):
    """Neither a business type nor a startup URL was supplied."""


class MarketDataUnavailableError(OpportunityError):
    """The market data source could not be read."""


class HistoryUnavailableError(OpportunityError):
    """Stored search history could not be read."""


class RateLimitedError(OpportunityError):
    """An upstream signal source refused the request due to rate limiting.

    Raised inside the clients and always absorbed by the provider's ``measure``.
    """

    def __init__(self, source: str, status_code: int):
        self.source = source
        self.status_code = status_code
        super().__init__(f"{source} API rate limit exceeded (HTTP {status_code})")
