"""Market profiles and the market-data source interface."""

from __future__ import annotations

from typing import Iterable, Protocol

from .models import Market

DEFAULT_MARKETS = ["BR", "IN", "NG", "ID", "MX"]

# Seed profiles (World Bank / ITU, 2022-2023 figures, rounded)
SEED_MARKETS: list[Market] = [
    Market(
        country_code="BR",
        country_name="Brazil",
        population=216_400_000,
        internet_penetration=81.0,
        gdp_per_capita=10_040,
        languages=("Portuguese",),
        app_stores=("Google Play", "App Store"),
        primary_search_engine="Google",
    ),
    Market(
        country_code="IN",
        country_name="India",
        population=1_428_600_000,
        internet_penetration=46.0,
        gdp_per_capita=2_480,
        languages=("Hindi", "English"),
        app_stores=("Google Play", "App Store"),
        primary_search_engine="Google",
    ),
    Market(
        country_code="NG",
        country_name="Nigeria",
        population=223_800_000,
        internet_penetration=55.0,
        gdp_per_capita=1_620,
        languages=("English", "Hausa", "Yoruba", "Igbo"),
        app_stores=("Google Play", "App Store"),
        primary_search_engine="Google",
    ),
    Market(
        country_code="ID",
        country_name="Indonesia",
        population=277_500_000,
        internet_penetration=69.0,
        gdp_per_capita=4_940,
        languages=("Indonesian",),
        app_stores=("Google Play", "App Store"),
        primary_search_engine="Google",
    ),
    Market(
        country_code="MX",
        country_name="Mexico",
        population=128_500_000,
        internet_penetration=76.0,
        gdp_per_capita=13_930,
        languages=("Spanish",),
        app_stores=("Google Play", "App Store"),
        primary_search_engine="Google",
    ),
]


class MarketDataSource(Protocol):
    """Read-only provider of market profiles."""

    async def fetch_markets(self, country_codes: list[str]) -> list[Market]: ...


class StaticMarketSource:
    """In-memory market source. Unknown country codes are skipped."""

    def __init__(self, markets: Iterable[Market] = SEED_MARKETS):
        self._markets = {m.country_code: m for m in markets}

    async def fetch_markets(self, country_codes: list[str]) -> list[Market]:
        return [self._markets[code] for code in country_codes if code in self._markets]
