"""CoinGecko endpoints used by the dashboard, as thin callers of the fetch facade.

TTLs follow how volatile each endpoint is: coin metadata and categories change
slowly; market listings and OHLC candles move constantly.
"""

import logging

from services.debounce import Debouncer
from services.market_data import MarketDataService
from services.schemas import (
    Candle,
    Category,
    CoinDetail,
    MarketCoin,
    SearchResponse,
    TrendingResponse,
    decode_categories,
    decode_coin,
    decode_markets,
    decode_ohlc,
    decode_search,
    decode_trending,
)

logger = logging.getLogger(__name__)

COIN_TTL = 60
OHLC_TTL = 30
MARKETS_TTL = 30
CATEGORIES_TTL = 300
TRENDING_TTL = 300
SEARCH_TTL = 60

MARKETS_PER_PAGE = 50

# Chart period -> CoinGecko `days` selector
PERIOD_DAYS: dict[str, int | str] = {
    "daily": 1,
    "weekly": 7,
    "monthly": 30,
    "3months": 90,
    "6months": 180,
    "yearly": 365,
    "max": "max",
}


async def get_coin(service: MarketDataService, coin_id: str) -> CoinDetail:
    return await service.fetch(
        f"/coins/{coin_id}",
        {
            "localization": False,
            "tickers": False,
            "community_data": False,
            "developer_data": True,
            "sparkline": True,
        },
        ttl_seconds=COIN_TTL,
        decoder=decode_coin,
    )


async def get_ohlc(
    service: MarketDataService,
    coin_id: str,
    days: int | str = 1,
    vs_currency: str | None = None,
) -> tuple[Candle, ...]:
    """OHLC candles, oldest first. ``vs_currency`` falls back to the configured default."""
    return await service.fetch(
        f"/coins/{coin_id}/ohlc",
        {"vs_currency": vs_currency, "days": days},
        ttl_seconds=OHLC_TTL,
        decoder=decode_ohlc,
    )


async def get_markets(
    service: MarketDataService,
    page: int = 1,
    per_page: int = MARKETS_PER_PAGE,
    category: str | None = None,
    ids: list[str] | None = None,
) -> tuple[MarketCoin, ...]:
    params = {
        "order": "market_cap_desc",
        "per_page": per_page,
        "page": page,
        "price_change_percentage": "1h,24h",
        "category": category,
        "ids": ",".join(ids) if ids else None,
    }
    return await service.fetch("/coins/markets", params, ttl_seconds=MARKETS_TTL, decoder=decode_markets)


async def get_categories(service: MarketDataService) -> tuple[Category, ...]:
    return await service.fetch("/coins/categories", ttl_seconds=CATEGORIES_TTL, decoder=decode_categories)


async def get_trending(service: MarketDataService) -> TrendingResponse:
    return await service.fetch("/search/trending", ttl_seconds=TRENDING_TTL, decoder=decode_trending)


async def search_coins(service: MarketDataService, query: str) -> SearchResponse:
    """Text search. A blank query short-circuits to an empty result, no upstream call."""
    query = query.strip()
    if not query:
        return SearchResponse()
    return await service.fetch("/search", {"query": query}, ttl_seconds=SEARCH_TTL, decoder=decode_search)


class DebouncedSearch:
    """Per-client search debouncing.

    Each client (one search box) gets its own ``Debouncer`` so rapid keystrokes
    collapse into a single upstream search for the latest text. Every coalesced
    caller receives ``(query, result)`` for the query that actually ran, which
    may be newer than the one it sent. Idle debouncers are dropped once their
    call settles or their last caller goes away.
    """

    def __init__(self, service: MarketDataService, delay: float):
        self._service = service
        self._delay = delay
        self._debouncers: dict[str, Debouncer[tuple[str, SearchResponse]]] = {}

    async def _search(self, query: str) -> tuple[str, SearchResponse]:
        return query, await search_coins(self._service, query)

    async def search(self, client_id: str, query: str) -> tuple[str, SearchResponse]:
        debouncer = self._debouncers.get(client_id)
        if debouncer is None:
            debouncer = Debouncer(self._search, self._delay)
            self._debouncers[client_id] = debouncer
        try:
            return await debouncer(query)
        finally:
            if debouncer.idle and self._debouncers.get(client_id) is debouncer:
                del self._debouncers[client_id]

    def __len__(self) -> int:
        return len(self._debouncers)
