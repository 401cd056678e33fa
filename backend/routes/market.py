"""Market-wide routes: listings, watchlist, categories, trending, search.

GET /markets      → paginated market listing (optionally by category)
GET /watchlist    → market rows for a comma-separated list of coin ids
GET /categories   → category leaderboard
GET /trending     → trending coins
GET /search       → text search, debounced per client when X-Client-Id is sent
"""

import logging

from fastapi import APIRouter, Depends, Header, Query

from routes.deps import get_debounced_search, get_market_data
from services import coins
from services.coins import DebouncedSearch
from services.market_data import MarketDataService

logger = logging.getLogger(__name__)

router = APIRouter()


def _dump(models) -> list[dict]:
    return [m.model_dump(mode="json") for m in models]


@router.get("/markets")
async def markets(
    page: int = Query(1, ge=1),
    per_page: int = Query(coins.MARKETS_PER_PAGE, ge=1, le=250),
    category: str | None = Query(None),
    service: MarketDataService = Depends(get_market_data),
) -> dict:
    rows = await coins.get_markets(service, page=page, per_page=per_page, category=category)
    return {"page": page, "per_page": per_page, "category": category, "coins": _dump(rows)}


@router.get("/watchlist")
async def watchlist(
    ids: str = Query(""),
    service: MarketDataService = Depends(get_market_data),
) -> dict:
    id_list = [s.strip() for s in ids.split(",") if s.strip()]
    if not id_list:
        return {"ids": [], "coins": []}
    rows = await coins.get_markets(service, ids=id_list)
    return {"ids": id_list, "coins": _dump(rows)}


@router.get("/categories")
async def categories(service: MarketDataService = Depends(get_market_data)) -> dict:
    rows = await coins.get_categories(service)
    return {"categories": _dump(rows)}


@router.get("/trending")
async def trending(service: MarketDataService = Depends(get_market_data)) -> dict:
    result = await coins.get_trending(service)
    return {"coins": [c.item.model_dump(mode="json") for c in result.coins]}


@router.get("/search")
async def search(
    q: str = Query(""),
    limit: int = Query(7, ge=1, le=50),
    x_client_id: str | None = Header(None),
    service: MarketDataService = Depends(get_market_data),
    debounced: DebouncedSearch = Depends(get_debounced_search),
) -> dict:
    # A debounced request may be answered with a newer query from the same client
    if x_client_id:
        query, result = await debounced.search(x_client_id, q)
    else:
        query, result = q, await coins.search_coins(service, q)
    return {"query": query, "coins": _dump(result.coins[:limit])}
