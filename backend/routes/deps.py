"""FastAPI dependencies shared by the route modules."""

from fastapi import Request

from services.coins import DebouncedSearch
from services.market_data import MarketDataService


def get_market_data(request: Request) -> MarketDataService:
    return request.app.state.market_data


def get_debounced_search(request: Request) -> DebouncedSearch:
    return request.app.state.debounced_search
