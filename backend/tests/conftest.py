"""
tests/conftest.py
──────────────────
Shared pytest fixtures for the backend test suite.

Fixtures
--------
clock
    Manually advanced clock so cache expiry can be tested without sleeping.

upstream
    Fake CoinGecko API. Register JSON (or a callable) per path; every request
    it receives is recorded in ``upstream.requests``.

service
    ``MarketDataService`` wired to ``upstream`` through ``httpx.MockTransport``
    with an isolated ``TTLCache``.

app_client
    ``httpx.AsyncClient`` wired to the FastAPI app built around ``service``.
"""

from typing import AsyncGenerator

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app import create_app
from config import Settings
from services.cache import TTLCache
from services.coingecko import CoinGeckoClient
from services.market_data import MarketDataService

UPSTREAM_URL = "https://upstream.test"


# ── Fakes ─────────────────────────────────────────────────────────────────────


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """Path-routed stand-in for the CoinGecko API."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, payload=None, status_code: int = 200, handler=None) -> None:
        if handler is None:
            handler = lambda _req: httpx.Response(status_code, json=payload)  # noqa: E731
        self.routes[path] = handler

    def calls(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"error": "coin not found"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def settings() -> Settings:
    s = Settings()
    s.coingecko_base_url = UPSTREAM_URL
    s.coingecko_api_key = "test-key"
    s.coingecko_api_key_header = "x-cg-demo-api-key"
    s.default_vs_currency = "inr"
    s.default_precision = "full"
    s.search_debounce_seconds = 0.05
    return s


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def client(settings: Settings, upstream: FakeUpstream) -> AsyncGenerator[CoinGeckoClient, None]:
    c = CoinGeckoClient(settings, transport=httpx.MockTransport(upstream))
    yield c
    await c.aclose()


@pytest.fixture
def store(clock: FakeClock) -> TTLCache:
    return TTLCache(clock=clock)


@pytest.fixture
def service(client: CoinGeckoClient, store: TTLCache) -> MarketDataService:
    return MarketDataService(client, store, default_ttl=60)


@pytest.fixture
async def app_client(settings: Settings, service: MarketDataService) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(settings=settings, service=service)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Shared payloads ───────────────────────────────────────────────────────────

BITCOIN = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "market_data": {"current_price": {"inr": 5_500_000}, "price_change_percentage_24h": 1.5},
    "categories": ["Cryptocurrency"],
}

OHLC = [
    [1_700_000_000_000, 100.0, 110.0, 95.0, 105.0],
    [1_700_001_800_000, 105.0, 112.0, 101.0, 111.0],
    [1_700_003_600_000, 111.0, 115.0, 108.0, 109.5],
]

MARKETS = [
    {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "current_price": 5_500_000, "market_cap_rank": 1},
    {"id": "ethereum", "symbol": "eth", "name": "Ethereum", "current_price": 290_000, "market_cap_rank": 2},
]

TRENDING = {
    "coins": [
        {"item": {"id": "pepe", "name": "Pepe", "symbol": "PEPE", "market_cap_rank": 30, "thumb": "t.png"}},
        {"item": {"id": "sui", "name": "Sui", "symbol": "SUI", "market_cap_rank": 12, "thumb": "s.png"}},
    ],
    "nfts": [],
}

SEARCH = {
    "coins": [
        {"id": "bitcoin", "name": "Bitcoin", "symbol": "BTC", "market_cap_rank": 1, "thumb": "b.png"},
        {"id": "bitcoin-cash", "name": "Bitcoin Cash", "symbol": "BCH", "market_cap_rank": 20},
    ],
    "exchanges": [],
}
