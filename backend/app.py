"""FastAPI application entry point for the coin market-data API."""

import logging
import sys

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.cache import TTLCache, cache
from services.coingecko import CoinGeckoClient
from services.coins import DebouncedSearch
from services.market_data import MarketDataService

# Structured logging: JSON for production, human-readable for local
if default_settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings = default_settings,
    service: MarketDataService | None = None,
    store: TTLCache = cache,
) -> FastAPI:
    """Build the app. Pass ``service`` to skip creating the real CoinGecko client."""
    app = FastAPI(title="Coin Market API", version="1.0.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    if service is None:
        service = MarketDataService(
            CoinGeckoClient(settings),
            store,
            default_ttl=settings.default_cache_ttl_seconds,
            single_flight=settings.single_flight,
        )
    app.state.market_data = service
    app.state.debounced_search = DebouncedSearch(service, settings.search_debounce_seconds)

    from routes.health import router as health_router
    from routes.coins import router as coins_router
    from routes.market import router as market_router

    app.include_router(health_router)
    app.include_router(coins_router)
    app.include_router(market_router)

    @app.on_event("startup")
    async def _validate_config() -> None:
        missing = settings.validate()
        if missing:
            logger.warning("Missing env vars (upstream may rate-limit or reject): %s", ", ".join(missing))

    @app.on_event("shutdown")
    async def _close_client() -> None:
        await app.state.market_data.aclose()

    return app


app = create_app()
