"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Depends

from config import settings
from routes.deps import get_market_data
from services.market_data import MarketDataService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "coin-market-api", "commit": settings.git_sha}


@router.get("/health")
async def health(service: MarketDataService = Depends(get_market_data)) -> dict:
    """Deep health check that verifies CoinGecko connectivity."""
    result = {
        "status": "ok",
        "service": "coin-market-api",
        "commit": settings.git_sha,
        "upstream": "not_tested",
        "cache_entries": len(service.store),
    }

    try:
        response = await service.client.ping()
        result["upstream"] = "connected"
        result["upstream_response"] = response
    except Exception as e:
        logger.exception("CoinGecko health check failed")
        result["upstream"] = "error"
        result["upstream_error"] = str(e)

    return result
