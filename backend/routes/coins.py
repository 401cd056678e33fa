"""Single-coin routes: detail, OHLC candles, and the combined detail-page payload."""

import asyncio
import logging

from fastapi import APIRouter, Depends, Query

from errors import UnsupportedPeriodError
from routes.deps import get_market_data
from services import coins
from services.market_data import MarketDataService

logger = logging.getLogger(__name__)

router = APIRouter()


def _validate_period(period: str) -> int | str:
    """Map a chart period to CoinGecko's `days` selector."""
    days = coins.PERIOD_DAYS.get(period.lower())
    if days is None:
        raise UnsupportedPeriodError(period, coins.PERIOD_DAYS.keys())
    return days


def _candles_json(candles) -> list[list[float]]:
    return [list(c) for c in candles]


@router.get("/coins/{coin_id}")
async def coin_detail(coin_id: str, service: MarketDataService = Depends(get_market_data)) -> dict:
    coin = await coins.get_coin(service, coin_id)
    return coin.model_dump(mode="json")


@router.get("/coins/{coin_id}/ohlc")
async def coin_ohlc(
    coin_id: str,
    period: str = Query("daily"),
    vs_currency: str | None = Query(None),
    service: MarketDataService = Depends(get_market_data),
) -> dict:
    days = _validate_period(period)
    candles = await coins.get_ohlc(service, coin_id, days=days, vs_currency=vs_currency)
    return {"coin_id": coin_id, "period": period, "days": days, "candles": _candles_json(candles)}


@router.get("/coins/{coin_id}/overview")
async def coin_overview(
    coin_id: str,
    period: str = Query("daily"),
    service: MarketDataService = Depends(get_market_data),
) -> dict:
    """Detail + candles fetched in parallel; each side fails independently.

    Without coin detail there is nothing to show, so that failure propagates.
    Missing candles only mark the chart as unavailable.
    """
    days = _validate_period(period)
    coin, candles = await asyncio.gather(
        coins.get_coin(service, coin_id),
        coins.get_ohlc(service, coin_id, days=days),
        return_exceptions=True,
    )

    if isinstance(coin, BaseException):
        raise coin

    if isinstance(candles, BaseException):
        logger.warning("OHLC unavailable for %s: %s", coin_id, candles)
        ohlc, ohlc_status = None, "unavailable"
    else:
        ohlc, ohlc_status = _candles_json(candles), "ok"

    return {
        "coin": coin.model_dump(mode="json"),
        "period": period,
        "ohlc": ohlc,
        "ohlc_status": ohlc_status,
    }
