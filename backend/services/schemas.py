"""Response shapes for the CoinGecko endpoints the dashboard consumes.

Each decoder validates raw JSON before it is cached and raises ``DecodeError``
on mismatch. Models are frozen and collections are tuples: decoded values are
shared with the cache, so callers must treat them as read-only.
"""

from collections.abc import Callable
from typing import Any, NamedTuple, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from errors import DecodeError

T = TypeVar("T")

Decoder = Callable[[Any], T]


class _Payload(BaseModel):
    # Upstream payloads are large; keep whatever we don't model explicitly.
    model_config = ConfigDict(frozen=True, extra="allow")


class CoinDetail(_Payload):
    id: str
    symbol: str
    name: str
    market_data: dict[str, Any] | None = None


class MarketCoin(_Payload):
    id: str
    symbol: str
    name: str
    image: str | None = None
    current_price: float | None = None
    market_cap: float | None = None
    market_cap_rank: int | None = None
    total_volume: float | None = None
    price_change_percentage_24h: float | None = None


class Category(_Payload):
    name: str
    market_cap: float | None = None
    market_cap_change_24h: float | None = None
    volume_24h: float | None = None
    top_3_coins: tuple[str, ...] = ()


class TrendingItem(_Payload):
    id: str
    name: str
    symbol: str
    market_cap_rank: int | None = None
    thumb: str | None = None
    large: str | None = None
    data: dict[str, Any] | None = None


class TrendingCoin(_Payload):
    item: TrendingItem


class TrendingResponse(_Payload):
    coins: tuple[TrendingCoin, ...]


class SearchCoin(_Payload):
    id: str
    name: str
    symbol: str
    market_cap_rank: int | None = None
    thumb: str | None = None
    large: str | None = None


class SearchResponse(_Payload):
    coins: tuple[SearchCoin, ...] = ()


class Candle(NamedTuple):
    timestamp: int
    open: float
    high: float
    low: float
    close: float


def model_decoder(shape: type[T] | Any) -> Decoder:
    """Build a decoder that validates raw JSON against a pydantic-compatible type."""
    adapter = TypeAdapter(shape)

    def decode(raw: Any):
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            raise DecodeError(f"Unexpected response shape: {e.error_count()} validation error(s)") from e

    return decode


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def decode_ohlc(raw: Any) -> tuple[Candle, ...]:
    """Validate ``[[timestamp, open, high, low, close], ...]`` with strictly increasing timestamps."""
    if not isinstance(raw, list):
        raise DecodeError(f"OHLC payload must be an array, got {type(raw).__name__}")

    candles = []
    previous = None
    for i, row in enumerate(raw):
        if not isinstance(row, list) or len(row) != 5 or not all(_is_number(v) for v in row):
            raise DecodeError(f"OHLC row {i} is not a 5-number tuple: {row!r}")
        candle = Candle(int(row[0]), float(row[1]), float(row[2]), float(row[3]), float(row[4]))
        if previous is not None and candle.timestamp <= previous:
            raise DecodeError(f"OHLC timestamps not strictly increasing at row {i}")
        previous = candle.timestamp
        candles.append(candle)
    return tuple(candles)


decode_coin = model_decoder(CoinDetail)
decode_markets = model_decoder(tuple[MarketCoin, ...])
decode_categories = model_decoder(tuple[Category, ...])
decode_trending = model_decoder(TrendingResponse)
decode_search = model_decoder(SearchResponse)
