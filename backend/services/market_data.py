"""Fetch facade: every page and component goes through ``MarketDataService.fetch``.

Flow: normalize key -> cache lookup -> (miss) upstream call -> decode -> cache write.

Concurrent misses for the same key both go upstream unless ``single_flight``
is enabled; the last write wins. That is acceptable because every call is an
idempotent read. Errors are never cached and always propagate to the caller.
"""

import asyncio
import functools
import logging
from typing import Any, TypeVar

from config import settings
from services.cache import MISSING, TTLCache, normalize_key
from services.coingecko import CoinGeckoClient
from services.schemas import Decoder

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MarketDataService:
    def __init__(
        self,
        client: CoinGeckoClient,
        store: TTLCache,
        default_ttl: float = settings.default_cache_ttl_seconds,
        single_flight: bool = False,
    ):
        self.client = client
        self.store = store
        self.default_ttl = default_ttl
        self.single_flight = single_flight
        self._in_flight: dict[str, asyncio.Future] = {}

    async def fetch(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        ttl_seconds: float | None = None,
        decoder: Decoder[T] | None = None,
    ) -> T:
        """Return the (possibly cached) payload for ``path`` + ``params``.

        ``decoder`` validates the raw JSON before it is cached; without one the
        raw JSON is returned as-is. Cached values are shared: don't mutate them.
        """
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        key = normalize_key(path, params)

        cached = self.store.get(key, MISSING)
        if cached is not MISSING:
            logger.debug("Cache hit: %s", key)
            return cached
        logger.debug("Cache miss: %s", key)

        if not self.single_flight:
            return await self._load(key, path, params, ttl, decoder)

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight request: %s", key)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._load(key, path, params, ttl, decoder))
        self._in_flight[key] = task
        task.add_done_callback(functools.partial(self._release, key))
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Future) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            task.exception()  # mark retrieved even when every waiter has gone

    async def _load(self, key, path, params, ttl, decoder):
        raw = await self.client.execute(path, params)
        value = decoder(raw) if decoder is not None else raw
        self.store.put(key, value, ttl)
        return value

    async def aclose(self) -> None:
        await self.client.aclose()
