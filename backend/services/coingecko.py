"""CoinGecko HTTP client, the ONLY place that talks to the market-data API.

Attaches the API key header and default currency/precision params, applies the
request timeout, and turns every failure into an ``UpstreamError`` subtype.
Never retries; callers decide what to do with a failure.
"""

import json
import logging
from typing import Any

import httpx

from config import Settings, settings as default_settings
from errors import DecodeError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


def _error_message(body: Any) -> str | None:
    """Pull a human-readable message out of a structured error body, if any."""
    if not isinstance(body, dict):
        return None
    for field in ("error", "error_message", "message"):
        if isinstance(body.get(field), str):
            return body[field]
    status = body.get("status")
    if isinstance(status, dict) and isinstance(status.get("error_message"), str):
        return status["error_message"]
    return None


class CoinGeckoClient:
    def __init__(
        self,
        settings: Settings = default_settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        headers = {"accept": "application/json"}
        if settings.coingecko_api_key:
            headers[settings.coingecko_api_key_header] = settings.coingecko_api_key
        self._client = httpx.AsyncClient(
            base_url=settings.coingecko_base_url,
            headers=headers,
            timeout=settings.upstream_timeout_seconds,
            transport=transport,
        )

    def _build_params(self, params: dict | None) -> dict[str, Any]:
        merged = dict(self._settings.default_params)
        merged.update(params or {})
        out = {}
        for key, value in merged.items():
            if value is None:
                continue
            # httpx would send Python's True/False; upstream expects lowercase
            out[key] = ("true" if value else "false") if isinstance(value, bool) else value
        return out

    async def execute(self, path: str, params: dict | None = None) -> Any:
        """GET ``path`` and return the parsed JSON body."""
        query = self._build_params(params)
        logger.info("Upstream GET %s %s", path, query)
        try:
            resp = await self._client.get(path, params=query)
        except httpx.TimeoutException as e:
            logger.warning("Upstream timeout for %s: %s", path, e)
            raise UpstreamTimeoutError(path, self._settings.upstream_timeout_seconds) from e
        except httpx.HTTPError as e:
            logger.warning("Upstream request failed for %s: %s", path, e)
            raise UpstreamError(f"Upstream request to {path} failed: {e}") from e

        if not resp.is_success:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = _error_message(body) or resp.reason_phrase or "request failed"
            logger.warning("Upstream %s for %s: %s", resp.status_code, path, message)
            raise UpstreamError(
                f"Upstream returned {resp.status_code} for {path}: {message}",
                upstream_status=resp.status_code,
                body=body,
            )

        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Upstream returned non-JSON body for %s", path)
            raise DecodeError(f"Response from {path} is not valid JSON", upstream_status=resp.status_code) from e

    async def ping(self) -> dict:
        """Lightweight upstream connectivity check."""
        return await self.execute("/ping", {"vs_currency": None, "precision": None})

    async def aclose(self) -> None:
        await self._client.aclose()
