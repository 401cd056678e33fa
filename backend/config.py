"""Centralized configuration — all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # CoinGecko upstream
        self.coingecko_base_url: str = os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
        self.coingecko_api_key: str | None = os.getenv("COINGECKO_API_KEY")
        self.coingecko_api_key_header: str = os.getenv("COINGECKO_API_KEY_HEADER", "x-cg-demo-api-key")
        self.upstream_timeout_seconds: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

        # Defaults applied to outbound requests unless the caller overrides them
        self.default_vs_currency: str = os.getenv("DEFAULT_VS_CURRENCY", "inr")
        self.default_precision: str = os.getenv("DEFAULT_PRECISION", "full")

        # Cache + search behaviour
        self.default_cache_ttl_seconds: int = int(os.getenv("DEFAULT_CACHE_TTL_SECONDS", "60"))
        self.search_debounce_seconds: float = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.5"))
        self.single_flight: bool = os.getenv("SINGLE_FLIGHT", "false").lower() in ("1", "true", "yes")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def default_params(self) -> dict[str, str]:
        return {"vs_currency": self.default_vs_currency, "precision": self.default_precision}

    def validate(self) -> list[str]:
        """Return list of missing env vars that production deployments need."""
        required = ["COINGECKO_API_KEY"] if self.is_production else []
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "COINGECKO_API_KEY": "coingecko_api_key",
    }
    return mapping.get(env_var, env_var.lower())
