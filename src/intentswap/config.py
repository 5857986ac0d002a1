"""Application configuration using pydantic-settings.

Mock mode is the default: live NEAR Intents calls require an API key.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Database (swap history)
    # ======================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/intentswap.db",
        description="Database connection URL",
    )

    # ======================
    # NEAR Intents
    # ======================
    near_intents_api_key: str = Field(
        default="", description="1Click API bearer token (enables live mode)"
    )
    use_mock: Optional[bool] = Field(
        default=None, description="Force mock mode on or off (off still needs an API key)"
    )
    tokens_api_url: str = Field(
        default="https://api-mng-console.chaindefuser.com/api/tokens",
        description="Token list endpoint",
    )
    oneclick_api_url: str = Field(
        default="https://1click.chaindefuser.com", description="1Click quote API base URL"
    )
    explorer_api_url: str = Field(
        default="https://explorer.near-intents.org/api/v0",
        description="Intents explorer API base URL",
    )

    # ======================
    # Timeouts and caching
    # ======================
    catalog_timeout_seconds: float = Field(
        default=3.0, description="Upper bound on the token list fetch"
    )
    catalog_cache_ttl_seconds: float = Field(
        default=300.0, description="Asset catalog freshness window (5 minutes)"
    )
    request_timeout_seconds: float = Field(
        default=30.0, description="Transport timeout for quote/execute/status calls"
    )

    # ======================
    # Quoting
    # ======================
    slippage_tolerance_bps: int = Field(
        default=300, description="Slippage tolerance in basis points (3%)"
    )
    quote_deadline_seconds: int = Field(
        default=300, description="Quote validity horizon (5 minutes)"
    )
    quote_placeholder_recipient: str = Field(
        default="t1VpYecBW4UudbGcy4ufh61eWxQCoFaUrPs",
        description="Mainnet transparent ZEC address used for dry-run quotes only",
    )

    # ======================
    # Status polling
    # ======================
    poll_interval_seconds: float = Field(default=10.0, description="Base poll interval")
    poll_max_interval_seconds: float = Field(default=60.0, description="Poll interval cap")
    poll_backoff_factor: float = Field(
        default=1.5, description="Interval growth while status is unchanged"
    )
    poll_jitter: float = Field(default=0.1, description="Relative jitter applied to delays")
    poll_max_attempts: int = Field(default=360, description="Give up after this many polls")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def has_api_key(self) -> bool:
        """Check if a NEAR Intents API key is configured."""
        return bool(self.near_intents_api_key.strip())

    @property
    def mock_mode(self) -> bool:
        """Whether the deterministic simulators serve all operations."""
        if not self.has_api_key:
            return True
        return bool(self.use_mock)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "mock_mode": self.mock_mode,
            "database_url": self.database_url,
            "near_intents_api_key": "***" if self.has_api_key else "(not set)",
            "endpoints": {
                "tokens": self.tokens_api_url,
                "oneclick": self.oneclick_api_url,
                "explorer": self.explorer_api_url,
            },
            "quoting": {
                "slippage_bps": self.slippage_tolerance_bps,
                "deadline_seconds": self.quote_deadline_seconds,
            },
            "catalog": {
                "timeout_seconds": self.catalog_timeout_seconds,
                "cache_ttl_seconds": self.catalog_cache_ttl_seconds,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
