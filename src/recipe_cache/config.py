import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

from recipe_cache.errors import StoreUnavailable

load_dotenv()


def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Store
    store_backend: str = os.getenv("STORE_BACKEND", "redis")
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    redis_document_key: str = os.getenv("REDIS_DOCUMENT_KEY", "friendly-foods:appdata")

    # Cache
    cache_max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "0"))  # 0 = never evict

    # Anthropic
    anthropic_api_key: str | None = os.getenv("ANTHROPIC_API_KEY")
    anthropic_base_url: str = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-opus-4-5")
    anthropic_max_tokens: int = int(os.getenv("ANTHROPIC_MAX_TOKENS", "2048"))
    anthropic_version: str = os.getenv("ANTHROPIC_VERSION", "2023-06-01")
    # No read timeout unless configured; a hung provider call hangs the request
    anthropic_timeout: float | None = _optional_float("ANTHROPIC_TIMEOUT")

    # Admin
    admin_token: str | None = os.getenv("ADMIN_TOKEN")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3001"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def uses_memory_store(self) -> bool:
        """Check if the in-process store is configured.

        Returns:
            True if STORE_BACKEND is "memory", False otherwise
        """
        return self.store_backend.lower() == "memory"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.store_backend.lower() not in ("redis", "memory"):
            raise ValueError(f"STORE_BACKEND must be 'redis' or 'memory', got {self.store_backend!r}")

        if self.cache_max_entries < 0:
            raise ValueError("CACHE_MAX_ENTRIES must be >= 0 (0 disables eviction)")

        if self.anthropic_max_tokens <= 0:
            raise ValueError("ANTHROPIC_MAX_TOKENS must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance.

    Raises:
        StoreUnavailable: If REDIS_URL is not configured
    """
    if not settings.redis_url:
        raise StoreUnavailable("REDIS_URL environment variable is not set")
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
