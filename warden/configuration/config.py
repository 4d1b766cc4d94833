from __future__ import annotations

import os
from pathlib import Path


def _as_bool(value: str | None, default: bool = False) -> bool:
    """Parse a truthy/falsey string into a boolean."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


class Settings:
    # API
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", str(Path(__file__).resolve().parents[2] / "data" / "warden.db"))

    # Token address cache
    TOKEN_CACHE_BACKEND: str = os.getenv("TOKEN_CACHE_BACKEND", "database").strip().lower()
    TOKEN_CACHE_TTL_HOURS: float = float(os.getenv("TOKEN_CACHE_TTL_HOURS", "24"))

    # Registries
    REGISTRY_HTTP_TIMEOUT_SECONDS: float = float(os.getenv("REGISTRY_HTTP_TIMEOUT_SECONDS", "10"))
    JUPITER_STRICT_LIST_URL: str = os.getenv("JUPITER_STRICT_LIST_URL", "https://token.jup.ag/strict")
    COINGECKO_BASE_URL: str = os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
    COINGECKO_API_KEY: str = os.getenv("COINGECKO_API_KEY", "")
    COINGECKO_MAX_CANDIDATES: int = int(os.getenv("COINGECKO_MAX_CANDIDATES", "5"))

    # Debug / logging
    NO_COLOR: bool = _as_bool(os.getenv("NO_COLOR"), False)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()
    LOG_LEVEL_WARDEN: str = os.getenv("LOG_LEVEL_WARDEN", "DEBUG").upper()
    LOG_LEVEL_LIB_HTTPX: str = os.getenv("LOG_LEVEL_LIB_HTTPX", "WARNING").upper()
    LOG_LEVEL_LIB_HTTPCORE: str = os.getenv("LOG_LEVEL_LIB_HTTPCORE", "WARNING").upper()
    LOG_LEVEL_LIB_ASYNCIO: str = os.getenv("LOG_LEVEL_LIB_ASYNCIO", "WARNING").upper()
    LOG_LEVEL_LIB_SQLALCHEMY: str = os.getenv("LOG_LEVEL_LIB_SQLALCHEMY", "WARNING").upper()


settings = Settings()
