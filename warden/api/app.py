from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from warden.api.http_api import router as http_router
from warden.configuration.config import settings
from warden.core.cache.token_cache import build_token_cache_store
from warden.core.integrity.resolver import AddressIntegrityResolver
from warden.logging.logger import get_logger, init_logging

log = get_logger(__name__)


def _parse_allowed_origins(env_value: str) -> List[str]:
    """Parse a comma-separated CORS origins string into a clean list."""
    return [origin.strip() for origin in env_value.split(",") if origin.strip()]


def create_app(resolver: Optional[AddressIntegrityResolver] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        resolver: Resolver to serve; built from settings when omitted.

    Returns:
        FastAPI: Configured Warden API application.
    """
    init_logging()
    app = FastAPI(title="Warden API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_parse_allowed_origins(settings.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.resolver = resolver or AddressIntegrityResolver(cache_store=build_token_cache_store())
    log.info(
        "Warden startup: resolver ready (cache=%s, ttl=%s).",
        type(app.state.resolver.cache_store).__name__,
        app.state.resolver.cache_ttl,
    )

    app.include_router(http_router)
    return app
