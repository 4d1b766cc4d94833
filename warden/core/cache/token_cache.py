from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from warden.configuration.config import settings
from warden.core.structures.structures import CacheEntry
from warden.logging.logger import get_logger
from warden.persistence.dao.token_cache import get_token_cache_entry, upsert_token_cache_entry
from warden.persistence.db import get_session_factory, init_db, session_scope

log = get_logger(__name__)


class TokenCacheStore(Protocol):
    """
    Key-value store for resolved token addresses.

    `get` returns whatever is stored under the key, regardless of age; freshness is
    decided by the reader. `put` overwrites any entry with the same key.
    """

    def get(self, key: str) -> Optional[CacheEntry]:
        ...

    def put(self, entry: CacheEntry) -> None:
        ...

    def ping(self) -> bool:
        ...


class InMemoryTokenCacheStore:
    """Process-local store, one entry per key, last writer wins."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry
        log.debug("[CACHE][MEMORY] Stored %s", entry)

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)


class DatabaseTokenCacheStore:
    """Durable store backed by the `token_address_cache` table."""

    def __init__(self, session_factory: Optional[sessionmaker] = None) -> None:
        self._session_factory = session_factory or get_session_factory()

    def get(self, key: str) -> Optional[CacheEntry]:
        with session_scope(self._session_factory) as session:
            return get_token_cache_entry(session, key)

    def put(self, entry: CacheEntry) -> None:
        with session_scope(self._session_factory) as session:
            upsert_token_cache_entry(session, entry)
        log.debug("[CACHE][DB] Stored %s", entry)

    def ping(self) -> bool:
        """Return True when the database answers a trivial query."""
        try:
            with session_scope(self._session_factory) as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            log.exception("[CACHE][DB] Database connectivity check failed")
            return False


def build_token_cache_store(backend: Optional[str] = None) -> TokenCacheStore:
    """Instantiate the cache store selected by TOKEN_CACHE_BACKEND ('database' or 'memory')."""
    selected = (backend or settings.TOKEN_CACHE_BACKEND).strip().lower()
    if selected == "memory":
        log.info("[CACHE] Using in-memory token cache.")
        return InMemoryTokenCacheStore()
    if selected != "database":
        raise ValueError(f"Unknown TOKEN_CACHE_BACKEND '{selected}' (expected 'database' or 'memory')")
    init_db()
    log.info("[CACHE] Using database token cache.")
    return DatabaseTokenCacheStore()
