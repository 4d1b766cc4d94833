from __future__ import annotations

from datetime import timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from warden.core.structures.structures import CacheEntry
from warden.core.utils.date_utils import as_aware
from warden.persistence.models import TokenAddressCache
from warden.persistence.serializers import serialize_cache_row


def get_token_cache_entry(database_session: Session, cache_key: str) -> Optional[CacheEntry]:
    """
    Return the entry stored under `cache_key`, whatever its age.
    """
    statement = select(TokenAddressCache).where(TokenAddressCache.cache_key == cache_key)
    row = database_session.execute(statement).scalar_one_or_none()
    if row is None:
        return None
    return serialize_cache_row(row)


def upsert_token_cache_entry(database_session: Session, entry: CacheEntry) -> TokenAddressCache:
    """
    Insert or overwrite the row for `entry.key`. The caller owns the commit.
    Timestamps are stored in UTC since SQLite keeps no offset.
    """
    statement = select(TokenAddressCache).where(TokenAddressCache.cache_key == entry.key)
    row = database_session.execute(statement).scalar_one_or_none()
    if row is None:
        row = TokenAddressCache(cache_key=entry.key)
        database_session.add(row)

    row.address = entry.address
    row.name = entry.display_name
    row.chain = entry.chain
    row.is_native = entry.is_native
    row.cached_at = as_aware(entry.cached_at).astimezone(timezone.utc)
    database_session.flush()
    return row
