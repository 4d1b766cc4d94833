from __future__ import annotations

from warden.core.structures.structures import CacheEntry
from warden.core.utils.date_utils import as_aware
from warden.persistence.models import TokenAddressCache


def serialize_cache_row(row: TokenAddressCache) -> CacheEntry:
    """Convert an ORM row into the immutable CacheEntry handed to the resolver."""
    return CacheEntry(
        key=row.cache_key,
        address=row.address,
        display_name=row.name,
        chain=row.chain,
        is_native=bool(row.is_native),
        cached_at=as_aware(row.cached_at),
    )
