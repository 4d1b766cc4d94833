from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from warden.core.utils.date_utils import timezone_now
from warden.persistence.db import Base


class TokenAddressCache(Base):
    """
    Registry resolutions keyed by "chain:SYMBOL". One row per key, overwritten on refresh.
    Rows are never evicted; readers ignore rows older than the TTL.
    """
    __tablename__ = "token_address_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cache_key: Mapped[str] = mapped_column(String(160), unique=True, index=True, nullable=False)
    address: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    chain: Mapped[str] = mapped_column(String(32), nullable=False)
    is_native: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=timezone_now, nullable=False)

    def __repr__(self) -> str:
        return f"<TokenAddressCache {self.cache_key} {self.address[-6:]} native={self.is_native}>"
