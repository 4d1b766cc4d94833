from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from warden.integrations.registry_helpers import JSON


@dataclass(frozen=True)
class CoinGeckoListEntry:
    id: str
    symbol: str
    name: str

    @staticmethod
    def from_json(payload: Dict[str, JSON]) -> Optional["CoinGeckoListEntry"]:
        coin_id = payload.get("id")
        if not isinstance(coin_id, str) or not coin_id:
            return None
        symbol = payload.get("symbol")
        name = payload.get("name")
        return CoinGeckoListEntry(
            id=coin_id,
            symbol=str(symbol) if symbol is not None else "",
            name=str(name) if name is not None else "",
        )


@dataclass(frozen=True)
class CoinGeckoCoinDetail:
    id: str
    name: str
    symbol: str
    platforms: Dict[str, str] = field(default_factory=dict)

    def platform_address(self, platform_key: str) -> Optional[str]:
        """Contract address on `platform_key`, or None when absent or blank."""
        address = self.platforms.get(platform_key)
        if not address or not address.strip():
            return None
        return address.strip()

    @staticmethod
    def from_json(payload: Dict[str, JSON]) -> "CoinGeckoCoinDetail":
        raw_platforms = payload.get("platforms")
        platforms: Dict[str, str] = {}
        if isinstance(raw_platforms, dict):
            for platform_key, address in raw_platforms.items():
                if isinstance(address, str):
                    platforms[str(platform_key)] = address
        name = payload.get("name")
        symbol = payload.get("symbol")
        return CoinGeckoCoinDetail(
            id=str(payload.get("id") or ""),
            name=str(name) if name is not None else "",
            symbol=str(symbol) if symbol is not None else "",
            platforms=platforms,
        )
