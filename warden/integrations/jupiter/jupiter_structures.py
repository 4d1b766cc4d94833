from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from warden.integrations.registry_helpers import JSON


def _to_int_or_none(value: JSON) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class JupiterToken:
    address: str
    name: str
    symbol: str
    decimals: Optional[int]
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @staticmethod
    def from_json(payload: Dict[str, JSON]) -> Optional["JupiterToken"]:
        """Build a token from one strict-list entry; entries without an address are dropped."""
        address = payload.get("address")
        if not isinstance(address, str) or not address:
            return None
        name = payload.get("name")
        symbol = payload.get("symbol")
        raw_tags = payload.get("tags")
        tags: List[str] = [str(tag) for tag in raw_tags] if isinstance(raw_tags, list) else []
        return JupiterToken(
            address=address,
            name=str(name) if name is not None else "",
            symbol=str(symbol) if symbol is not None else "",
            decimals=_to_int_or_none(payload.get("decimals")),
            tags=tuple(tags),
        )
