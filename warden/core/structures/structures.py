from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

from warden.core.utils.format_utils import _tail


class Chain(str, Enum):
    SOLANA = "solana"
    ETHEREUM = "ethereum"
    BITCOIN = "bitcoin"
    SUI = "sui"


class LookupMode(str, Enum):
    LOOKUP = "lookup"
    VERIFY = "verify"


@dataclass(frozen=True)
class LookupRequest:
    """A single lookup or verify call as received from the agent tool layer."""
    symbol_or_address: str
    chain: str
    mode: LookupMode


@dataclass(frozen=True)
class CacheEntry:
    """
    Persisted resolution of a (chain, symbol) pair.

    `key` is "chain:SYMBOL". Freshness is judged by the reader against `cached_at`.
    """
    key: str
    address: str
    display_name: str
    chain: str
    is_native: bool
    cached_at: datetime

    def __str__(self) -> str:
        return (f"[key={self.key} "
                f"address=…{_tail(self.address)} "
                f"native={self.is_native} "
                f"cachedAt={self.cached_at.isoformat()}]")


@dataclass(frozen=True)
class TokenMatch:
    address: str
    name: str
    symbol: str

    def to_payload(self) -> Dict[str, Any]:
        return {"address": self.address, "name": self.name, "symbol": self.symbol}


@dataclass(frozen=True)
class FoundNative:
    """The symbol is the chain's base currency; callers pass a native flag instead of an address."""
    symbol: str
    chain: str
    name: str = ""

    def to_payload(self) -> Dict[str, Any]:
        return {
            "found": True,
            "isNative": True,
            "name": self.name or self.symbol,
            "symbol": self.symbol,
            "chain": self.chain,
        }


@dataclass(frozen=True)
class FoundToken:
    address: str
    name: str
    symbol: str
    chain: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "found": True,
            "isNative": False,
            "address": self.address,
            "name": self.name,
            "symbol": self.symbol,
            "chain": self.chain,
        }


@dataclass(frozen=True)
class Ambiguous:
    """Two or more distinct addresses share the symbol; the user must pick one."""
    matches: Tuple[TokenMatch, ...] = field(default_factory=tuple)

    def to_payload(self) -> Dict[str, Any]:
        return {"ambiguous": True, "matches": [match.to_payload() for match in self.matches]}


@dataclass(frozen=True)
class NotFound:
    reason: str

    def to_payload(self) -> Dict[str, Any]:
        return {"found": False, "reason": self.reason}


@dataclass(frozen=True)
class Verified:
    name: str
    symbol: str
    chain: str

    def to_payload(self) -> Dict[str, Any]:
        return {"verified": True, "name": self.name, "symbol": self.symbol, "chain": self.chain}


@dataclass(frozen=True)
class Unverified:
    warning: str

    def to_payload(self) -> Dict[str, Any]:
        return {"verified": False, "warning": self.warning}


LookupOutcome = Union[FoundNative, FoundToken, Ambiguous, NotFound]
VerifyOutcome = Union[Verified, Unverified]


def deduplicate_matches(matches: List[TokenMatch]) -> List[TokenMatch]:
    """Drop repeated addresses (case-insensitive) while preserving first-seen order."""
    seen = set()
    deduped: List[TokenMatch] = []
    for match in matches:
        identifier = match.address.lower()
        if identifier not in seen:
            seen.add(identifier)
            deduped.append(match)
    return deduped
