from typing import Dict, Optional

from warden.core.structures.structures import Chain

_NATIVE_ASSET_CHAINS: Dict[str, Chain] = {
    "SOL": Chain.SOLANA,
    "ETH": Chain.ETHEREUM,
    "BTC": Chain.BITCOIN,
    "SUI": Chain.SUI,
}


def normalize_symbol(raw_symbol: Optional[str]) -> str:
    """Strip whitespace and a single leading '$', then uppercase ('$bonk' -> 'BONK')."""
    if not raw_symbol:
        return ""
    cleaned = raw_symbol.strip()
    if cleaned.startswith("$"):
        cleaned = cleaned[1:]
    return cleaned.strip().upper()


def normalize_chain_key(raw_chain_key: Optional[str]) -> str:
    if not raw_chain_key:
        return ""
    return raw_chain_key.strip().lower()


def parse_chain(raw_chain_key: Optional[str]) -> Optional[Chain]:
    """Return the supported Chain for a raw key, or None when unsupported."""
    normalized_key = normalize_chain_key(raw_chain_key)
    try:
        return Chain(normalized_key)
    except ValueError:
        return None


def is_native_symbol(symbol: str, chain: Chain) -> bool:
    return _NATIVE_ASSET_CHAINS.get(symbol) is chain


def build_cache_key(chain: Chain, symbol: str) -> str:
    return f"{chain.value}:{symbol}"
