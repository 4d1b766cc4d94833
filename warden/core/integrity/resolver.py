"""
Address integrity: the only sanctioned path from a symbol or pasted address to an
on-chain address a transaction tool may use.

One wrong character in a mint or contract address means an irreversible loss, so
`lookup` only ever returns addresses read from a registry (or from the cache of a
previous unambiguous registry hit), and `verify` tells the caller whether a
user-supplied address is known. Both operations are total: every failure is
returned as an outcome the agent can relay verbatim.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from warden.configuration.config import settings
from warden.core.cache.token_cache import InMemoryTokenCacheStore, TokenCacheStore
from warden.core.structures.structures import (
    Ambiguous,
    CacheEntry,
    Chain,
    FoundNative,
    FoundToken,
    LookupMode,
    LookupOutcome,
    LookupRequest,
    NotFound,
    TokenMatch,
    Unverified,
    Verified,
    VerifyOutcome,
    deduplicate_matches,
)
from warden.core.utils.date_utils import as_aware, timezone_now
from warden.core.utils.format_utils import _tail
from warden.core.utils.symbol_utils import build_cache_key, is_native_symbol, normalize_symbol, parse_chain
from warden.integrations.coingecko.coingecko_client import CoinGeckoClient
from warden.integrations.jupiter.jupiter_client import JupiterClient
from warden.integrations.jupiter.jupiter_constants import REGISTRY_DISPLAY_NAME as JUPITER_DISPLAY_NAME
from warden.integrations.registry_errors import RegistryError, RegistryHttpStatusError
from warden.logging.logger import get_logger

log = get_logger(__name__)

SOLANA_ADDRESS_MIN_LENGTH = 32
SOLANA_ADDRESS_MAX_LENGTH = 44
EVM_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")

IRREVERSIBLE = "transactions are irreversible"


def _registry_failure_reason(error: RegistryError, registry_label: str) -> str:
    if isinstance(error, RegistryHttpStatusError):
        return f"{registry_label} returned HTTP {error.status_code}. Try again later."
    return f"Could not reach the {registry_label}: {error.detail}"


def _unsupported_lookup_reason(chain: str) -> str:
    return (
        f'Token lookup is not supported for chain "{chain}". Only "solana" and "ethereum" are supported '
        f"via registry. For Bitcoin and Sui, use get_wallet_addresses to retrieve your wallet address "
        f"and request transfers by address."
    )


class AddressIntegrityResolver:
    """
    Resolve (symbol, chain) into a verified address and check (address, chain) against registries.

    Args:
        cache_store: Key-value store for unambiguous registry hits.
        jupiter_client: Solana registry client.
        coingecko_client: EVM registry client.
        clock: Returns the current timezone-aware time; injected for TTL tests.
        cache_ttl: Maximum age of a cache entry served as a hit.
    """

    def __init__(
            self,
            cache_store: Optional[TokenCacheStore] = None,
            jupiter_client: Optional[JupiterClient] = None,
            coingecko_client: Optional[CoinGeckoClient] = None,
            clock: Callable[[], datetime] = timezone_now,
            cache_ttl: Optional[timedelta] = None,
    ) -> None:
        self.cache_store = cache_store if cache_store is not None else InMemoryTokenCacheStore()
        self.jupiter_client = jupiter_client or JupiterClient()
        self.coingecko_client = coingecko_client or CoinGeckoClient()
        self.clock = clock
        self.cache_ttl = cache_ttl or timedelta(hours=settings.TOKEN_CACHE_TTL_HOURS)

    async def resolve(self, request: LookupRequest) -> LookupOutcome | VerifyOutcome:
        if request.mode is LookupMode.VERIFY:
            return await self.verify(request.symbol_or_address, request.chain)
        return await self.lookup(request.symbol_or_address, request.chain)

    # ------------------------------------------------------------------
    # lookup
    # ------------------------------------------------------------------

    async def lookup(self, symbol: str, chain: str) -> LookupOutcome:
        normalized_symbol = normalize_symbol(symbol)
        resolved_chain = parse_chain(chain)

        if not normalized_symbol:
            return NotFound(reason="A token symbol is required for lookup.")
        if resolved_chain is None:
            log.info("[INTEGRITY][LOOKUP] Unsupported chain '%s' for %s.", chain, normalized_symbol)
            return NotFound(reason=_unsupported_lookup_reason(chain))

        # Native assets have no address; never let a wrapped/bridged contract shadow them
        if is_native_symbol(normalized_symbol, resolved_chain):
            log.debug("[INTEGRITY][LOOKUP] %s is native on %s.", normalized_symbol, resolved_chain.value)
            return FoundNative(symbol=normalized_symbol, chain=resolved_chain.value, name=normalized_symbol)

        cache_key = build_cache_key(resolved_chain, normalized_symbol)
        cached = self._read_fresh_cache_entry(cache_key)
        if cached is not None:
            log.debug("[INTEGRITY][LOOKUP] Cache hit %s.", cached)
            if cached.is_native:
                return FoundNative(symbol=normalized_symbol, chain=cached.chain, name=cached.display_name)
            return FoundToken(
                address=cached.address,
                name=cached.display_name,
                symbol=normalized_symbol,
                chain=cached.chain,
            )

        if resolved_chain is Chain.SOLANA:
            return await self._lookup_solana(normalized_symbol, cache_key)
        if resolved_chain is Chain.ETHEREUM:
            return await self._lookup_ethereum(normalized_symbol, cache_key)

        log.info("[INTEGRITY][LOOKUP] No registry for %s on %s.", normalized_symbol, resolved_chain.value)
        return NotFound(reason=_unsupported_lookup_reason(chain))

    async def _lookup_solana(self, symbol: str, cache_key: str) -> LookupOutcome:
        try:
            tokens = await self.jupiter_client.find_tokens_by_symbol(symbol)
        except RegistryError as error:
            log.warning("[INTEGRITY][LOOKUP][SOLANA] Registry failure for %s: %s", symbol, error)
            return NotFound(reason=_registry_failure_reason(error, "Jupiter token registry"))

        matches = deduplicate_matches(
            [TokenMatch(address=token.address, name=token.name, symbol=token.symbol) for token in tokens]
        )
        if not matches:
            return NotFound(
                reason=(
                    f'No token with symbol "{symbol}" found in the {JUPITER_DISPLAY_NAME}. '
                    f"If you have the contract address, paste it directly."
                )
            )
        return self._settle_matches(matches, Chain.SOLANA, symbol, cache_key)

    async def _lookup_ethereum(self, symbol: str, cache_key: str) -> LookupOutcome:
        try:
            candidates = await self.coingecko_client.find_candidates_by_symbol(symbol)
        except RegistryError as error:
            log.warning("[INTEGRITY][LOOKUP][ETHEREUM] Registry failure for %s: %s", symbol, error)
            return NotFound(reason=_registry_failure_reason(error, "CoinGecko API"))

        if not candidates:
            return NotFound(
                reason=(
                    f'No token with symbol "{symbol}" found in CoinGecko. '
                    f"If you have the contract address, paste it directly."
                )
            )

        matches = deduplicate_matches(await self.coingecko_client.resolve_ethereum_contracts(candidates))
        if not matches:
            return NotFound(
                reason=(
                    f'Found "{symbol}" on CoinGecko but could not resolve an Ethereum contract address. '
                    f"Paste the address directly if you have it."
                )
            )
        return self._settle_matches(matches, Chain.ETHEREUM, symbol, cache_key)

    def _settle_matches(self, matches: List[TokenMatch], chain: Chain, symbol: str, cache_key: str) -> LookupOutcome:
        """One match is cached and returned; several are surfaced untouched for the user to choose."""
        if len(matches) > 1:
            log.info("[INTEGRITY][LOOKUP] %s is ambiguous (%d addresses).", cache_key, len(matches))
            return Ambiguous(matches=tuple(matches))

        token = matches[0]
        self._write_cache_entry(
            CacheEntry(
                key=cache_key,
                address=token.address,
                display_name=token.name,
                chain=chain.value,
                is_native=False,
                cached_at=self.clock(),
            )
        )
        log.info("[INTEGRITY][LOOKUP] %s resolved to …%s.", cache_key, _tail(token.address))
        return FoundToken(address=token.address, name=token.name, symbol=symbol, chain=chain.value)

    # ------------------------------------------------------------------
    # cache
    # ------------------------------------------------------------------

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self.clock() - as_aware(entry.cached_at) <= self.cache_ttl

    def _read_fresh_cache_entry(self, cache_key: str) -> Optional[CacheEntry]:
        """Return the entry only while it is within TTL; stale entries are ignored, not deleted."""
        try:
            entry = self.cache_store.get(cache_key)
        except Exception:
            log.exception("[INTEGRITY][CACHE] Read failed for %s, treating as miss.", cache_key)
            return None
        if entry is None:
            return None
        if not self._is_fresh(entry):
            log.debug("[INTEGRITY][CACHE] Stale entry ignored %s.", entry)
            return None
        return entry

    def _write_cache_entry(self, entry: CacheEntry) -> None:
        try:
            self.cache_store.put(entry)
        except Exception:
            log.exception("[INTEGRITY][CACHE] Write failed for %s.", entry.key)

    # ------------------------------------------------------------------
    # verify
    # ------------------------------------------------------------------

    async def verify(self, address: str, chain: str) -> VerifyOutcome:
        address = address or ""
        resolved_chain = parse_chain(chain)

        if resolved_chain is Chain.SOLANA:
            return await self._verify_solana(address)
        if resolved_chain is Chain.ETHEREUM:
            return self._verify_ethereum(address)

        log.debug("[INTEGRITY][VERIFY] No registry for chain '%s'.", chain)
        return Unverified(
            warning=(
                f"Address verification against a registry is not available for {chain}. "
                f"Verify this address via a block explorer before proceeding, {IRREVERSIBLE}."
            )
        )

    async def _verify_solana(self, address: str) -> VerifyOutcome:
        if not SOLANA_ADDRESS_MIN_LENGTH <= len(address) <= SOLANA_ADDRESS_MAX_LENGTH:
            return Unverified(
                warning=(
                    f"This does not appear to be a valid Solana address (wrong length: {len(address)} characters, "
                    f"expected {SOLANA_ADDRESS_MIN_LENGTH}-{SOLANA_ADDRESS_MAX_LENGTH}). "
                    f"Double-check before proceeding, {IRREVERSIBLE}."
                )
            )

        try:
            token = await self.jupiter_client.find_token_by_address(address)
        except RegistryError as error:
            log.warning("[INTEGRITY][VERIFY][SOLANA] Registry failure for …%s: %s", _tail(address), error)
            return Unverified(
                warning=(
                    f"This address could not be checked because the {JUPITER_DISPLAY_NAME} is unavailable "
                    f"({error.detail}). Proceed with extreme caution, {IRREVERSIBLE}. "
                    f"Only continue if you are certain of this address."
                )
            )

        if token is None:
            return Unverified(
                warning=(
                    f"This address is not in the {JUPITER_DISPLAY_NAME}. This may be a valid but unverified "
                    f"token. Proceed with extreme caution, {IRREVERSIBLE}. "
                    "Only continue if you are certain of this address."
                )
            )

        log.info("[INTEGRITY][VERIFY][SOLANA] …%s verified as %s.", _tail(address), token.symbol)
        return Verified(name=token.name, symbol=token.symbol, chain=Chain.SOLANA.value)

    def _verify_ethereum(self, address: str) -> VerifyOutcome:
        if not EVM_ADDRESS_PATTERN.fullmatch(address):
            return Unverified(
                warning=(
                    "This does not appear to be a valid Ethereum address (expected 0x followed by 40 hex "
                    f"characters). Double-check before proceeding, {IRREVERSIBLE}."
                )
            )
        # No reverse lookup: CoinGecko has no address index and a list scan per verify exhausts the rate limit
        return Unverified(
            warning=(
                "This Ethereum address has a valid format but is not cross-referenced against CoinGecko. "
                f"Verify it via a block explorer before proceeding, {IRREVERSIBLE}."
            )
        )
