from __future__ import annotations

import asyncio
from datetime import timedelta

import httpx
import pytest

from conftest import (
    BONK_IMPOSTOR_MINT,
    BONK_MINT,
    USDC_ERC20,
    USDC_MINT,
    build_resolver,
    coingecko_detail,
    jupiter_token,
)
from warden.core.structures.structures import (
    Ambiguous,
    CacheEntry,
    FoundNative,
    FoundToken,
    LookupMode,
    LookupRequest,
    NotFound,
)


def _lookup(resolver, symbol: str, chain: str):
    return asyncio.run(resolver.lookup(symbol, chain))


@pytest.mark.parametrize(
    "symbol, chain",
    [("SOL", "solana"), ("ETH", "ethereum"), ("BTC", "bitcoin"), ("SUI", "sui"), ("$sol", "Solana")],
)
def test_native_assets_short_circuit_without_registry_call(resolver, registry, cache_store, symbol, chain) -> None:
    registry.fail_with_connection_error()

    outcome = _lookup(resolver, symbol, chain)

    assert isinstance(outcome, FoundNative)
    assert outcome.chain == chain.lower()
    assert outcome.symbol == symbol.lstrip("$").upper()
    assert registry.call_count == 0
    assert len(cache_store) == 0


def test_native_symbol_on_foreign_chain_goes_to_registry(resolver, registry) -> None:
    wrapped_eth = "7vfCXTUXx5WJV5JADk17DUJ4ksgau7utNKj4b963voxs"
    registry.jupiter_tokens = [jupiter_token(wrapped_eth, "ETH", "Ether (Portal)", 8)]

    outcome = _lookup(resolver, "ETH", "solana")

    assert outcome == FoundToken(address=wrapped_eth, name="Ether (Portal)", symbol="ETH", chain="solana")
    assert registry.call_count == 1


def test_single_solana_match_is_returned_and_cached(resolver, registry, cache_store, clock) -> None:
    registry.jupiter_tokens = [
        jupiter_token(BONK_MINT, "Bonk", "Bonk", 5),
        jupiter_token(USDC_MINT, "USDC", "USD Coin"),
    ]

    first = _lookup(resolver, "BONK", "solana")
    clock.advance(timedelta(hours=23))
    second = _lookup(resolver, "$bonk", "solana")

    assert first == FoundToken(address=BONK_MINT, name="Bonk", symbol="BONK", chain="solana")
    assert second == first
    assert registry.call_count == 1

    stored = cache_store.get("solana:BONK")
    assert stored is not None
    assert stored.address == BONK_MINT
    assert stored.is_native is False
    assert stored.cached_at == clock.now - timedelta(hours=23)


def test_ambiguous_solana_symbol_lists_all_matches_and_is_not_cached(resolver, registry, cache_store) -> None:
    registry.jupiter_tokens = [
        jupiter_token(BONK_MINT, "BONK", "Bonk"),
        jupiter_token(BONK_IMPOSTOR_MINT, "bonk", "Bonk Classic"),
    ]

    outcome = _lookup(resolver, "BONK", "solana")
    again = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, Ambiguous)
    assert [match.address for match in outcome.matches] == [BONK_MINT, BONK_IMPOSTOR_MINT]
    assert [match.name for match in outcome.matches] == ["Bonk", "Bonk Classic"]
    assert isinstance(again, Ambiguous)
    assert registry.call_count == 2
    assert cache_store.get("solana:BONK") is None


def test_repeated_address_for_same_symbol_is_not_ambiguous(resolver, registry) -> None:
    registry.jupiter_tokens = [
        jupiter_token(BONK_MINT, "BONK", "Bonk"),
        jupiter_token(BONK_MINT, "BONK", "Bonk"),
    ]

    outcome = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, FoundToken)
    assert outcome.address == BONK_MINT


def test_unknown_solana_symbol_is_not_found(resolver, registry) -> None:
    registry.jupiter_tokens = [jupiter_token(BONK_MINT, "BONK", "Bonk")]

    outcome = _lookup(resolver, "UNOBTAINIUM", "solana")

    assert isinstance(outcome, NotFound)
    assert "Jupiter" in outcome.reason
    assert "paste it directly" in outcome.reason


def test_stale_cache_entry_triggers_fresh_registry_fetch(resolver, registry, cache_store, clock) -> None:
    cache_store.put(
        CacheEntry(
            key="solana:BONK",
            address="OldBonkMintxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx",
            display_name="Old Bonk",
            chain="solana",
            is_native=False,
            cached_at=clock.now - timedelta(hours=25),
        )
    )
    registry.jupiter_tokens = [jupiter_token(BONK_MINT, "BONK", "Bonk")]

    outcome = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, FoundToken)
    assert outcome.address == BONK_MINT
    assert registry.call_count == 1
    refreshed = cache_store.get("solana:BONK")
    assert refreshed.address == BONK_MINT
    assert refreshed.cached_at == clock.now


def test_fresh_cache_entry_is_served_without_registry(resolver, registry, cache_store, clock) -> None:
    cache_store.put(
        CacheEntry(
            key="ethereum:USDC",
            address=USDC_ERC20,
            display_name="USDC",
            chain="ethereum",
            is_native=False,
            cached_at=clock.now - timedelta(hours=23, minutes=59),
        )
    )
    registry.fail_with_connection_error()

    outcome = _lookup(resolver, "usdc", "ethereum")

    assert outcome == FoundToken(address=USDC_ERC20, name="USDC", symbol="USDC", chain="ethereum")
    assert registry.call_count == 0


def test_cache_entry_exactly_at_ttl_is_still_fresh(resolver, registry, cache_store, clock) -> None:
    cache_store.put(
        CacheEntry(
            key="solana:BONK",
            address=BONK_MINT,
            display_name="Bonk",
            chain="solana",
            is_native=False,
            cached_at=clock.now - timedelta(hours=24),
        )
    )
    registry.fail_with_connection_error()

    outcome = _lookup(resolver, "BONK", "solana")

    assert outcome == FoundToken(address=BONK_MINT, name="Bonk", symbol="BONK", chain="solana")
    assert registry.call_count == 0

    clock.advance(timedelta(microseconds=1))
    expired = _lookup(resolver, "BONK", "solana")

    assert isinstance(expired, NotFound)
    assert registry.call_count == 1


class _BrokenCacheStore:
    def __init__(self) -> None:
        self.put_attempts = 0

    def get(self, key):
        raise RuntimeError("cache backend offline")

    def put(self, entry) -> None:
        self.put_attempts += 1
        raise RuntimeError("cache backend offline")

    def ping(self) -> bool:
        return False


def test_failing_cache_store_falls_back_to_registry(registry, clock) -> None:
    store = _BrokenCacheStore()
    resolver = build_resolver(registry, clock, store)
    registry.jupiter_tokens = [jupiter_token(BONK_MINT, "BONK", "Bonk")]

    first = _lookup(resolver, "BONK", "solana")
    second = _lookup(resolver, "BONK", "solana")

    assert first == FoundToken(address=BONK_MINT, name="Bonk", symbol="BONK", chain="solana")
    assert second == first
    assert registry.call_count == 2
    assert store.put_attempts == 2


def test_failing_cache_store_keeps_ambiguous_results(registry, clock) -> None:
    resolver = build_resolver(registry, clock, _BrokenCacheStore())
    registry.jupiter_tokens = [
        jupiter_token(BONK_MINT, "BONK", "Bonk"),
        jupiter_token(BONK_IMPOSTOR_MINT, "BONK", "Bonk Classic"),
    ]

    outcome = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, Ambiguous)
    assert len(outcome.matches) == 2


def test_cached_native_confirmation_returns_found_native(resolver, registry, cache_store, clock) -> None:
    cache_store.put(
        CacheEntry(
            key="solana:WSOL",
            address="",
            display_name="Wrapped SOL",
            chain="solana",
            is_native=True,
            cached_at=clock.now,
        )
    )

    outcome = _lookup(resolver, "WSOL", "solana")

    assert outcome == FoundNative(symbol="WSOL", chain="solana", name="Wrapped SOL")
    assert registry.call_count == 0


@pytest.mark.parametrize("chain", ["bitcoin", "sui"])
@pytest.mark.parametrize("symbol", ["USDC", "ORDI", "$cetus"])
def test_lookup_on_chains_without_registry_is_not_found(resolver, registry, chain, symbol) -> None:
    outcome = _lookup(resolver, symbol, chain)

    assert isinstance(outcome, NotFound)
    assert "not supported" in outcome.reason
    assert "get_wallet_addresses" in outcome.reason
    assert registry.call_count == 0


def test_lookup_on_unknown_chain_is_not_found(resolver, registry) -> None:
    outcome = _lookup(resolver, "USDC", "dogechain")

    assert isinstance(outcome, NotFound)
    assert '"dogechain"' in outcome.reason
    assert registry.call_count == 0


def test_empty_symbol_is_not_found(resolver, registry) -> None:
    outcome = _lookup(resolver, " $ ", "solana")

    assert isinstance(outcome, NotFound)
    assert registry.call_count == 0


@pytest.mark.parametrize("failure", ["connection", "timeout"])
def test_solana_registry_unreachable_is_not_found(resolver, registry, failure) -> None:
    if failure == "connection":
        registry.fail_with_connection_error()
    else:
        registry.fail_with_timeout()

    outcome = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, NotFound)
    assert outcome.reason.startswith("Could not reach the Jupiter token registry")


def test_solana_registry_http_error_embeds_status(resolver, registry) -> None:
    registry.status_overrides["/strict"] = 503

    outcome = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, NotFound)
    assert "HTTP 503" in outcome.reason


def test_solana_registry_malformed_json_is_not_found(resolver, registry) -> None:
    registry.raw_bodies["/strict"] = b"<html>maintenance</html>"

    outcome = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, NotFound)
    assert "Jupiter" in outcome.reason


def test_solana_registry_non_list_payload_is_not_found(resolver, registry) -> None:
    registry.raw_bodies["/strict"] = b'{"tokens": []}'

    outcome = _lookup(resolver, "BONK", "solana")

    assert isinstance(outcome, NotFound)
    assert "Could not reach" in outcome.reason


def test_ethereum_single_contract_is_returned_and_cached(resolver, registry, cache_store) -> None:
    registry.coin_list = [
        {"id": "usd-coin", "symbol": "usdc", "name": "USDC"},
        {"id": "tether", "symbol": "usdt", "name": "Tether"},
    ]
    registry.coin_details["usd-coin"] = coingecko_detail("usd-coin", "USDC", "usdc", USDC_ERC20)

    outcome = _lookup(resolver, "USDC", "ethereum")

    assert outcome == FoundToken(address=USDC_ERC20, name="USDC", symbol="USDC", chain="ethereum")
    assert registry.paths() == ["/api/v3/coins/list", "/api/v3/coins/usd-coin"]
    assert cache_store.get("ethereum:USDC").address == USDC_ERC20


def test_ethereum_detail_request_disables_extra_data(resolver, registry) -> None:
    registry.coin_list = [{"id": "usd-coin", "symbol": "usdc", "name": "USDC"}]
    registry.coin_details["usd-coin"] = coingecko_detail("usd-coin", "USDC", "usdc", USDC_ERC20)

    _lookup(resolver, "USDC", "ethereum")

    detail_url = registry.calls[1]
    for flag in ("localization", "tickers", "market_data", "community_data", "developer_data"):
        assert detail_url.params[flag] == "false"


def test_ethereum_multiple_contracts_are_ambiguous_and_not_cached(resolver, registry, cache_store) -> None:
    other = "0x1111111111111111111111111111111111111111"
    registry.coin_list = [
        {"id": "usd-coin", "symbol": "usdc", "name": "USDC"},
        {"id": "bridged-usdc", "symbol": "USDC", "name": "Bridged USDC"},
    ]
    registry.coin_details["usd-coin"] = coingecko_detail("usd-coin", "USDC", "usdc", USDC_ERC20)
    registry.coin_details["bridged-usdc"] = coingecko_detail("bridged-usdc", "Bridged USDC", "usdc", other)

    outcome = _lookup(resolver, "USDC", "ethereum")

    assert isinstance(outcome, Ambiguous)
    assert [m.address for m in outcome.matches] == [USDC_ERC20, other]
    assert all(m.symbol == "USDC" for m in outcome.matches)
    assert cache_store.get("ethereum:USDC") is None


def test_ethereum_detail_fan_out_is_capped_at_five(resolver, registry) -> None:
    registry.coin_list = [{"id": f"pepe-{i}", "symbol": "pepe", "name": f"Pepe {i}"} for i in range(8)]

    outcome = _lookup(resolver, "PEPE", "ethereum")

    detail_paths = [path for path in registry.paths() if path != "/api/v3/coins/list"]
    assert detail_paths == [f"/api/v3/coins/pepe-{i}" for i in range(5)]
    assert isinstance(outcome, NotFound)
    assert "could not resolve an Ethereum contract address" in outcome.reason


def test_ethereum_failed_or_platformless_candidates_are_skipped(resolver, registry) -> None:
    registry.coin_list = [
        {"id": "usdc-broken", "symbol": "usdc", "name": "Broken"},
        {"id": "usdc-solana-only", "symbol": "usdc", "name": "Solana USDC"},
        {"id": "usd-coin", "symbol": "usdc", "name": "USDC"},
    ]
    registry.status_overrides["/api/v3/coins/usdc-broken"] = 500
    registry.coin_details["usdc-solana-only"] = coingecko_detail("usdc-solana-only", "Solana USDC", "usdc", None)
    registry.coin_details["usd-coin"] = coingecko_detail("usd-coin", "USDC", "usdc", USDC_ERC20)

    outcome = _lookup(resolver, "USDC", "ethereum")

    assert outcome == FoundToken(address=USDC_ERC20, name="USDC", symbol="USDC", chain="ethereum")
    assert len(registry.calls) == 4


def test_ethereum_unknown_symbol_is_not_found(resolver, registry) -> None:
    registry.coin_list = [{"id": "tether", "symbol": "usdt", "name": "Tether"}]

    outcome = _lookup(resolver, "UNOBTAINIUM", "ethereum")

    assert isinstance(outcome, NotFound)
    assert "CoinGecko" in outcome.reason
    assert registry.call_count == 1


def test_ethereum_list_http_error_embeds_status(resolver, registry) -> None:
    registry.status_overrides["/api/v3/coins/list"] = 429

    outcome = _lookup(resolver, "USDC", "ethereum")

    assert isinstance(outcome, NotFound)
    assert outcome.reason == "CoinGecko API returned HTTP 429. Try again later."


def test_ethereum_registry_unreachable_is_not_found(resolver, registry) -> None:
    registry.error = httpx.ConnectTimeout("connect timed out")

    outcome = _lookup(resolver, "USDC", "ethereum")

    assert isinstance(outcome, NotFound)
    assert outcome.reason.startswith("Could not reach the CoinGecko API")


def test_resolve_dispatches_lookup_requests(resolver, registry) -> None:
    registry.jupiter_tokens = [jupiter_token(BONK_MINT, "BONK", "Bonk")]

    outcome = asyncio.run(resolver.resolve(LookupRequest("BONK", "solana", LookupMode.LOOKUP)))

    assert isinstance(outcome, FoundToken)
