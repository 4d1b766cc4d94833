from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import httpx
import pytest

from warden.core.cache.token_cache import InMemoryTokenCacheStore
from warden.core.integrity.resolver import AddressIntegrityResolver
from warden.integrations.coingecko.coingecko_client import CoinGeckoClient
from warden.integrations.jupiter.jupiter_client import JupiterClient

JUPITER_URL = "https://jupiter.test/strict"
COINGECKO_BASE = "https://coingecko.test/api/v3"

BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
BONK_IMPOSTOR_MINT = "BoNKimpostorxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx1"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDC_ERC20 = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


class MutableClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RegistryStub:
    """
    In-process stand-in for Jupiter and CoinGecko behind an httpx.MockTransport.

    `calls` records every requested URL so tests can assert that no network call happened.
    """

    def __init__(self) -> None:
        self.jupiter_tokens: List[dict] = []
        self.coin_list: List[dict] = []
        self.coin_details: Dict[str, dict] = {}
        self.status_overrides: Dict[str, int] = {}
        self.raw_bodies: Dict[str, bytes] = {}
        self.error: Optional[Exception] = None
        self.calls: List[httpx.URL] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request.url)
        if self.error is not None:
            raise self.error

        path = request.url.path
        if path in self.status_overrides:
            return httpx.Response(self.status_overrides[path], json={"error": "stubbed"})
        if path in self.raw_bodies:
            return httpx.Response(200, content=self.raw_bodies[path])

        if request.url.host == "jupiter.test":
            return httpx.Response(200, json=self.jupiter_tokens)
        if path == "/api/v3/coins/list":
            return httpx.Response(200, json=self.coin_list)
        if path.startswith("/api/v3/coins/"):
            coin_id = path.rsplit("/", 1)[-1]
            detail = self.coin_details.get(coin_id)
            if detail is None:
                return httpx.Response(404, json={"error": "coin not found"})
            return httpx.Response(200, json=detail)
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def fail_with_connection_error(self) -> None:
        self.error = httpx.ConnectError("connection refused")

    def fail_with_timeout(self) -> None:
        self.error = httpx.ReadTimeout("timed out")

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def paths(self) -> List[str]:
        return [url.path for url in self.calls]


@pytest.fixture
def registry() -> RegistryStub:
    return RegistryStub()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def cache_store() -> InMemoryTokenCacheStore:
    return InMemoryTokenCacheStore()


def build_resolver(registry: RegistryStub, clock: MutableClock, cache_store) -> AddressIntegrityResolver:
    transport = registry.transport()
    return AddressIntegrityResolver(
        cache_store=cache_store,
        jupiter_client=JupiterClient(strict_list_url=JUPITER_URL, timeout_seconds=10, transport=transport),
        coingecko_client=CoinGeckoClient(
            coins_list_url=f"{COINGECKO_BASE}/coins/list",
            coin_detail_url=f"{COINGECKO_BASE}/coins",
            timeout_seconds=10,
            max_candidates=5,
            api_key="",
            transport=transport,
        ),
        clock=clock,
        cache_ttl=timedelta(hours=24),
    )


@pytest.fixture
def resolver(registry: RegistryStub, clock: MutableClock, cache_store: InMemoryTokenCacheStore) -> AddressIntegrityResolver:
    return build_resolver(registry, clock, cache_store)


def jupiter_token(address: str, symbol: str, name: str, decimals: int = 6) -> dict:
    return {"address": address, "symbol": symbol, "name": name, "decimals": decimals, "tags": ["community"]}


def coingecko_detail(coin_id: str, name: str, symbol: str, ethereum: Optional[str]) -> dict:
    platforms = {"ethereum": ethereum} if ethereum is not None else {"solana": USDC_MINT}
    return {"id": coin_id, "name": name, "symbol": symbol.lower(), "platforms": platforms}
