from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import quote

import httpx

from warden.configuration.config import settings
from warden.core.structures.structures import TokenMatch
from warden.integrations.coingecko.coingecko_constants import (
    COIN_DETAIL_ENDPOINT,
    COIN_DETAIL_MINIMAL_PARAMS,
    COINS_LIST_ENDPOINT,
    ETHEREUM_PLATFORM_KEY,
    HTTP_TIMEOUT_SECONDS,
    MAX_DETAIL_CANDIDATES,
    REGISTRY_NAME,
)
from warden.integrations.coingecko.coingecko_structures import CoinGeckoCoinDetail, CoinGeckoListEntry
from warden.integrations.registry_errors import RegistryError, RegistryMalformedResponseError
from warden.integrations.registry_helpers import DEFAULT_HEADERS, _http_get_json
from warden.logging.logger import get_logger

log = get_logger(__name__)


def _build_coingecko_headers(api_key: Optional[str]) -> Dict[str, str]:
    """
    Construct CoinGecko HTTP headers, optionally including a demo API key if configured.
    """
    headers: Dict[str, str] = dict(DEFAULT_HEADERS)
    if isinstance(api_key, str) and api_key.strip():
        headers["x-cg-demo-api-key"] = api_key.strip()
    return headers


class CoinGeckoClient:
    """
    Read-only CoinGecko client used for EVM symbol resolution.

    Resolution is two-phase: the full coin list narrows a symbol to candidate ids,
    then a capped number of detail calls extract the Ethereum contract address.
    """

    def __init__(
            self,
            coins_list_url: str = COINS_LIST_ENDPOINT,
            coin_detail_url: str = COIN_DETAIL_ENDPOINT,
            timeout_seconds: float = HTTP_TIMEOUT_SECONDS,
            max_candidates: int = MAX_DETAIL_CANDIDATES,
            api_key: Optional[str] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.coins_list_url = coins_list_url
        self.coin_detail_url = coin_detail_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_candidates = max(1, int(max_candidates))
        self.api_key = settings.COINGECKO_API_KEY if api_key is None else api_key
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            headers=_build_coingecko_headers(self.api_key),
            transport=self.transport,
        )

    async def fetch_coin_list(self, client: httpx.AsyncClient) -> List[CoinGeckoListEntry]:
        payload = await _http_get_json(
            client,
            self.coins_list_url,
            registry_name=REGISTRY_NAME,
            timeout_seconds=self.timeout_seconds,
        )
        if not isinstance(payload, list):
            raise RegistryMalformedResponseError(REGISTRY_NAME, "expected a JSON array of coins")

        entries: List[CoinGeckoListEntry] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            entry = CoinGeckoListEntry.from_json(item)
            if entry is not None:
                entries.append(entry)
        log.debug("[COINGECKO][LIST] Coin list fetched (%d coins).", len(entries))
        return entries

    async def fetch_coin_detail(self, client: httpx.AsyncClient, coin_id: str) -> CoinGeckoCoinDetail:
        url = f"{self.coin_detail_url}/{quote(coin_id, safe='')}"
        payload = await _http_get_json(
            client,
            url,
            registry_name=REGISTRY_NAME,
            params=COIN_DETAIL_MINIMAL_PARAMS,
            timeout_seconds=self.timeout_seconds,
        )
        if not isinstance(payload, dict):
            raise RegistryMalformedResponseError(REGISTRY_NAME, f"expected a JSON object for coin '{coin_id}'")
        return CoinGeckoCoinDetail.from_json(payload)

    async def find_candidates_by_symbol(self, symbol: str) -> List[CoinGeckoListEntry]:
        """Phase A: every coin whose symbol equals `symbol` (case-insensitive), in list order."""
        wanted = symbol.upper()
        async with self._client() as client:
            coins = await self.fetch_coin_list(client)
        return [coin for coin in coins if coin.symbol.upper() == wanted]

    async def resolve_ethereum_contracts(self, candidates: List[CoinGeckoListEntry]) -> List[TokenMatch]:
        """
        Phase B: fetch details for at most `max_candidates` coins and keep those with an
        Ethereum contract address. A failing candidate is skipped, never fatal.
        """
        resolved: List[TokenMatch] = []
        capped = candidates[: self.max_candidates]
        if len(candidates) > len(capped):
            log.info(
                "[COINGECKO][DETAIL] Capping candidate list from %d to %d.",
                len(candidates),
                len(capped),
            )

        async with self._client() as client:
            for candidate in capped:
                try:
                    detail = await self.fetch_coin_detail(client, candidate.id)
                except RegistryError as error:
                    log.debug("[COINGECKO][DETAIL] Skipping '%s' (%s).", candidate.id, error)
                    continue

                address = detail.platform_address(ETHEREUM_PLATFORM_KEY)
                if address is None:
                    log.debug("[COINGECKO][DETAIL] '%s' has no Ethereum platform entry.", candidate.id)
                    continue
                resolved.append(
                    TokenMatch(
                        address=address,
                        name=detail.name or candidate.name,
                        symbol=(detail.symbol or candidate.symbol).upper(),
                    )
                )

        log.debug("[COINGECKO][DETAIL] Resolved %d Ethereum contract(s) from %d candidate(s).", len(resolved), len(capped))
        return resolved
