from __future__ import annotations

from typing import List, Optional

import httpx

from warden.integrations.jupiter.jupiter_constants import (
    HTTP_TIMEOUT_SECONDS,
    REGISTRY_NAME,
    STRICT_LIST_ENDPOINT,
)
from warden.integrations.jupiter.jupiter_structures import JupiterToken
from warden.integrations.registry_errors import RegistryMalformedResponseError
from warden.integrations.registry_helpers import DEFAULT_HEADERS, _http_get_json
from warden.logging.logger import get_logger

log = get_logger(__name__)


class JupiterClient:
    """
    Read-only client for the Jupiter strict token list (Solana).

    Every call performs exactly one GET of the full list; nothing is memoized here,
    resolved symbols are cached one level up by the integrity resolver.
    """

    def __init__(
            self,
            strict_list_url: str = STRICT_LIST_ENDPOINT,
            timeout_seconds: float = HTTP_TIMEOUT_SECONDS,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.strict_list_url = strict_list_url
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def fetch_strict_list(self) -> List[JupiterToken]:
        async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                headers=DEFAULT_HEADERS,
                transport=self.transport,
        ) as client:
            payload = await _http_get_json(
                client,
                self.strict_list_url,
                registry_name=REGISTRY_NAME,
                timeout_seconds=self.timeout_seconds,
            )

        if not isinstance(payload, list):
            raise RegistryMalformedResponseError(REGISTRY_NAME, "expected a JSON array of tokens")

        tokens: List[JupiterToken] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            token = JupiterToken.from_json(item)
            if token is not None:
                tokens.append(token)
        log.debug("[JUPITER][LIST] Strict list fetched (%d tokens).", len(tokens))
        return tokens

    async def find_tokens_by_symbol(self, symbol: str) -> List[JupiterToken]:
        """Return every strict-list token whose symbol equals `symbol` (case-insensitive), in list order."""
        wanted = symbol.upper()
        tokens = await self.fetch_strict_list()
        matches = [token for token in tokens if token.symbol.upper() == wanted]
        log.debug("[JUPITER][SYMBOL] %s → %d match(es).", wanted, len(matches))
        return matches

    async def find_token_by_address(self, address: str) -> Optional[JupiterToken]:
        wanted = address.lower()
        for token in await self.fetch_strict_list():
            if token.address.lower() == wanted:
                return token
        return None
