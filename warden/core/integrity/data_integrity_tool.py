from __future__ import annotations

from typing import Any, Dict, Optional

from warden.core.integrity.resolver import AddressIntegrityResolver
from warden.core.structures.structures import LookupMode, LookupRequest
from warden.logging.logger import get_logger

log = get_logger(__name__)

DATA_INTEGRITY_TOOL_NAME = "data_integrity"

DATA_INTEGRITY_TOOL_DESCRIPTION = (
    "MANDATORY safety tool. Call before EVERY use of any token address, contract address, or on-chain "
    "identifier. Two modes: (1) lookup: resolves a token symbol to a verified on-chain address from "
    "Jupiter (Solana) or CoinGecko (Ethereum). (2) verify: cross-references a user-supplied address "
    "against known registries and returns a warning if unverifiable. Never use an address that did not "
    "come from this tool or pass verbatim through its verify mode."
)


class DataIntegrityToolError(ValueError):
    pass


def build_lookup_request(*, chain: str, lookup: Optional[str] = None, verify: Optional[str] = None) -> LookupRequest:
    """
    Translate raw tool arguments into a LookupRequest. `lookup` wins when both are given.

    Raises:
        DataIntegrityToolError: neither `lookup` nor `verify` was provided.
    """
    if lookup is not None:
        return LookupRequest(symbol_or_address=lookup, chain=chain, mode=LookupMode.LOOKUP)
    if verify is not None:
        return LookupRequest(symbol_or_address=verify, chain=chain, mode=LookupMode.VERIFY)
    raise DataIntegrityToolError(
        f"{DATA_INTEGRITY_TOOL_NAME} requires either 'lookup' (symbol) or 'verify' (address) to be specified."
    )


async def run_data_integrity_tool(
        resolver: AddressIntegrityResolver,
        *,
        chain: str,
        lookup: Optional[str] = None,
        verify: Optional[str] = None,
) -> Dict[str, Any]:
    """Execute one `data_integrity` tool call and return the payload the agent relays to the user."""
    request = build_lookup_request(chain=chain, lookup=lookup, verify=verify)
    log.debug("[TOOL][%s] mode=%s chain=%s", DATA_INTEGRITY_TOOL_NAME, request.mode.value, request.chain)
    outcome = await resolver.resolve(request)
    return outcome.to_payload()


def data_integrity_tool_schema() -> Dict[str, Any]:
    """JSON schema of the tool arguments, in the function-calling format LLM providers expect."""
    return {
        "name": DATA_INTEGRITY_TOOL_NAME,
        "description": DATA_INTEGRITY_TOOL_DESCRIPTION,
        "parameters": {
            "type": "object",
            "properties": {
                "lookup": {
                    "type": "string",
                    "description": "Token symbol to resolve, e.g. 'BONK' or '$USDC'.",
                },
                "verify": {
                    "type": "string",
                    "description": "A user-supplied address to cross-reference, passed verbatim.",
                },
                "chain": {
                    "type": "string",
                    "description": "The chain for lookup or verification: 'solana', 'ethereum', 'bitcoin', or 'sui'.",
                },
            },
            "required": ["chain"],
        },
    }
