from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from warden.api.models import DataIntegrityToolCall, LookupResponse, VerifyResponse
from warden.core.integrity.data_integrity_tool import DataIntegrityToolError, run_data_integrity_tool
from warden.core.integrity.resolver import AddressIntegrityResolver
from warden.core.utils.date_utils import timezone_now
from warden.logging.logger import get_logger

router = APIRouter()
log = get_logger(__name__)


def get_resolver(request: Request) -> AddressIntegrityResolver:
    """FastAPI dependency returning the resolver bound to the application."""
    return request.app.state.resolver


@router.get("/api/health", tags=["health"])  # type: ignore[misc]
async def get_health(resolver: AddressIntegrityResolver = Depends(get_resolver)) -> Dict[str, Any]:
    """
    Report service health and token cache reachability.

    Registries are not checked here: they are third-party and rate-limited.
    """
    cache_ok = bool(resolver.cache_store.ping())
    status = "ok" if cache_ok else "degraded"
    return {
        "status": status,
        "timestamp": timezone_now().isoformat(),
        "components": {"cache": {"ok": cache_ok, "backend": type(resolver.cache_store).__name__}},
    }


@router.post("/api/data-integrity", tags=["integrity"])  # type: ignore[misc]
async def call_data_integrity_tool(
        body: DataIntegrityToolCall,
        resolver: AddressIntegrityResolver = Depends(get_resolver),
) -> Dict[str, Any]:
    """
    Execute a `data_integrity` tool call on behalf of the agent.

    The payload is the outcome to relay verbatim; registry failures are outcomes, not HTTP errors.
    """
    try:
        payload = await run_data_integrity_tool(resolver, chain=body.chain, lookup=body.lookup, verify=body.verify)
    except DataIntegrityToolError as error:
        log.info("[HTTP][TOOL] Rejected call without lookup/verify (chain=%s).", body.chain)
        raise HTTPException(status_code=422, detail=str(error)) from error
    log.debug("[HTTP][TOOL] chain=%s → %s", body.chain, sorted(payload.keys()))
    return payload


@router.get(
    "/api/tokens/lookup",
    tags=["integrity"],
    response_model=LookupResponse,
    response_model_exclude_none=True,
)  # type: ignore[misc]
async def lookup_token(
        symbol: str = Query(..., description="Token symbol, optionally $-prefixed."),
        chain: str = Query(..., description="Chain identifier."),
        resolver: AddressIntegrityResolver = Depends(get_resolver),
) -> Dict[str, Any]:
    outcome = await resolver.lookup(symbol, chain)
    return outcome.to_payload()


@router.get(
    "/api/tokens/verify",
    tags=["integrity"],
    response_model=VerifyResponse,
    response_model_exclude_none=True,
)  # type: ignore[misc]
async def verify_address(
        address: str = Query(..., description="Address to verify, passed verbatim."),
        chain: str = Query(..., description="Chain identifier."),
        resolver: AddressIntegrityResolver = Depends(get_resolver),
) -> Dict[str, Any]:
    outcome = await resolver.verify(address, chain)
    return outcome.to_payload()
