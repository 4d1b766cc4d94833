from __future__ import annotations

import asyncio
import json
from typing import Dict, Mapping, Optional, Union

import httpx

from warden.configuration.config import settings
from warden.integrations.registry_errors import (
    RegistryHttpStatusError,
    RegistryMalformedResponseError,
    RegistryUnreachableError,
)
from warden.logging.logger import get_logger

log = get_logger(__name__)

JSONScalar = Union[str, int, float, bool, None]
JSON = Union[JSONScalar, Dict[str, "JSON"], list]

DEFAULT_HEADERS: Dict[str, str] = {"Accept": "application/json"}


async def _http_get_json(
        client: httpx.AsyncClient,
        url: str,
        *,
        registry_name: str,
        params: Optional[Mapping[str, str]] = None,
        timeout_seconds: Optional[float] = None,
) -> JSON:
    """
    Perform a single GET and return parsed JSON. No retries.

    `timeout_seconds` bounds the whole request (connect, headers and body). The
    client's own httpx timeouts only bound each phase, so a registry trickling
    bytes would otherwise never time out.

    Raises:
        RegistryUnreachableError on connection errors or when the deadline expires.
        RegistryHttpStatusError on non-2xx responses.
        RegistryMalformedResponseError when the body is not valid JSON.
    """
    deadline = float(settings.REGISTRY_HTTP_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds)
    try:
        response = await asyncio.wait_for(client.get(url, params=params), timeout=deadline)
        response.raise_for_status()
    except asyncio.TimeoutError as exc:
        log.warning("[%s][HTTP] GET exceeded %.1fs: url=%s", registry_name.upper(), deadline, url)
        raise RegistryUnreachableError(registry_name, f"request timed out after {deadline:g}s") from exc
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        log.warning("[%s][HTTP] GET fails: url=%s status=%s", registry_name.upper(), url, status_code)
        raise RegistryHttpStatusError(registry_name, status_code, exc.response.text) from exc
    except httpx.RequestError as exc:
        log.warning("[%s][HTTP] GET request error: url=%s error=%s", registry_name.upper(), url, repr(exc))
        raise RegistryUnreachableError(registry_name, str(exc) or exc.__class__.__name__) from exc

    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        log.warning("[%s][HTTP] Malformed JSON from url=%s", registry_name.upper(), url)
        raise RegistryMalformedResponseError(registry_name, "malformed JSON response") from exc
