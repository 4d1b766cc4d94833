from __future__ import annotations

from typing import Optional


class RegistryError(Exception):
    """Base class for every failure talking to a third-party token registry."""

    def __init__(self, registry_name: str, detail: str) -> None:
        super().__init__(f"{registry_name}: {detail}")
        self.registry_name = registry_name
        self.detail = detail


class RegistryUnreachableError(RegistryError):
    """Connection failure or timeout."""


class RegistryHttpStatusError(RegistryError):
    """The registry answered with a non-2xx status."""

    def __init__(self, registry_name: str, status_code: int, body: Optional[str] = None) -> None:
        super().__init__(registry_name, f"HTTP {status_code}")
        self.status_code = status_code
        self.body = body


class RegistryMalformedResponseError(RegistryError):
    """The registry answered 2xx but the payload is not the JSON shape we expect."""
