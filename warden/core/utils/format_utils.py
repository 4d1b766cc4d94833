def _tail(address: str, n: int = 6) -> str:
    """Return the last n characters of an address (for concise logs)."""
    addr = address or ""
    return addr[-n:] if len(addr) >= n else addr
