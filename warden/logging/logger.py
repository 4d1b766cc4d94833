# warden/logging/logger.py
from __future__ import annotations

import logging
import sys
import time
from typing import Optional

from warden.configuration.config import settings

# ANSI colors
_COLORS = {
    "RESET": "\033[0m",
    "DIM": "\033[2m",
    "RED": "\033[31m",
    "GREEN": "\033[32m",
    "YELLOW": "\033[33m",
    "MAGENTA": "\033[35m",
    "CYAN": "\033[36m",
}

_LEVEL_EMOJI = {
    "DEBUG": "🔍",
    "INFO": "ℹ️",
    "WARNING": "⚠️",
    "ERROR": "❌",
    "CRITICAL": "🛑",
}

_LEVEL_COLOR = {
    "DEBUG": _COLORS["CYAN"],
    "INFO": _COLORS["GREEN"],
    "WARNING": _COLORS["YELLOW"],
    "ERROR": _COLORS["RED"],
    "CRITICAL": _COLORS["MAGENTA"],
}

APP_NAMESPACE = "warden"


def _level_from_str(value: str) -> int:
    level = logging.getLevelName((value or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _canonical_name(name: str) -> str:
    """Map module logger names to the canonical 'warden.*' namespace."""
    if name == APP_NAMESPACE or name.startswith(APP_NAMESPACE + "."):
        return name
    return f"{APP_NAMESPACE}.{name}"


class ColorFormatter(logging.Formatter):
    """
    Readable, colored formatter with emoji per level.
    Example:
      2026-10-02 01:36:22.123+0000 ℹ️ INFO     warden.core.integrity.resolver - [INTEGRITY][LOOKUP] solana:BONK resolved
    """

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color
        self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        ct = self.converter(record.created)
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", ct) + f".{int(record.msecs):03d}+0000"

        level_name = record.levelname.upper()
        emoji = _LEVEL_EMOJI.get(level_name, "")
        message = record.getMessage()
        name = record.name or ""

        if self.use_color:
            color = _LEVEL_COLOR.get(level_name, "")
            reset = _COLORS["RESET"]
            dim = _COLORS["DIM"]
            line = f"{dim}{timestamp}{reset} {color}{emoji} {level_name:<8}{reset} {name} {dim}- {message}{reset}"
        else:
            line = f"{timestamp} {emoji} {level_name:<8} {name} - {message}"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _install_console_handler(root: logging.Logger) -> None:
    """Install a single console handler that does not filter by level (NOTSET)."""
    for h in root.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "_warden_handler", False):
            h.setLevel(logging.NOTSET)
            return

    use_color = sys.stderr.isatty() and not settings.NO_COLOR
    handler = logging.StreamHandler(stream=sys.stderr)
    handler._warden_handler = True
    handler.setLevel(logging.NOTSET)
    handler.setFormatter(ColorFormatter(use_color=use_color))
    root.addHandler(handler)


def init_logging() -> None:
    """
    Initialize logging with:
    - UTC timestamps
    - Emoji per level
    - Unified format for uvicorn/access/error
    """
    root = logging.getLogger()
    root.setLevel(_level_from_str(settings.LOG_LEVEL))
    _install_console_handler(root)

    # All application loggers under 'warden' use LOG_LEVEL_WARDEN
    logging.getLogger(APP_NAMESPACE).setLevel(_level_from_str(settings.LOG_LEVEL_WARDEN))

    # Tame noisy libs (configurable)
    logging.getLogger("httpx").setLevel(_level_from_str(settings.LOG_LEVEL_LIB_HTTPX))
    logging.getLogger("httpcore").setLevel(_level_from_str(settings.LOG_LEVEL_LIB_HTTPCORE))
    logging.getLogger("asyncio").setLevel(_level_from_str(settings.LOG_LEVEL_LIB_ASYNCIO))
    logging.getLogger("sqlalchemy.engine").setLevel(_level_from_str(settings.LOG_LEVEL_LIB_SQLALCHEMY))

    # Force uvicorn family to propagate to our root handler (same formatting)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.setLevel(_level_from_str(settings.LOG_LEVEL))
        lg.propagate = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger in the canonical 'warden.*' namespace."""
    base = name or __name__
    full = _canonical_name(base)
    logger = logging.getLogger(full)
    logger.propagate = True
    return logger
