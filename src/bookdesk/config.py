"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

import structlog

from .core.transport import DEFAULT_TIMEOUT
from .core.validation import DEFAULT_DATE_FORMAT

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_LOG_LEVEL = "WARNING"

log = structlog.get_logger()


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    date_format: str = DEFAULT_DATE_FORMAT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            base_url=os.environ.get("BOOKDESK_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            timeout=_timeout_from_env(),
            date_format=os.environ.get("BOOKDESK_DATE_FORMAT", DEFAULT_DATE_FORMAT),
            log_level=os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )


def _timeout_from_env() -> float:
    raw = os.environ.get("BOOKDESK_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        timeout = None
    if timeout is None or not 0 < timeout < float("inf"):
        log.warning("invalid_timeout", value=raw, default=DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    return timeout


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Route structlog output through a level filter."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
