"""Where failures and import reports go to reach a human."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol

import structlog

log = structlog.get_logger()


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class MessageSink(Protocol):
    def show_message(self, message: str, title: str, severity: Severity) -> None: ...


class TableSink(Protocol):
    def show_table(
        self, message: str, columns: Sequence[str], rows: Sequence[Sequence[object]]
    ) -> None: ...


class LogReporter:
    """Reports everything as structured log events.

    Used when no interactive front-end is attached.
    """

    def show_message(self, message: str, title: str, severity: Severity) -> None:
        if severity is Severity.ERROR:
            log.error("user_message", title=title, message=message)
        elif severity is Severity.WARNING:
            log.warning("user_message", title=title, message=message)
        else:
            log.info("user_message", title=title, message=message)

    def show_table(
        self, message: str, columns: Sequence[str], rows: Sequence[Sequence[object]]
    ) -> None:
        log.info(
            "user_table",
            message=message,
            rows=[dict(zip(columns, row)) for row in rows],
        )


def show_info(sink: MessageSink, message: str) -> None:
    sink.show_message(message, "Information", Severity.INFO)


def show_warning(sink: MessageSink, message: str) -> None:
    sink.show_message(message, "Attention", Severity.WARNING)
