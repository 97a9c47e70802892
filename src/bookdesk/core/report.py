"""Turn a CSV import outcome into a summary and an error table."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from .models import BookRecord, ImportOutcome
from .reporting import TableSink

log = structlog.get_logger()

ERROR_COLUMNS = ("Line", "Content", "Error")

_ALL_PROCESSED = "Import finished successfully, all items were created or updated."
_SOME_SKIPPED = "Import finished, some items were not created or updated."


@dataclass(frozen=True)
class ImportReport:
    records: tuple[BookRecord, ...]
    columns: tuple[str, ...]
    rows: tuple[tuple[int, str, str], ...]
    summary: str


class ImportReportBuilder:
    """Builds the display artifacts for one import call. No side effects."""

    def build(self, outcome: ImportOutcome) -> ImportReport:
        rows = tuple(
            (error.line_number, error.line_content, error.message)
            for error in outcome.row_errors
        )
        return ImportReport(
            records=tuple(outcome.imported_records),
            columns=ERROR_COLUMNS,
            rows=rows,
            summary=self.summary(outcome),
        )

    @staticmethod
    def summary(outcome: ImportOutcome) -> str:
        header = _SOME_SKIPPED if outcome.row_errors else _ALL_PROCESSED
        return "\n".join(
            [
                header,
                "",
                "Summary:",
                f"• Imported: {len(outcome.imported_records)}",
                f"• Errors: {len(outcome.row_errors)}",
            ]
        )


def present(report: ImportReport, sink: TableSink) -> None:
    """Hand an import report to a table sink."""
    log.info("import_report", imported=len(report.records), errors=len(report.rows))
    sink.show_table(report.summary, report.columns, report.rows)
