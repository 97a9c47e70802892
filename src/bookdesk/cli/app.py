"""Command-line front-end for bookdesk."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import Settings, configure_logging
from ..core.client import BookApiClient
from ..core.models import BookRecord, FieldError
from ..core.report import ImportReportBuilder, present
from ..core.reporting import Severity, show_info
from ..core.validation import format_field_errors, parse_book_filter, parse_book_record

log = structlog.get_logger()

app = typer.Typer(help="Manage book records through the book API.", no_args_is_help=True)
console = Console()

_SEVERITY_STYLE = {
    Severity.INFO: "cyan",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}

BOOK_COLUMNS = ("ID", "ISBN", "Title", "Authors", "Publishers", "Publication date")


class ConsoleReporter:
    """Message and table sink backed by a rich console."""

    def __init__(self, out: Console | None = None) -> None:
        self.console = out or console

    def show_message(self, message: str, title: str, severity: Severity) -> None:
        style = _SEVERITY_STYLE.get(severity, "white")
        # Server messages may contain brackets; keep them out of rich markup.
        self.console.print(Panel(Text(message), title=Text(title), border_style=style))

    def show_table(
        self, message: str, columns: Sequence[str], rows: Sequence[Sequence[object]]
    ) -> None:
        self.console.print(Text(message))
        if not rows:
            return
        table = Table()
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(Text("" if cell is None else str(cell)) for cell in row))
        self.console.print(table)


def build_client(settings: Settings, reporter: ConsoleReporter) -> BookApiClient:
    return BookApiClient.from_settings(settings, reporter=reporter)


def _book_row(book: BookRecord, date_format: str) -> tuple[object, ...]:
    published = book.publication_date.strftime(date_format) if book.publication_date else ""
    return (
        book.id,
        book.isbn,
        book.title,
        ", ".join(book.authors),
        ", ".join(book.publishers),
        published,
    )


def _fail_validation(reporter: ConsoleReporter, errors: Sequence[FieldError]) -> None:
    log.debug("form_rejected", fields=[e.field_id for e in errors])
    reporter.show_message(format_field_errors(errors), "Validation error", Severity.ERROR)
    raise typer.Exit(code=1)


@app.command()
def search(
    book_id: Optional[str] = typer.Option(None, "--id", help="Book identifier"),
    isbn: Optional[str] = typer.Option(None, help="ISBN-10 or ISBN-13"),
    title: Optional[str] = typer.Option(None, help="Title contains"),
    author: Optional[str] = typer.Option(None, help="Author name contains"),
    publisher: Optional[str] = typer.Option(None, help="Publisher name contains"),
    published: Optional[str] = typer.Option(None, "--date", help="Publication date"),
) -> None:
    """Search books; every option is an optional constraint."""
    settings = Settings.from_env()
    reporter = ConsoleReporter()
    book_filter, errors = parse_book_filter(
        {
            "id": book_id,
            "isbn": isbn,
            "title": title,
            "author": author,
            "publisher": publisher,
            "publicationDate": published,
        },
        settings.date_format,
    )
    if book_filter is None:
        _fail_validation(reporter, errors)

    books = build_client(settings, reporter).search(book_filter)
    if books is None:
        raise typer.Exit(code=1)
    reporter.show_table(
        f"{len(books)} book(s) found",
        BOOK_COLUMNS,
        [_book_row(book, settings.date_format) for book in books],
    )


@app.command()
def save(
    title: Optional[str] = typer.Option(None, help="Book title"),
    isbn: Optional[str] = typer.Option(None, help="ISBN-10 or ISBN-13"),
    authors: Optional[str] = typer.Option(None, help="Comma separated author names"),
    publishers: Optional[str] = typer.Option(None, help="Comma separated publisher names"),
    published: Optional[str] = typer.Option(None, "--date", help="Publication date"),
    book_id: Optional[str] = typer.Option(None, "--id", help="Identifier of a book to update"),
) -> None:
    """Create a book, or update it when --id is given."""
    settings = Settings.from_env()
    reporter = ConsoleReporter()
    record, errors = parse_book_record(
        {
            "id": book_id,
            "isbn": isbn,
            "title": title,
            "authors": authors,
            "publishers": publishers,
            "publicationDate": published,
        },
        settings.date_format,
    )
    if record is None:
        _fail_validation(reporter, errors)

    saved = build_client(settings, reporter).save(record)
    if saved is None:
        raise typer.Exit(code=1)
    show_info(reporter, f"Saved book {saved.id}: {saved.title}")


@app.command()
def delete(book_id: int = typer.Argument(..., help="Identifier of the book")) -> None:
    """Delete a book by identifier."""
    settings = Settings.from_env()
    reporter = ConsoleReporter()
    if not build_client(settings, reporter).delete(book_id):
        raise typer.Exit(code=1)
    show_info(reporter, f"Book {book_id} deleted.")


@app.command()
def lookup(isbn: str = typer.Argument(..., help="ISBN to look up on Open Library")) -> None:
    """Fetch book data for an ISBN through the server's Open Library lookup."""
    settings = Settings.from_env()
    reporter = ConsoleReporter()
    book_filter, errors = parse_book_filter({"isbn": isbn}, settings.date_format)
    if book_filter is None:
        _fail_validation(reporter, errors)

    book = build_client(settings, reporter).lookup_by_isbn(book_filter.isbn)
    if book is None:
        raise typer.Exit(code=1)
    reporter.show_table("Book found", BOOK_COLUMNS, [_book_row(book, settings.date_format)])


@app.command("import")
def import_csv(
    csv_file: Path = typer.Argument(..., help="CSV file with one book per line"),
) -> None:
    """Bulk import books from a CSV file."""
    settings = Settings.from_env()
    reporter = ConsoleReporter()
    outcome = build_client(settings, reporter).import_csv(csv_file)
    if outcome is None:
        raise typer.Exit(code=1)
    report = ImportReportBuilder().build(outcome)
    present(report, reporter)
    if report.records:
        reporter.show_table(
            "Imported or updated books",
            BOOK_COLUMNS,
            [_book_row(book, settings.date_format) for book in report.records],
        )


def main() -> None:
    load_dotenv()
    configure_logging(Settings.from_env().log_level)
    app()
