"""Book operations against the remote book API."""

from __future__ import annotations

from pathlib import Path

import httpx
import structlog

from ..config import Settings
from .errors import BookApiError, ServerRejection
from .models import BookFilter, BookRecord, ImportOutcome, book_list
from .reporting import LogReporter, MessageSink, Severity, show_warning
from .transport import Transport, encode_multipart

log = structlog.get_logger()

CSV_CONTENT_TYPE = "text/csv"


class BookApiClient:
    """Issues book requests and reports failures instead of raising them.

    Every operation opens one connection, validates the status, decodes the
    response and always disconnects. A ``ServerRejection`` is reported with
    the server's message, status and path; transport and decode failures
    get a generic message. Callers get ``None`` (``False`` for ``delete``)
    after a failure has been reported and never see an exception.
    """

    def __init__(
        self,
        base_url: str,
        transport: Transport | None = None,
        reporter: MessageSink | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport or Transport()
        self.reporter = reporter or LogReporter()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        reporter: MessageSink | None = None,
        client: httpx.Client | None = None,
    ) -> BookApiClient:
        return cls(
            settings.base_url,
            transport=Transport(timeout=settings.timeout, client=client),
            reporter=reporter,
        )

    # -- failure reporting --------------------------------------------------

    def _report_rejection(self, rejection: ServerRejection, title: str) -> None:
        error = rejection.server_error
        self.reporter.show_message(
            f"Error: {error.message}\nStatus: {error.status}\nPath: {error.path}",
            title,
            Severity.ERROR,
        )

    def _report_unexpected(self, exc: BookApiError, title: str) -> None:
        self.reporter.show_message(
            f"An unexpected error occurred: {exc}", title, Severity.ERROR
        )

    # -- operations ---------------------------------------------------------

    def save(self, record: BookRecord) -> BookRecord | None:
        """Create or update a book; returns the record as stored by the server."""
        title = "Error saving book"
        connection = None
        try:
            connection = self.transport.open_with_body(f"{self.base_url}/book", "POST")
            connection.write_json(record.to_dict())
            self.transport.validate_status(connection, httpx.codes.OK, httpx.codes.CREATED)
            saved = self.transport.read_json(connection, BookRecord.from_dict)
            log.info("book_saved", id=saved.id, isbn=saved.isbn)
            return saved
        except ServerRejection as se:
            self._report_rejection(se, title)
        except BookApiError as e:
            self._report_unexpected(e, title)
        finally:
            self.transport.disconnect(connection)
        return None

    def delete(self, book_id: int) -> bool:
        title = "Error deleting book"
        connection = None
        try:
            connection = self.transport.open(f"{self.base_url}/book/{book_id}", "DELETE")
            self.transport.validate_status(connection, httpx.codes.OK, httpx.codes.NO_CONTENT)
            log.info("book_deleted", id=book_id)
            return True
        except ServerRejection as se:
            self._report_rejection(se, title)
        except BookApiError as e:
            self._report_unexpected(e, title)
        finally:
            self.transport.disconnect(connection)
        return False

    def build_search_url(self, book_filter: BookFilter) -> str:
        """Query URL with only the constrained filter fields, in a fixed order."""
        encode = self.transport.encode
        params: list[str] = []
        if book_filter.id is not None:
            params.append(f"id={book_filter.id}")
        if book_filter.isbn:
            params.append(f"isbn={encode(book_filter.isbn)}")
        for name in ("title", "author", "publisher"):
            value = getattr(book_filter, name)
            if value is not None and value.strip():
                params.append(f"{name}={encode(value)}")
        if book_filter.publication_date is not None:
            params.append(f"publicationDate={book_filter.publication_date.isoformat()}")

        url = f"{self.base_url}/book"
        if params:
            url += "?" + "&".join(params)
        return url

    def search(self, book_filter: BookFilter) -> list[BookRecord] | None:
        title = "Error searching books"
        connection = None
        try:
            connection = self.transport.open(self.build_search_url(book_filter), "GET")
            self.transport.validate_status(connection, httpx.codes.OK)
            books = self.transport.read_json(connection, book_list)
            log.debug("search_results", count=len(books))
            return books
        except ServerRejection as se:
            self._report_rejection(se, title)
        except BookApiError as e:
            self._report_unexpected(e, title)
        finally:
            self.transport.disconnect(connection)
        return None

    def lookup_by_isbn(self, isbn: str) -> BookRecord | None:
        """Ask the server to look a book up on Open Library.

        An empty or ``null`` body means the server found nothing; that is
        reported as a warning, separately from communication failures.
        """
        title = "Error querying Open Library"
        connection = None
        try:
            url = f"{self.base_url}/open-library?isbn={self.transport.encode(isbn)}"
            connection = self.transport.open(url, "GET")
            self.transport.validate_status(connection, httpx.codes.OK)
            book = self.transport.read_json(connection, BookRecord.from_dict, allow_empty=True)
            if book is None:
                log.info("isbn_not_found", isbn=isbn)
                show_warning(self.reporter, "No book found for the given ISBN")
            return book
        except ServerRejection as se:
            self._report_rejection(se, title)
        except BookApiError as e:
            self._report_unexpected(e, title)
        finally:
            self.transport.disconnect(connection)
        return None

    def import_csv(self, path: Path | str) -> ImportOutcome | None:
        """Upload a CSV file for bulk import as multipart/form-data."""
        title = "Error importing CSV"
        path = Path(path)
        connection = None
        try:
            try:
                content = path.read_bytes()
            except OSError as e:
                self.reporter.show_message(
                    f"Could not read file {path}: {e.strerror or e}", title, Severity.ERROR
                )
                return None
            body, content_type = encode_multipart("file", path.name, content, CSV_CONTENT_TYPE)
            connection = self.transport.open_with_body(f"{self.base_url}/book/import", "POST")
            connection.write(body, content_type)
            self.transport.validate_status(connection, httpx.codes.OK)
            outcome = self.transport.read_json(connection, ImportOutcome.from_dict)
            log.info(
                "csv_imported",
                file=path.name,
                imported=len(outcome.imported_records),
                errors=len(outcome.row_errors),
            )
            return outcome
        except ServerRejection as se:
            self._report_rejection(se, title)
        except BookApiError as e:
            self._report_unexpected(e, title)
        finally:
            self.transport.disconnect(connection)
        return None
