"""Data models for book records, search filters and server responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class FieldError:
    field_id: str
    message: str


@dataclass(frozen=True)
class BookFilter:
    id: int | None = None
    isbn: str | None = None
    title: str | None = None
    author: str | None = None
    publisher: str | None = None
    publication_date: date | None = None


def _names(entries: object) -> tuple[str, ...]:
    """Decode author/publisher entries given as objects or bare strings."""
    if entries is None:
        return ()
    if not isinstance(entries, list):
        raise TypeError(f"expected a list of names, got {type(entries).__name__}")
    names = []
    for entry in entries:
        if isinstance(entry, dict):
            name = entry.get("name")
        else:
            name = entry
        if name:
            names.append(str(name))
    return tuple(names)


def _parse_date(value: object) -> date | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO date string, got {type(value).__name__}")
    return date.fromisoformat(value)


@dataclass(frozen=True)
class BookRecord:
    id: int | None = None
    isbn: str | None = None
    title: str | None = None
    authors: tuple[str, ...] = ()
    publishers: tuple[str, ...] = ()
    publication_date: date | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "isbn": self.isbn,
            "title": self.title,
            "authors": [{"name": name} for name in self.authors],
            "publishers": [{"name": name} for name in self.publishers],
            "publicationDate": (
                self.publication_date.isoformat() if self.publication_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data: object) -> BookRecord:
        if not isinstance(data, dict):
            raise TypeError(f"expected a book object, got {type(data).__name__}")
        book_id = data.get("id")
        return cls(
            id=int(book_id) if book_id is not None else None,
            isbn=data.get("isbn"),
            title=data.get("title"),
            authors=_names(data.get("authors")),
            publishers=_names(data.get("publishers")),
            publication_date=_parse_date(data.get("publicationDate")),
        )


def book_list(data: object) -> list[BookRecord]:
    """Decode a JSON array of book objects."""
    if not isinstance(data, list):
        raise TypeError(f"expected a list of books, got {type(data).__name__}")
    return [BookRecord.from_dict(item) for item in data]


@dataclass(frozen=True)
class ServerError:
    status: int
    error: str = ""
    message: str = ""
    path: str = ""
    timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, data: object, http_status: int) -> ServerError:
        if not isinstance(data, dict):
            raise TypeError(f"expected an error object, got {type(data).__name__}")
        timestamp = None
        raw_timestamp = data.get("timestamp")
        if isinstance(raw_timestamp, str):
            try:
                timestamp = datetime.fromisoformat(raw_timestamp.replace("Z", "+00:00"))
            except ValueError:
                timestamp = None
        status = data.get("status")
        return cls(
            status=int(status) if isinstance(status, int) else http_status,
            error=data.get("error") or "",
            message=data.get("message") or "",
            path=data.get("path") or "",
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class ImportRowError:
    line_number: int
    line_content: str
    message: str

    @classmethod
    def from_dict(cls, data: object) -> ImportRowError:
        if not isinstance(data, dict):
            raise TypeError(f"expected an import error object, got {type(data).__name__}")
        return cls(
            line_number=int(data.get("lineNumber") or 0),
            line_content=data.get("lineContent") or "",
            message=data.get("message") or "",
        )


@dataclass(frozen=True)
class ImportOutcome:
    imported_records: tuple[BookRecord, ...] = field(default_factory=tuple)
    row_errors: tuple[ImportRowError, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: object) -> ImportOutcome:
        if not isinstance(data, dict):
            raise TypeError(f"expected an import report object, got {type(data).__name__}")
        books = data.get("books") or []
        errors = data.get("errors") or []
        if not isinstance(errors, list):
            raise TypeError("expected 'errors' to be a list")
        return cls(
            imported_records=tuple(book_list(books)),
            row_errors=tuple(ImportRowError.from_dict(e) for e in errors),
        )
