"""Convert raw form text into typed values, collecting field errors."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime

from .isbn import clean_isbn, is_valid_isbn
from .models import BookFilter, BookRecord, FieldError

DEFAULT_DATE_FORMAT = "%d/%m/%Y"

# Identifiers are 64-bit on the server side.
MIN_ID = -(2**63)
MAX_ID = 2**63 - 1

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DEFAULT_DATE_SHAPE = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}")
_SEPARATORS_ONLY = re.compile(r"[\s/.\-]*")
_NAME_SEPARATORS = re.compile(r"[,;]")


class FieldValidator:
    """Converts one form submission field by field.

    Each ``to_*`` method returns either a value or ``None``; when the text
    is present but unusable, exactly one ``FieldError`` is appended and
    ``None`` is returned. Conversions never raise, so every field of a form
    is checked before the caller decides what to do.
    """

    def __init__(self) -> None:
        self._errors: list[FieldError] = []

    @property
    def errors(self) -> tuple[FieldError, ...]:
        return tuple(self._errors)

    def has_errors(self) -> bool:
        return bool(self._errors)

    def _reject(self, field_id: str, message: str) -> None:
        self._errors.append(FieldError(field_id, message))

    def to_integer(self, field_id: str, text: str | None) -> int | None:
        value = (text or "").strip()
        if not value:
            return None
        number = None
        if _INTEGER.fullmatch(value):
            try:
                number = int(value)
            except ValueError:
                number = None
        if number is None or not MIN_ID <= number <= MAX_ID:
            self._reject(field_id, f"Invalid value [{value}] for field [{field_id}].")
            return None
        return number

    def to_text(self, field_id: str, text: str | None) -> str | None:
        value = (text or "").strip()
        return value or None

    def to_date(
        self, field_id: str, text: str | None, date_format: str = DEFAULT_DATE_FORMAT
    ) -> date | None:
        """Parse a date with a strptime pattern.

        With the default pattern day and month must have two digits and the
        year four, as on a masked dd/mm/yyyy input; strptime alone would also
        take "1/2/2024".
        """
        value = (text or "").strip()
        # An untouched masked input such as "  /  /    " counts as empty.
        if _SEPARATORS_ONLY.fullmatch(value):
            return None
        try:
            if date_format == DEFAULT_DATE_FORMAT and not _DEFAULT_DATE_SHAPE.fullmatch(value):
                raise ValueError(f"{value!r} does not match dd/mm/yyyy")
            return datetime.strptime(value, date_format).date()
        except ValueError:
            self._reject(field_id, f'Invalid date in field "{field_id}": {value}')
            return None

    def to_isbn(self, field_id: str, text: str | None) -> str | None:
        value = (text or "").strip()
        if not value:
            return None
        isbn = clean_isbn(value)
        if not is_valid_isbn(isbn):
            self._reject(field_id, f"Value [{value}] is not a valid ISBN for field [{field_id}].")
            return None
        return isbn

    def to_names(self, field_id: str, text: str | None) -> tuple[str, ...]:
        """Split a comma or semicolon separated list of names."""
        parts = _NAME_SEPARATORS.split(text or "")
        return tuple(part.strip() for part in parts if part.strip())

    def summary(self) -> str:
        return format_field_errors(self._errors)


def format_field_errors(errors: Iterable[FieldError]) -> str:
    """Combine field errors into the single message shown after a form scan."""
    lines = ["The following errors were found:", ""]
    lines.extend(f"• {error.message}" for error in errors)
    return "\n".join(lines)


def parse_book_filter(
    fields: Mapping[str, str | None], date_format: str = DEFAULT_DATE_FORMAT
) -> tuple[BookFilter | None, tuple[FieldError, ...]]:
    """Build a search filter from raw form text keyed by field id."""
    validator = FieldValidator()
    book_id = validator.to_integer("id", fields.get("id"))
    isbn = validator.to_isbn("isbn", fields.get("isbn"))
    title = validator.to_text("title", fields.get("title"))
    author = validator.to_text("author", fields.get("author"))
    publisher = validator.to_text("publisher", fields.get("publisher"))
    publication_date = validator.to_date(
        "publicationDate", fields.get("publicationDate"), date_format
    )
    if validator.has_errors():
        return None, validator.errors
    return (
        BookFilter(
            id=book_id,
            isbn=isbn,
            title=title,
            author=author,
            publisher=publisher,
            publication_date=publication_date,
        ),
        (),
    )


def parse_book_record(
    fields: Mapping[str, str | None], date_format: str = DEFAULT_DATE_FORMAT
) -> tuple[BookRecord | None, tuple[FieldError, ...]]:
    """Build a book record from raw form text keyed by field id."""
    validator = FieldValidator()
    book_id = validator.to_integer("id", fields.get("id"))
    isbn = validator.to_isbn("isbn", fields.get("isbn"))
    title = validator.to_text("title", fields.get("title"))
    authors = validator.to_names("authors", fields.get("authors"))
    publishers = validator.to_names("publishers", fields.get("publishers"))
    publication_date = validator.to_date(
        "publicationDate", fields.get("publicationDate"), date_format
    )
    if validator.has_errors():
        return None, validator.errors
    return (
        BookRecord(
            id=book_id,
            isbn=isbn,
            title=title,
            authors=authors,
            publishers=publishers,
            publication_date=publication_date,
        ),
        (),
    )
