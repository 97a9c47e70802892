"""In-memory FastAPI stand-in for the book API, used by the tests."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response


def error_body(status: int, error: str, message: str, path: str) -> dict:
    return {
        "status": status,
        "error": error,
        "message": message,
        "path": path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@dataclass
class BookStore:
    books: dict[int, dict] = field(default_factory=dict)
    next_id: int = 1
    uploads: list[dict] = field(default_factory=list)
    open_library: dict[str, dict] = field(default_factory=dict)

    def save(self, book: dict) -> tuple[dict, bool]:
        book_id = book.get("id")
        created = book_id is None or book_id not in self.books
        if book_id is None:
            book_id = self.next_id
            self.next_id += 1
        stored = {**book, "id": book_id}
        self.books[book_id] = stored
        return stored, created


def create_app(store: BookStore | None = None) -> FastAPI:
    store = store or BookStore()
    app = FastAPI(title="Fake book API")
    app.state.store = store

    @app.get("/book")
    async def search(
        id: int | None = None,
        isbn: str | None = None,
        title: str | None = None,
        author: str | None = None,
        publisher: str | None = None,
        publicationDate: str | None = None,
    ):
        results = []
        for book in store.books.values():
            if id is not None and book["id"] != id:
                continue
            if isbn and book.get("isbn") != isbn:
                continue
            if title and title.lower() not in (book.get("title") or "").lower():
                continue
            names = [a["name"].lower() for a in book.get("authors") or []]
            if author and not any(author.lower() in n for n in names):
                continue
            names = [p["name"].lower() for p in book.get("publishers") or []]
            if publisher and not any(publisher.lower() in n for n in names):
                continue
            if publicationDate and book.get("publicationDate") != publicationDate:
                continue
            results.append(book)
        return results

    @app.post("/book")
    async def save(request: Request):
        book = await request.json()
        if not book.get("title"):
            return JSONResponse(
                error_body(400, "Bad Request", "Title is required", "/book"), status_code=400
            )
        stored, created = store.save(book)
        return JSONResponse(stored, status_code=201 if created else 200)

    @app.delete("/book/{book_id}")
    async def delete(book_id: int):
        if store.books.pop(book_id, None) is None:
            return JSONResponse(
                error_body(404, "Not Found", f"Book {book_id} not found", f"/book/{book_id}"),
                status_code=404,
            )
        return Response(status_code=204)

    @app.get("/open-library")
    async def open_library(isbn: str):
        book = store.open_library.get(isbn)
        if book is None:
            return Response(status_code=200)
        return book

    @app.post("/book/import")
    async def import_books(request: Request):
        body = await request.body()
        store.uploads.append(
            {"content_type": request.headers.get("content-type", ""), "body": body}
        )
        # Pull the CSV payload out of the single multipart part.
        _, _, rest = body.partition(b"\r\n\r\n")
        payload = rest.rsplit(b"\r\n--", 1)[0].decode("utf-8")
        books, errors = [], []
        for line_number, row in enumerate(csv.reader(io.StringIO(payload)), start=1):
            if len(row) < 2 or not row[0].strip():
                errors.append(
                    {
                        "lineNumber": line_number,
                        "lineContent": ",".join(row),
                        "message": "missing isbn",
                    }
                )
                continue
            stored, _ = store.save({"isbn": row[0].strip(), "title": row[1].strip()})
            books.append(stored)
        return {"books": books, "errors": errors}

    return app
