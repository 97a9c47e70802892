"""HTTP transport: open a connection, validate the status, decode JSON."""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote_plus

import httpx
import structlog

from .errors import DecodeFailure, ServerRejection, TransportFailure
from .models import ServerError

log = structlog.get_logger()

T = TypeVar("T")

DEFAULT_TIMEOUT = 10.0  # seconds, applied to both connect and read

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


class Connection:
    """One HTTP exchange.

    The request is sent lazily, the first time the status or body is
    needed, so a body can be written after the connection is opened.
    """

    def __init__(
        self,
        client: httpx.Client,
        url: str,
        method: str,
        timeout: httpx.Timeout,
        owns_client: bool,
        writable: bool = False,
    ) -> None:
        self.url = url
        self.method = method
        self.headers: dict[str, str] = {"Accept": "application/json"}
        self._client = client
        self._timeout = timeout
        self._owns_client = owns_client
        self._writable = writable
        self._content: bytes | None = None
        self._response: httpx.Response | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, content: bytes, content_type: str | None = None) -> None:
        if not self._writable:
            raise RuntimeError("connection was not opened for writing")
        if self._response is not None:
            raise RuntimeError("request already sent")
        if content_type:
            self.headers["Content-Type"] = content_type
        self._content = content

    def write_json(self, value: Any) -> None:
        self.write(json.dumps(value).encode("utf-8"))

    def _send(self) -> httpx.Response:
        if self._closed:
            raise TransportFailure("connection already closed")
        if self._response is None:
            log.debug("http_request", method=self.method, url=self.url)
            try:
                request = self._client.build_request(
                    self.method,
                    self.url,
                    headers=self.headers,
                    content=self._content,
                    timeout=self._timeout,
                )
                self._response = self._client.send(request)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                log.warning("http_transport_error", method=self.method, url=self.url, error=str(e))
                raise TransportFailure(str(e) or type(e).__name__) from e
            log.debug("http_response", url=self.url, status=self._response.status_code)
        return self._response

    @property
    def status(self) -> int:
        return self._send().status_code

    def read(self) -> bytes:
        response = self._send()
        try:
            return response.read()
        except httpx.HTTPError as e:
            raise TransportFailure(str(e) or type(e).__name__, response.status_code) from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            self._response.close()
        if self._owns_client:
            self._client.close()


class Transport:
    """Opens connections with a fixed timeout and classifies responses.

    Without an injected client, every connection gets its own
    ``httpx.Client`` and closes it on disconnect. An injected client is
    shared and left open.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, client: httpx.Client | None = None) -> None:
        self.timeout = httpx.Timeout(timeout)
        self._client = client

    def _connect(self, url: str, method: str, writable: bool) -> Connection:
        if self._client is not None:
            return Connection(
                self._client, url, method, self.timeout, owns_client=False, writable=writable
            )
        client = httpx.Client(timeout=self.timeout)
        return Connection(client, url, method, self.timeout, owns_client=True, writable=writable)

    def open(self, url: str, method: str) -> Connection:
        return self._connect(url, method, writable=False)

    def open_with_body(self, url: str, method: str) -> Connection:
        connection = self._connect(url, method, writable=True)
        connection.headers["Content-Type"] = JSON_CONTENT_TYPE
        return connection

    def validate_status(self, connection: Connection, *acceptable: int) -> None:
        """Return if the status is acceptable, otherwise raise.

        A JSON object in the error body becomes a ``ServerRejection``;
        anything else (no body, malformed JSON) a ``TransportFailure``.
        """
        status = connection.status
        if status in acceptable:
            return

        server_error = None
        try:
            body = connection.read()
            if body.strip():
                server_error = ServerError.from_dict(json.loads(body), status)
        except (ValueError, TypeError, RecursionError) as e:
            log.debug("error_body_unreadable", url=connection.url, status=status, error=str(e))
        except TransportFailure as e:
            log.debug("error_body_unreadable", url=connection.url, status=status, error=e.reason)

        if server_error is not None:
            log.warning(
                "server_rejection",
                url=connection.url,
                status=server_error.status,
                message=server_error.message,
            )
            raise ServerRejection(server_error)
        log.warning("unexpected_status", url=connection.url, status=status)
        raise TransportFailure(f"HTTP error {status}", status)

    def read_json(
        self,
        connection: Connection,
        shape: Callable[[Any], T],
        allow_empty: bool = False,
    ) -> T | None:
        """Decode the response body and convert it with ``shape``.

        The body is read regardless of status, so error payloads decode the
        same way as success payloads.
        """
        body = connection.read()
        if allow_empty and not body.strip():
            return None
        try:
            data = json.loads(body)
        except (ValueError, RecursionError) as e:
            raise DecodeFailure(f"malformed JSON from {connection.url}: {e}") from e
        if allow_empty and data is None:
            return None
        try:
            return shape(data)
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeFailure(f"unexpected response shape from {connection.url}: {e}") from e

    def disconnect(self, connection: Connection | None) -> None:
        if connection is not None:
            connection.close()

    @staticmethod
    def encode(value: str) -> str:
        return quote_plus(value, encoding="utf-8")


def encode_multipart(
    field_name: str, filename: str, content: bytes, content_type: str
) -> tuple[bytes, str]:
    """Build a single-part multipart/form-data body.

    Returns ``(body, content_type_header)``.
    """
    boundary = f"----BookdeskBoundary{uuid.uuid4().hex}"
    safe_name = filename.replace('"', "%22").replace("\r", "").replace("\n", "")
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{safe_name}"\r\n'
        f"Content-Type: {content_type}\r\n"
        "\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + content + tail, f"multipart/form-data; boundary={boundary}"
