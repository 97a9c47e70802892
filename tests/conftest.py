import pytest
from fastapi.testclient import TestClient

from bookdesk.core.client import BookApiClient
from bookdesk.core.transport import Transport
from fake_server import BookStore, create_app

BASE_URL = "http://testserver"


class RecordingReporter:
    """Collects everything the client would have shown to a user."""

    def __init__(self):
        self.messages = []
        self.tables = []

    def show_message(self, message, title, severity):
        self.messages.append((message, title, severity))

    def show_table(self, message, columns, rows):
        self.tables.append((message, list(columns), [tuple(r) for r in rows]))


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def store():
    return BookStore()


@pytest.fixture
def server(store):
    with TestClient(create_app(store), base_url=BASE_URL) as test_client:
        yield test_client


@pytest.fixture
def api(server, reporter):
    return BookApiClient(BASE_URL, transport=Transport(client=server), reporter=reporter)
