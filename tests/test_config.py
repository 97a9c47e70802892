import pytest
from structlog.testing import capture_logs

from bookdesk.config import DEFAULT_BASE_URL, Settings
from bookdesk.core.transport import DEFAULT_TIMEOUT


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BOOKDESK_BASE_URL", "BOOKDESK_TIMEOUT", "BOOKDESK_DATE_FORMAT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.timeout == DEFAULT_TIMEOUT
    assert settings.date_format == "%d/%m/%Y"
    assert settings.log_level == "WARNING"


def test_values_from_env(monkeypatch):
    monkeypatch.setenv("BOOKDESK_BASE_URL", "http://books.test/api/")
    monkeypatch.setenv("BOOKDESK_TIMEOUT", " 2.5 ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.base_url == "http://books.test/api"
    assert settings.timeout == 2.5
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["abc", "10s", "0", "-3", "nan", "inf"])
def test_bad_timeout_falls_back_to_default(monkeypatch, raw):
    monkeypatch.setenv("BOOKDESK_TIMEOUT", raw)
    with capture_logs() as logs:
        settings = Settings.from_env()
    assert settings.timeout == DEFAULT_TIMEOUT
    [event] = [e for e in logs if e["event"] == "invalid_timeout"]
    assert event["log_level"] == "warning"
    assert event["value"] == raw


def test_blank_timeout_is_default_without_warning(monkeypatch):
    monkeypatch.setenv("BOOKDESK_TIMEOUT", "  ")
    with capture_logs() as logs:
        assert Settings.from_env().timeout == DEFAULT_TIMEOUT
    assert logs == []
