import pytest
from pydantic import ValidationError

from fxportal.core.config import Settings


def test_defaults(monkeypatch):
    for name in ("RETRY_COUNT", "RETRY_DELAY_MS", "AUTO_DISMISS_MS", "PAGE_SIZE", "API_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.retry_count == 2
    assert s.retry_delay_ms == 1000
    assert s.auto_dismiss_ms == 5000
    assert s.page_size == 20
    assert s.api_base == "http://localhost:8080"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RETRY_DELAY_MS", "250")
    monkeypatch.setenv("api_base_url", "https://payments.example.com/")
    s = Settings(_env_file=None)
    assert s.retry_delay_ms == 250
    assert s.api_base == "https://payments.example.com"


@pytest.mark.parametrize(
    "field,value",
    [
        ("retry_delay_ms", 0),
        ("auto_dismiss_ms", -1),
        ("retry_count", -1),
        ("page_size", 0),
        ("api_base_url", "ftp://example.com"),
    ],
)
def test_rejects_invalid_values(field, value):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})
