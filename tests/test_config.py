from __future__ import annotations

import pytest

from pyjagalari._constants import BASE_URL, POLL_INTERVAL_SECONDS
from pyjagalari.config import TrackerConfig
from pyjagalari.exceptions import JagalariConfigError

_ENV_KEYS = (
    "TRACCAR_URL",
    "TRACCAR_EMAIL",
    "TRACCAR_PASSWORD",
    "JAGALARI_STORAGE_PATH",
    "JAGALARI_REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_point_at_demo_server() -> None:
    config = TrackerConfig()

    assert config.base_url == BASE_URL
    assert config.poll_interval == POLL_INTERVAL_SECONDS
    assert config.api_root == BASE_URL + "/api"


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACCAR_URL", "https://fleet.example.com/")
    monkeypatch.setenv("TRACCAR_EMAIL", "ops@example.com")
    monkeypatch.setenv("TRACCAR_PASSWORD", "secret")
    monkeypatch.setenv("JAGALARI_REQUEST_TIMEOUT", "5")

    config = TrackerConfig.from_env()

    assert config.api_root == "https://fleet.example.com/api"
    assert config.email == "ops@example.com"
    assert config.password == "secret"
    assert config.request_timeout == 5.0


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACCAR_EMAIL", "env@example.com")
    monkeypatch.setenv("JAGALARI_REQUEST_TIMEOUT", "5")

    config = TrackerConfig.from_env(email="override@example.com", request_timeout=2.0)

    assert config.email == "override@example.com"
    assert config.request_timeout == 2.0


def test_non_numeric_timeout_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JAGALARI_REQUEST_TIMEOUT", "soon")

    with pytest.raises(JagalariConfigError):
        TrackerConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_url": "ftp://fleet.example.com"},
        {"poll_interval": 0},
        {"request_timeout": -1},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(JagalariConfigError):
        TrackerConfig(**kwargs)  # type: ignore[arg-type]
