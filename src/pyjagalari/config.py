"""Client configuration for pyjagalari."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyjagalari._constants import BASE_URL, POLL_INTERVAL_SECONDS
from pyjagalari.exceptions import JagalariConfigError


def _env_float(value: str | None, name: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise JagalariConfigError(f"{name} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    email : str
        Traccar account email (or login name).
    password : str
        Traccar account password.
    base_url : str
        Traccar server URL. Defaults to the public demo server.
    poll_interval : float
        Seconds between telemetry polls.  Fixed at 30 seconds in
        production; only tests shorten it.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    storage_path : str or None
        JSON file used as durable client storage.  ``None`` keeps
        state in memory only.
    """

    email: str = "admin"
    password: str = "admin"
    base_url: str = BASE_URL
    poll_interval: float = POLL_INTERVAL_SECONDS
    request_timeout: float = 15.0
    storage_path: str | None = None

    def __post_init__(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise JagalariConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if self.poll_interval <= 0:
            raise JagalariConfigError("poll_interval must be positive")
        if self.request_timeout <= 0:
            raise JagalariConfigError("request_timeout must be positive")

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/") + "/api"

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads ``TRACCAR_URL``, ``TRACCAR_EMAIL``, ``TRACCAR_PASSWORD`` and
        the optional ``JAGALARI_*`` variables.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrackerConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "TRACCAR_URL": "base_url",
            "TRACCAR_EMAIL": "email",
            "TRACCAR_PASSWORD": "password",
            "JAGALARI_STORAGE_PATH": "storage_path",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout = _env_float(env.get("JAGALARI_REQUEST_TIMEOUT"), "JAGALARI_REQUEST_TIMEOUT")
        if timeout is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = timeout

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
