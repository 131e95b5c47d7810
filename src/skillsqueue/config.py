"""Service configuration for skillsqueue."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from skillsqueue._constants import (
    DEFAULT_BASE_URL,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_REQUEST_TIMEOUT_S,
)


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class AutoDequeueConfig:
    """Auto-dequeue engine configuration.

    Parameters
    ----------
    base_url : str or None
        VEX Tournament Manager base URL (e.g. ``"http://10.0.0.3"``).
        The skills page is fetched from ``{base_url}/skills``.  When empty
        the engine disables itself at initialization.
    poll_interval_ms : int
        Delay between two skills polls while a team is being served.
    offline_mode : bool
        No tournament manager is reachable.  The engine stays fully inert:
        no monitoring task and no polling.
    request_timeout : float
        Seconds before a skills page request is abandoned.
    """

    base_url: str | None = None
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    offline_mode: bool = False
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_S

    @property
    def poll_interval(self) -> float:
        """Polling interval in seconds."""
        return self.poll_interval_ms / 1000.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "pollIntervalMs": self.poll_interval_ms,
            "offlineMode": self.offline_mode,
        }


@dataclasses.dataclass(frozen=True)
class AppConfig:
    """Top-level server configuration.

    Parameters
    ----------
    host : str
        Interface the HTTP server binds to.
    port : int
        HTTP port.
    data_dir : Path
        Directory holding ``queue_data.json`` and ``queue_settings.json``.
    auto_dequeue : AutoDequeueConfig
        Engine settings.
    """

    host: str = "localhost"
    port: int = 3000
    data_dir: Path = Path("data")
    auto_dequeue: AutoDequeueConfig = dataclasses.field(default_factory=AutoDequeueConfig)

    @classmethod
    def from_env(cls, **overrides: Any) -> AppConfig:
        """Create configuration from environment variables.

        Reads ``VEX_TM_BASE_URL``, ``OFFLINE_MODE``, ``HOST``, ``PORT``,
        ``SKILLSQUEUE_DATA_DIR`` and ``SKILLSQUEUE_POLL_INTERVAL_MS``.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.
            ``auto_dequeue`` may be a dict of :class:`AutoDequeueConfig`
            fields or a ready instance.

        Returns
        -------
        AppConfig
            Populated configuration.
        """
        env = os.environ

        engine_kwargs: dict[str, Any] = {
            "base_url": env.get("VEX_TM_BASE_URL", DEFAULT_BASE_URL),
            "offline_mode": _env_bool(env.get("OFFLINE_MODE"), False),
        }
        interval_env = env.get("SKILLSQUEUE_POLL_INTERVAL_MS")
        if interval_env is not None:
            engine_kwargs["poll_interval_ms"] = int(interval_env)

        engine_overrides = overrides.pop("auto_dequeue", None)
        if isinstance(engine_overrides, dict):
            engine_kwargs.update(engine_overrides)
        elif isinstance(engine_overrides, AutoDequeueConfig):
            engine_kwargs = dataclasses.asdict(engine_overrides)

        config_kwargs: dict[str, Any] = {"auto_dequeue": AutoDequeueConfig(**engine_kwargs)}
        host_env = env.get("HOST")
        if host_env is not None:
            config_kwargs["host"] = host_env
        port_env = env.get("PORT")
        if port_env is not None and "port" not in overrides:
            config_kwargs["port"] = int(port_env)
        data_dir_env = env.get("SKILLSQUEUE_DATA_DIR")
        if data_dir_env is not None:
            config_kwargs["data_dir"] = Path(data_dir_env)

        config_kwargs.update(overrides)
        if not isinstance(config_kwargs.get("data_dir"), Path):
            config_kwargs["data_dir"] = Path(config_kwargs["data_dir"])

        return cls(**config_kwargs)
