from __future__ import annotations

from pathlib import Path

import pytest

from skillsqueue.config import AppConfig, AutoDequeueConfig

_ENV_VARS = (
    "VEX_TM_BASE_URL",
    "OFFLINE_MODE",
    "SKILLSQUEUE_POLL_INTERVAL_MS",
    "HOST",
    "PORT",
    "SKILLSQUEUE_DATA_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = AppConfig.from_env()

    assert config.host == "localhost"
    assert config.port == 3000
    assert config.data_dir == Path("data")
    assert config.auto_dequeue.base_url == "http://10.0.0.3"
    assert config.auto_dequeue.poll_interval_ms == 5000
    assert config.auto_dequeue.offline_mode is False


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VEX_TM_BASE_URL", "http://192.168.1.20")
    monkeypatch.setenv("OFFLINE_MODE", "true")
    monkeypatch.setenv("SKILLSQUEUE_POLL_INTERVAL_MS", "2500")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("SKILLSQUEUE_DATA_DIR", "/var/lib/skillsqueue")

    config = AppConfig.from_env()

    assert config.port == 8080
    assert config.data_dir == Path("/var/lib/skillsqueue")
    assert config.auto_dequeue.base_url == "http://192.168.1.20"
    assert config.auto_dequeue.offline_mode is True
    assert config.auto_dequeue.poll_interval == 2.5


def test_unrecognized_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OFFLINE_MODE", "maybe")

    assert AppConfig.from_env().auto_dequeue.offline_mode is False


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("VEX_TM_BASE_URL", "http://192.168.1.20")

    config = AppConfig.from_env(port=4000, data_dir="queue-data", auto_dequeue={"poll_interval_ms": 1000})

    assert config.port == 4000
    assert config.data_dir == Path("queue-data")
    assert config.auto_dequeue.base_url == "http://192.168.1.20"
    assert config.auto_dequeue.poll_interval_ms == 1000


def test_engine_config_instance_override() -> None:
    engine = AutoDequeueConfig(base_url=None, offline_mode=True)

    config = AppConfig.from_env(auto_dequeue=engine)

    assert config.auto_dequeue == engine
    assert config.auto_dequeue.as_dict() == {"baseUrl": None, "pollIntervalMs": 5000, "offlineMode": True}
