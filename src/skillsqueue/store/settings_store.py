"""Queue settings store with shallow-merge updates."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from skillsqueue.exceptions import SettingsValidationError
from skillsqueue.models.settings import QueueSettings
from skillsqueue.store._files import read_json, write_json, write_json_sync

_logger = logging.getLogger(__name__)


def _to_aliases(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite snake_case field names in *partial* to their camelCase aliases."""
    aliases = {name: info.alias or name for name, info in QueueSettings.model_fields.items()}
    return {aliases.get(key, key): value for key, value in partial.items()}


class SettingsStore:
    """Holds the current :class:`QueueSettings` and its JSON file."""

    def __init__(self, path: Path | None = None, *, settings: QueueSettings | None = None) -> None:
        self._path = path
        self._settings = settings or QueueSettings()
        self._lock = asyncio.Lock()

    @classmethod
    def load(cls, path: Path) -> SettingsStore:
        """Load from *path*; file values are merged over the defaults."""
        if not path.exists():
            _logger.info("Settings file %s does not exist, creating it with defaults", path)
            store = cls(path)
            write_json_sync(path, store._settings.to_wire())
            return store

        try:
            data = read_json(path)
            settings = QueueSettings.model_validate(data) if data else QueueSettings()
        except (OSError, ValueError, ValidationError):
            _logger.exception("Could not read settings file %s, using defaults", path)
            settings = QueueSettings()

        _logger.info("Loaded queue settings: %s", settings.to_wire())
        return cls(path, settings=settings)

    @contextlib.asynccontextmanager
    async def locked(self) -> AsyncIterator[None]:
        async with self._lock:
            yield

    def get_settings(self) -> QueueSettings:
        return self._settings

    async def update_settings(self, partial: Mapping[str, Any]) -> QueueSettings:
        """Shallow-merge *partial* (camelCase or snake_case keys) and persist."""
        merged = {**self._settings.to_wire(), **_to_aliases(partial)}
        try:
            settings = QueueSettings.model_validate(merged)
        except ValidationError as exc:
            raise SettingsValidationError(f"Invalid queue settings: {exc.error_count()} error(s)") from exc

        self._settings = settings
        await self.persist()
        return settings

    async def persist(self) -> None:
        if self._path is None:
            return
        await write_json(self._path, self._settings.to_wire())
