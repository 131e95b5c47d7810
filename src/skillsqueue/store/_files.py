"""Whole-file JSON persistence helpers."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

_logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any | None:
    """Return the decoded content of *path*, or ``None`` for an empty file."""
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return None
    return json.loads(text)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def write_json_sync(path: Path, data: Any) -> None:
    _write(path, json.dumps(data, indent=2))


async def write_json(path: Path, data: Any) -> None:
    """Overwrite *path* with *data* without blocking the event loop."""
    text = json.dumps(data, indent=2)
    await asyncio.to_thread(_write, path, text)
    _logger.debug("Wrote %s (%d bytes)", path, len(text))
