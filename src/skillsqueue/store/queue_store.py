"""Queue state store: ``nowServing`` and ``queue`` with file persistence."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from pathlib import Path

from pydantic import ValidationError

from skillsqueue.models.queue import QueueEntry, QueueState
from skillsqueue.store._files import read_json, write_json, write_json_sync

_logger = logging.getLogger(__name__)

ChangeListener = Callable[[], Awaitable[None]]


class QueueStore:
    """In-memory queue lists guarded by one non-reentrant lock.

    The lock covers both lists.  Callers hold it for the whole
    read-modify-persist-broadcast sequence::

        async with store.locked():
            state = store.get_state()
            ...
            store.set_state(state.now_serving, state.queue)
            await store.persist()
            await store.broadcast()
    """

    def __init__(self, path: Path | None = None, *, state: QueueState | None = None) -> None:
        self._path = path
        self._state = state.model_copy(deep=True) if state is not None else QueueState()
        self._lock = asyncio.Lock()
        self._listeners: list[ChangeListener] = []

    @classmethod
    def load(cls, path: Path) -> QueueStore:
        """Load from *path*, creating an empty file when it does not exist.

        Unreadable content is logged and the store starts empty.
        """
        if not path.exists():
            _logger.info("Queue file %s does not exist, creating it", path)
            store = cls(path)
            write_json_sync(path, store._state.to_wire())
            return store

        try:
            data = read_json(path)
            state = QueueState.model_validate(data) if data else QueueState()
        except (OSError, ValueError, ValidationError):
            _logger.exception("Could not read queue file %s, starting empty", path)
            state = QueueState()

        _logger.info("Loaded queue: %d serving, %d waiting", len(state.now_serving), len(state.queue))
        return cls(path, state=state)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def is_locked(self) -> bool:
        return self._lock.locked()

    @contextlib.asynccontextmanager
    async def locked(self) -> AsyncIterator[None]:
        """Hold the store lock for the duration of the block."""
        async with self._lock:
            yield

    def get_state(self) -> QueueState:
        """Deep copy of both lists; mutate it and hand it back via :meth:`set_state`."""
        return self._state.model_copy(deep=True)

    def set_state(self, now_serving: Iterable[QueueEntry], queue: Iterable[QueueEntry]) -> None:
        self._state = QueueState(now_serving=list(now_serving), queue=list(queue))

    def has_serving(self) -> bool:
        return bool(self._state.now_serving)

    async def persist(self) -> None:
        """Overwrite the queue file with the current lists."""
        if self._path is None:
            return
        _logger.debug(
            "Persisting queue: %d serving, %d waiting",
            len(self._state.now_serving),
            len(self._state.queue),
        )
        await write_json(self._path, self._state.to_wire())

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    async def broadcast(self) -> None:
        """Notify listeners.  A failing listener is logged and skipped."""
        for listener in list(self._listeners):
            try:
                await listener()
            except Exception:
                _logger.exception("Queue change listener failed")
