"""Queue operations used by the kiosk, admin and display endpoints.

Every operation that reads then writes the queue lists holds the queue store
lock for the whole read-modify-persist-broadcast sequence, the same lock the
auto-dequeue engine takes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from skillsqueue._constants import MIN_NUMBER_OF_FIELDS, MIN_TURNOVER_MINUTES
from skillsqueue.capacity import compute_status
from skillsqueue.exceptions import (
    InvalidRequestError,
    QueueClosedError,
    QueueEmptyError,
    SettingsValidationError,
    TeamAlreadyQueuedError,
    TeamNotServedError,
)
from skillsqueue.models.capacity import CapacityDecision
from skillsqueue.models.queue import QueueEntry, QueueState
from skillsqueue.models.settings import QueueSettings
from skillsqueue.store.queue_store import QueueStore
from skillsqueue.store.settings_store import SettingsStore

_logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now()


class QueueService:
    """Admission control and manual queue mutations."""

    def __init__(
        self,
        queue_store: QueueStore,
        settings_store: SettingsStore,
        *,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._queue = queue_store
        self._settings = settings_store
        self._clock = clock

    @property
    def queue_store(self) -> QueueStore:
        return self._queue

    @property
    def settings_store(self) -> SettingsStore:
        return self._settings

    def snapshot(self) -> dict[str, Any]:
        """Payload pushed to display clients."""
        state = self._queue.get_state().to_wire()
        state["queueSettings"] = self._settings.get_settings().to_wire()
        return state

    def queue_status(self) -> CapacityDecision:
        return self._check(self._queue.get_state())

    def _check(self, state: QueueState) -> CapacityDecision:
        return compute_status(self._settings.get_settings(), state.sizes(), self._clock())

    async def _close_if_advised(self, decision: CapacityDecision) -> None:
        if decision.should_permanently_close and not self._settings.get_settings().skills_queue_closed:
            _logger.info("Closing skills queue permanently (%s)", decision.reason)
            async with self._settings.locked():
                await self._settings.update_settings({"skills_queue_closed": True})

    async def _commit(self, state: QueueState) -> None:
        self._queue.set_state(state.now_serving, state.queue)
        await self._queue.persist()
        await self._queue.broadcast()

    async def add_team(self, team: str) -> QueueEntry:
        """Register *team* at the end of the queue."""
        team = team.strip()
        if not team:
            raise InvalidRequestError("Team number is required")

        async with self._queue.locked():
            state = self._queue.get_state()
            decision = self._check(state)
            await self._close_if_advised(decision)
            if not decision.is_open:
                raise QueueClosedError("Queue is closed")

            if state.contains(team):
                raise TeamAlreadyQueuedError("Team is already in queue")

            entry = QueueEntry(number=team)
            state.queue.append(entry)
            self._queue.set_state(state.now_serving, state.queue)
            await self._queue.persist()

            # The entry that takes the last slot closes registration for good.
            await self._close_if_advised(self._check(state))
            await self._queue.broadcast()

        _logger.info("Team %s added to queue", team)
        return entry

    async def serve_next(self, field: int | None = None) -> QueueEntry:
        """Move the head of the queue onto a field."""
        async with self._queue.locked():
            state = self._queue.get_state()
            if not state.queue:
                raise QueueEmptyError("empty")

            head = state.queue.pop(0)
            served = head.model_copy(update={"at": head.at or self._clock(), "field": field})
            state.now_serving.append(served)
            await self._commit(state)

        _logger.info("Serving team %s on field %s", served.number, field)
        return served

    async def unserve(self, team: str, position: int | None = None) -> QueueEntry:
        """Put a served team back into the queue at 1-based *position* (front by default)."""
        async with self._queue.locked():
            state = self._queue.get_state()
            if not state.now_serving:
                raise QueueEmptyError("empty")

            index = next((i for i, entry in enumerate(state.now_serving) if entry.number == team), None)
            if index is None:
                raise TeamNotServedError(f"Team {team} is not being served")

            entry = state.now_serving.pop(index)
            insert_at = max((position or 1) - 1, 0)
            state.queue.insert(insert_at, entry)
            await self._commit(state)

        _logger.info("Team %s returned to queue at position %d", team, insert_at + 1)
        return entry

    async def remove_team(self, team: str) -> None:
        """Drop *team* from both lists; absent teams are not an error."""
        async with self._queue.locked():
            state = self._queue.get_state()
            state.now_serving = [entry for entry in state.now_serving if entry.number != team]
            state.queue = [entry for entry in state.queue if entry.number != team]
            await self._commit(state)

        _logger.info("Team %s removed by operator", team)

    async def update_settings(self, partial: Mapping[str, Any]) -> QueueSettings:
        """Validate and merge a settings update, then notify clients.

        Turning the manual override on also clears the permanent-close flag.
        """
        changes = dict(partial)
        turnover = changes.get("skillsTurnoverTime", changes.get("skills_turnover_time"))
        if turnover is not None:
            if isinstance(turnover, bool) or not isinstance(turnover, (int, float)):
                raise SettingsValidationError("Turnover time must be a number")
            if turnover < MIN_TURNOVER_MINUTES:
                raise SettingsValidationError(f"Turnover time must be >= {MIN_TURNOVER_MINUTES}")

        fields = changes.get("numberOfFields", changes.get("number_of_fields"))
        if fields is not None:
            if isinstance(fields, bool) or not isinstance(fields, int):
                raise SettingsValidationError("Number of fields must be an integer")
            if fields < MIN_NUMBER_OF_FIELDS:
                raise SettingsValidationError(f"Number of fields must be >= {MIN_NUMBER_OF_FIELDS}")

        manually_open = changes.get("skillsQueueManuallyOpen", changes.get("skills_queue_manually_open"))
        if manually_open is True:
            changes.pop("skills_queue_closed", None)
            changes["skillsQueueClosed"] = False

        async with self._settings.locked():
            settings = await self._settings.update_settings(changes)

        await self._queue.broadcast()
        _logger.info("Queue settings updated: %s", settings.to_wire())
        return settings
