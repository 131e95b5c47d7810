"""Automatic dequeue engine.

Two background tasks share one event loop with the HTTP handlers:

* the monitoring task samples ``nowServing`` every second and switches the
  engine between :attr:`PollState.IDLE` and :attr:`PollState.POLLING`;
* the polling task, alive only while polling, scrapes the tournament manager
  skills page, feeds the tracker and dequeues every team whose attempt count
  went up.

Poll cycles never overlap.  Stopping (state change or :meth:`shutdown`) lets
an in-flight cycle finish instead of cancelling it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import StrEnum
from typing import Protocol

from skillsqueue._constants import MONITOR_INTERVAL_S
from skillsqueue.config import AutoDequeueConfig
from skillsqueue.exceptions import ConfigError, ScrapeError
from skillsqueue.models.skills import SkillsChange, TeamChange, TeamSkillsRow
from skillsqueue.models.status import AutoDequeueStatus
from skillsqueue.scraper import SkillsScraper
from skillsqueue.store.queue_store import QueueStore
from skillsqueue.tracker import SkillsTracker

_logger = logging.getLogger(__name__)


class SkillsSource(Protocol):
    """What the engine needs from a scraper."""

    async def fetch_skills_table(self, base_url: str) -> list[TeamSkillsRow]:
        ...

    async def close(self) -> None:
        ...


class PollState(StrEnum):
    IDLE = "idle"
    POLLING = "polling"


async def _sleep_unless_stopped(stop: asyncio.Event, seconds: float) -> None:
    with contextlib.suppress(TimeoutError):
        await asyncio.wait_for(stop.wait(), seconds)


class AutoDequeueEngine:
    """Polls skills attempts while a team is served and dequeues on increase.

    Usage::

        engine = AutoDequeueEngine(queue_store)
        engine.initialize(AutoDequeueConfig(base_url="http://10.0.0.3"))
        ...
        await engine.shutdown()
    """

    def __init__(
        self,
        queue_store: QueueStore,
        *,
        tracker: SkillsTracker | None = None,
        scraper: SkillsSource | None = None,
        monitor_interval: float = MONITOR_INTERVAL_S,
    ) -> None:
        self._store = queue_store
        self._tracker = tracker or SkillsTracker()
        self._scraper = scraper
        self._owns_scraper = scraper is None
        self._monitor_interval = monitor_interval

        self._config = AutoDequeueConfig()
        self._initialized = False
        self._enabled = False
        self._state = PollState.IDLE
        self._poll_count = 0
        self._poll_lock = asyncio.Lock()

        self._monitor_task: asyncio.Task[None] | None = None
        self._monitor_stop: asyncio.Event | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._poll_stop: asyncio.Event | None = None
        self._retired_tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def poll_count(self) -> int:
        return self._poll_count

    @property
    def tracker(self) -> SkillsTracker:
        return self._tracker

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, config: AutoDequeueConfig) -> None:
        """Apply *config* and start monitoring.

        Must be called from a running event loop.  Offline mode or a missing
        base URL leave the engine disabled (no task is started).
        """
        if self._initialized:
            raise ConfigError("Auto-dequeue engine is already initialized")
        self._initialized = True
        self._config = config

        if config.offline_mode:
            _logger.info("Offline mode, auto-dequeue disabled")
            return
        if not config.base_url:
            _logger.error("No tournament manager base URL, auto-dequeue disabled")
            return

        if self._scraper is None:
            self._scraper = SkillsScraper(timeout=config.request_timeout)
        self._enabled = True
        _logger.info(
            "Auto-dequeue initialized base_url=%s poll_interval_ms=%d",
            config.base_url,
            config.poll_interval_ms,
        )

        self._monitor_stop = asyncio.Event()
        self._monitor_task = asyncio.create_task(
            self._monitor_loop(self._monitor_stop),
            name="skillsqueue-monitor",
        )

    async def shutdown(self) -> None:
        """Stop both loops and wait for a trailing poll cycle to complete."""
        if self._monitor_stop is not None:
            self._monitor_stop.set()
        self._stop_polling()

        tasks = [task for task in (self._monitor_task, *self._retired_tasks) if task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._monitor_task = None
        self._monitor_stop = None

        if self._owns_scraper and self._scraper is not None:
            await self._scraper.close()
        _logger.info("Auto-dequeue shut down")

    def status(self) -> AutoDequeueStatus:
        return AutoDequeueStatus(
            enabled=self._enabled,
            state=self._state.value,
            is_polling_active=self._state is PollState.POLLING,
            poll_count=self._poll_count,
            config=self._config.as_dict(),
            skills_state=self._tracker.summary(),
        )

    # ------------------------------------------------------------------
    # Idle <-> polling state machine
    # ------------------------------------------------------------------

    def check_serving(self) -> PollState:
        """One monitoring tick: follow whether anyone is being served."""
        should_poll = self._store.has_serving()
        if should_poll and self._state is PollState.IDLE:
            self._start_polling()
        elif not should_poll and self._state is PollState.POLLING:
            self._stop_polling()
        return self._state

    async def _monitor_loop(self, stop: asyncio.Event) -> None:
        _logger.debug("Monitoring started")
        while not stop.is_set():
            self.check_serving()
            await _sleep_unless_stopped(stop, self._monitor_interval)
        _logger.debug("Monitoring stopped")

    def _start_polling(self) -> None:
        if self._state is not PollState.IDLE or not self._enabled:
            return
        self._state = PollState.POLLING
        self._poll_count = 0
        self._poll_stop = asyncio.Event()
        self._poll_task = asyncio.create_task(self._poll_loop(self._poll_stop), name="skillsqueue-poll")
        _logger.info("Polling started (interval %d ms)", self._config.poll_interval_ms)

    def _stop_polling(self) -> None:
        if self._state is not PollState.POLLING:
            return
        self._state = PollState.IDLE
        if self._poll_stop is not None:
            self._poll_stop.set()
        task = self._poll_task
        if task is not None and not task.done():
            self._retired_tasks.add(task)
            task.add_done_callback(self._retired_tasks.discard)
        self._poll_task = None
        self._poll_stop = None
        _logger.info("Polling stopped (total polls: %d)", self._poll_count)

    async def _poll_loop(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                await self.poll_once()
            except Exception:
                _logger.exception("Poll cycle failed")
            await _sleep_unless_stopped(stop, self._config.poll_interval)

    # ------------------------------------------------------------------
    # Poll cycle and dequeue
    # ------------------------------------------------------------------

    async def poll_once(self) -> list[TeamChange]:
        """Run one scrape/track/dequeue cycle and return the detected changes.

        A scrape failure is recorded on the tracker and yields no changes.
        """
        base_url = self._config.base_url
        if not base_url or self._scraper is None:
            raise ConfigError("Auto-dequeue engine is not enabled")

        async with self._poll_lock:
            self._poll_count += 1
            try:
                rows = await self._scraper.fetch_skills_table(base_url)
            except ScrapeError as exc:
                _logger.warning("Poll failed: %s", exc)
                self._tracker.mark_fetch_failed()
                return []
            except Exception:
                _logger.exception("Poll failed with unexpected error")
                self._tracker.mark_fetch_failed()
                return []

            changes = self._tracker.bulk_update(rows)
            if changes:
                _logger.info("Detected %d team(s) with increased attempts", len(changes))
            for team_change in changes:
                await self.dequeue_team(team_change.team_id, team_change.change)
            return changes

    async def dequeue_team(self, team_id: str, change: SkillsChange | None = None) -> bool:
        """Remove *team_id* from both queue lists.

        Returns ``False`` when the team was in neither list (already removed
        by an operator) or on an unexpected error, which is logged and never
        re-raised so the next dequeue still runs.  A failed file write is
        logged too, but the team stays removed and clients are notified.
        """
        async with self._store.locked():
            try:
                state = self._store.get_state()
                was_serving = state.is_serving(team_id)
                was_queued = state.is_queued(team_id)
                if not (was_serving or was_queued):
                    _logger.debug("Team %s not in queue, skipping", team_id)
                    return False

                self._store.set_state(
                    [entry for entry in state.now_serving if entry.number != team_id],
                    [entry for entry in state.queue if entry.number != team_id],
                )
                try:
                    await self._store.persist()
                except OSError:
                    _logger.exception("Could not persist queue after dequeuing team %s", team_id)
                await self._store.broadcast()
            except Exception:
                _logger.exception("Error dequeuing team %s", team_id)
                return False

        _logger.info(
            "Team %s removed from queue (%s) serving=%s queued=%s",
            team_id,
            change.describe() if change is not None else "manual",
            was_serving,
            was_queued,
        )
        return True
