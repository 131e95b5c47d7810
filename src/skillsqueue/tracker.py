"""In-memory skills attempt tracker.

Keeps the last known autonomous/driving attempt counts per team and reports
strict increases.  Counts reported lower than the stored ones (the tournament
manager can reset its counters) are ignored rather than treated as errors.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime

from skillsqueue.models.skills import SkillsChange, SkillsCounts, TeamChange, TeamSkillsRecord, TeamSkillsRow
from skillsqueue.models.status import SkillsStateSummary


def _now() -> datetime:
    return datetime.now()


class SkillsTracker:
    """Per-team attempt counts with increase detection."""

    def __init__(self, *, clock: Callable[[], datetime] = _now) -> None:
        self._clock = clock
        self._teams: dict[str, TeamSkillsRecord] = {}
        self._last_fetch_timestamp: datetime | None = None
        self._last_fetch_success = False

    @property
    def teams(self) -> dict[str, SkillsCounts]:
        return {team_id: record.counts for team_id, record in self._teams.items()}

    @property
    def last_fetch_timestamp(self) -> datetime | None:
        return self._last_fetch_timestamp

    @property
    def last_fetch_success(self) -> bool:
        return self._last_fetch_success

    def get_record(self, team_id: str) -> TeamSkillsRecord | None:
        record = self._teams.get(team_id)
        if record is None:
            return None
        return TeamSkillsRecord(record.autonomous, record.driving, record.last_updated_at)

    def update(self, team_id: str, autonomous: int, driving: int) -> SkillsChange | None:
        """Record fresh counts for *team_id*.

        The first sighting of a team only stores its counts, so teams that
        are mid-attempt when the service starts are not dequeued.
        """
        now = self._clock()
        stored = self._teams.get(team_id)
        if stored is None:
            self._teams[team_id] = TeamSkillsRecord(autonomous, driving, now)
            return None

        autonomous_increased = stored.autonomous < autonomous
        driving_increased = stored.driving < driving
        if not (autonomous_increased or driving_increased):
            return None

        previous = stored.counts
        self._teams[team_id] = TeamSkillsRecord(autonomous, driving, now)
        return SkillsChange(
            autonomous_increased=autonomous_increased,
            driving_increased=driving_increased,
            previous=previous,
            current=SkillsCounts(autonomous=autonomous, driving=driving),
        )

    def bulk_update(self, rows: Iterable[TeamSkillsRow]) -> list[TeamChange]:
        """Apply a successful scrape; return the increases in input order."""
        changes: list[TeamChange] = []
        for row in rows:
            change = self.update(row.team_id, row.autonomous, row.driving)
            if change is not None:
                changes.append(TeamChange(team_id=row.team_id, change=change))

        self._last_fetch_timestamp = self._clock()
        self._last_fetch_success = True
        return changes

    def mark_fetch_failed(self) -> None:
        self._last_fetch_success = False
        self._last_fetch_timestamp = self._clock()

    def reset(self) -> None:
        self._teams.clear()
        self._last_fetch_timestamp = None
        self._last_fetch_success = False

    def summary(self) -> SkillsStateSummary:
        return SkillsStateSummary(
            teams_tracked=len(self._teams),
            last_fetch_timestamp=self._last_fetch_timestamp,
            last_fetch_success=self._last_fetch_success,
        )
