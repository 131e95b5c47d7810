"""Queue entries and the nowServing/queue snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import ConfigDict, Field

from skillsqueue.models._base import SkillsQueueModel


class QueueEntry(SkillsQueueModel):
    """A team waiting in the queue or occupying a field."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    number: str
    at: datetime | None = None
    field: int | None = None


@dataclass(frozen=True, slots=True)
class QueueSizes:
    now_serving: int
    queue: int

    @property
    def total(self) -> int:
        return self.now_serving + self.queue


class QueueState(SkillsQueueModel):
    """Both queue lists.  A team number appears at most once across them."""

    now_serving: list[QueueEntry] = Field(default_factory=list)
    queue: list[QueueEntry] = Field(default_factory=list)

    def sizes(self) -> QueueSizes:
        return QueueSizes(now_serving=len(self.now_serving), queue=len(self.queue))

    def contains(self, team: str) -> bool:
        return self.is_serving(team) or self.is_queued(team)

    def is_serving(self, team: str) -> bool:
        return any(entry.number == team for entry in self.now_serving)

    def is_queued(self, team: str) -> bool:
        return any(entry.number == team for entry in self.queue)
