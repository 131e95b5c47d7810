"""Data models for skillsqueue."""

from skillsqueue.models._base import SkillsQueueModel
from skillsqueue.models.capacity import CapacityDecision, CapacityReason
from skillsqueue.models.queue import QueueEntry, QueueSizes, QueueState
from skillsqueue.models.settings import QueueSettings
from skillsqueue.models.skills import SkillsChange, SkillsCounts, TeamChange, TeamSkillsRecord, TeamSkillsRow
from skillsqueue.models.status import AutoDequeueStatus, SkillsStateSummary

__all__ = [
    "AutoDequeueStatus",
    "CapacityDecision",
    "CapacityReason",
    "QueueEntry",
    "QueueSettings",
    "QueueSizes",
    "QueueState",
    "SkillsChange",
    "SkillsCounts",
    "SkillsQueueModel",
    "SkillsStateSummary",
    "TeamChange",
    "TeamSkillsRecord",
    "TeamSkillsRow",
]
