"""Queue open/close settings."""

from __future__ import annotations

from skillsqueue.models._base import SkillsQueueModel


class QueueSettings(SkillsQueueModel):
    """Operator-controlled registration settings.

    Values are stored as entered; the capacity calculator fails open on
    malformed ones (unparseable cutoff, non-positive turnover).
    """

    skills_cutoff_time: str = "12:00 PM"
    skills_turnover_time: float = 5
    skills_queue_manually_open: bool = False
    skills_queue_closed: bool = False
    number_of_fields: int = 4
