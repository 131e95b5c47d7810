"""Capacity decision returned by the admission calculator."""

from __future__ import annotations

import math
from enum import StrEnum

from pydantic import ConfigDict, field_serializer

from skillsqueue.models._base import SkillsQueueModel


class CapacityReason(StrEnum):
    MANUAL = "manual"
    PERMANENTLY_CLOSED = "permanently_closed"
    INVALID_CUTOFF = "invalid_cutoff"
    INVALID_TURNOVER = "invalid_turnover"
    PAST_CUTOFF = "past_cutoff"
    CAPACITY_FULL = "capacity_full"
    CAPACITY_AVAILABLE = "capacity_available"


class CapacityDecision(SkillsQueueModel):
    """Whether the queue accepts entries right now.

    ``remaining_slots`` is ``math.inf`` when registration is open without a
    capacity limit (manual override, fail-open on bad settings).  It is
    serialized as ``null``.
    """

    model_config = ConfigDict(frozen=True)

    is_open: bool
    reason: CapacityReason
    remaining_slots: int | float
    total_capacity: int | None = None
    current_queue_size: int | None = None
    minutes_remaining: int | None = None
    should_permanently_close: bool = False

    @property
    def is_unlimited(self) -> bool:
        return isinstance(self.remaining_slots, float) and math.isinf(self.remaining_slots)

    @field_serializer("remaining_slots", when_used="json")
    def _serialize_remaining_slots(self, value: int | float) -> int | float | None:
        if isinstance(value, float) and math.isinf(value):
            return None
        return value
