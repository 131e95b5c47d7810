"""Admission capacity calculator.

Decides from the queue settings, the current queue sizes and the wall clock
whether the skills queue still accepts registrations.  The module is pure:
``should_permanently_close`` is advisory and the caller is responsible for
writing ``skills_queue_closed`` back to the settings store.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime

from skillsqueue.models.capacity import CapacityDecision, CapacityReason
from skillsqueue.models.queue import QueueSizes
from skillsqueue.models.settings import QueueSettings

# "2/6 12:00 PM", "2/6 12pm", "02/06 9:05 am"
_CUTOFF_RE = re.compile(r"(\d{1,2})/(\d{1,2})\s+(\d{1,2})(?::(\d{2}))?\s*(AM|PM)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class CutoffTime:
    """Month/day and 24h clock time parsed from a cutoff setting."""

    month: int
    day: int
    hour: int
    minute: int

    def on_year_of(self, now: datetime) -> datetime | None:
        """Resolve against the year (and tzinfo) of *now*; ``None`` if the date does not exist."""
        try:
            return datetime(now.year, self.month, self.day, self.hour, self.minute, tzinfo=now.tzinfo)
        except ValueError:
            return None


def parse_cutoff_time(value: str | None) -> CutoffTime | None:
    """Parse ``M/D h[:mm] AM|PM`` into a :class:`CutoffTime`.

    Returns ``None`` when *value* does not contain that pattern.
    """
    if not value:
        return None
    match = _CUTOFF_RE.search(value)
    if match is None:
        return None

    month = int(match.group(1))
    day = int(match.group(2))
    hour = int(match.group(3))
    minute = int(match.group(4)) if match.group(4) else 0
    period = match.group(5).upper()

    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        return None
    return CutoffTime(month=month, day=day, hour=hour, minute=minute)


def _unlimited(reason: CapacityReason) -> CapacityDecision:
    return CapacityDecision(is_open=True, reason=reason, remaining_slots=math.inf)


def compute_status(
    settings: QueueSettings,
    sizes: QueueSizes,
    now: datetime | None = None,
) -> CapacityDecision:
    """Compute the admission decision.

    Rules are evaluated in order and the first match wins: manual open,
    permanently closed, unparseable cutoff (open), non-positive turnover
    (open), past cutoff, capacity full, capacity available.

    Parameters
    ----------
    settings : QueueSettings
        Current queue settings.
    sizes : QueueSizes
        Number of teams being served and waiting.
    now : datetime or None
        Server-local current time.  Defaults to :func:`datetime.now`.
    """
    if now is None:
        now = datetime.now()

    if settings.skills_queue_manually_open:
        return _unlimited(CapacityReason.MANUAL)

    if settings.skills_queue_closed:
        return CapacityDecision(is_open=False, reason=CapacityReason.PERMANENTLY_CLOSED, remaining_slots=0)

    cutoff = parse_cutoff_time(settings.skills_cutoff_time)
    cutoff_at = cutoff.on_year_of(now) if cutoff is not None else None
    if cutoff_at is None:
        return _unlimited(CapacityReason.INVALID_CUTOFF)

    turnover = settings.skills_turnover_time
    if not turnover or turnover <= 0:
        return _unlimited(CapacityReason.INVALID_TURNOVER)

    minutes_remaining = math.floor((cutoff_at - now).total_seconds() / 60)
    if minutes_remaining <= 0:
        return CapacityDecision(
            is_open=False,
            reason=CapacityReason.PAST_CUTOFF,
            remaining_slots=0,
            minutes_remaining=0,
            should_permanently_close=True,
        )

    fields = settings.number_of_fields if settings.number_of_fields > 0 else 1
    total_capacity = int((minutes_remaining * fields) // turnover)
    current_queue_size = sizes.total
    remaining_slots = max(0, total_capacity - current_queue_size)

    if remaining_slots == 0:
        return CapacityDecision(
            is_open=False,
            reason=CapacityReason.CAPACITY_FULL,
            remaining_slots=0,
            total_capacity=total_capacity,
            current_queue_size=current_queue_size,
            minutes_remaining=minutes_remaining,
            should_permanently_close=True,
        )

    return CapacityDecision(
        is_open=True,
        reason=CapacityReason.CAPACITY_AVAILABLE,
        remaining_slots=remaining_slots,
        total_capacity=total_capacity,
        current_queue_size=current_queue_size,
        minutes_remaining=minutes_remaining,
    )
