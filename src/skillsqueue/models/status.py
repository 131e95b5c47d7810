"""Operational status exposed by the auto-dequeue engine."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from skillsqueue.models._base import SkillsQueueModel


class SkillsStateSummary(SkillsQueueModel):
    model_config = ConfigDict(frozen=True)

    teams_tracked: int = 0
    last_fetch_timestamp: datetime | None = None
    last_fetch_success: bool = False


class AutoDequeueStatus(SkillsQueueModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool
    state: str
    is_polling_active: bool
    poll_count: int
    config: dict[str, Any] = Field(default_factory=dict)
    skills_state: SkillsStateSummary = Field(default_factory=SkillsStateSummary)
