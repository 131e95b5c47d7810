"""Skills attempt records and change events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class TeamSkillsRow:
    """One parsed row of the tournament manager skills table."""

    team_id: str
    autonomous: int
    driving: int


@dataclass(frozen=True, slots=True)
class SkillsCounts:
    autonomous: int
    driving: int


@dataclass(slots=True)
class TeamSkillsRecord:
    """Last known attempt counts for a single team."""

    autonomous: int
    driving: int
    last_updated_at: datetime

    @property
    def counts(self) -> SkillsCounts:
        return SkillsCounts(autonomous=self.autonomous, driving=self.driving)


@dataclass(frozen=True, slots=True)
class SkillsChange:
    """Increase detected between the stored and the freshly scraped counts."""

    autonomous_increased: bool
    driving_increased: bool
    previous: SkillsCounts
    current: SkillsCounts

    @property
    def either(self) -> bool:
        return self.autonomous_increased or self.driving_increased

    def describe(self) -> str:
        """Human readable summary used in dequeue log lines."""
        parts: list[str] = []
        if self.autonomous_increased:
            parts.append(f"autonomous {self.previous.autonomous} -> {self.current.autonomous}")
        if self.driving_increased:
            parts.append(f"driving {self.previous.driving} -> {self.current.driving}")
        return ", ".join(parts)


@dataclass(frozen=True, slots=True)
class TeamChange:
    team_id: str
    change: SkillsChange
