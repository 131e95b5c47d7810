from __future__ import annotations

from datetime import datetime, timedelta

from skillsqueue.models.skills import SkillsCounts, TeamSkillsRow
from skillsqueue.tracker import SkillsTracker


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 2, 6, 9, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def test_first_sighting_never_reports_change() -> None:
    tracker = SkillsTracker()

    assert tracker.update("502A", 3, 2) is None
    assert tracker.teams == {"502A": SkillsCounts(autonomous=3, driving=2)}


def test_increase_reports_previous_and_current() -> None:
    tracker = SkillsTracker()
    tracker.update("502A", 1, 1)

    change = tracker.update("502A", 1, 2)

    assert change is not None
    assert change.autonomous_increased is False
    assert change.driving_increased is True
    assert change.either is True
    assert change.previous == SkillsCounts(autonomous=1, driving=1)
    assert change.current == SkillsCounts(autonomous=1, driving=2)


def test_both_fields_increasing() -> None:
    tracker = SkillsTracker()
    tracker.update("502A", 0, 0)

    change = tracker.update("502A", 1, 1)

    assert change is not None
    assert change.autonomous_increased and change.driving_increased


def test_equal_or_lower_counts_are_ignored() -> None:
    tracker = SkillsTracker()
    tracker.update("502A", 2, 2)

    assert tracker.update("502A", 2, 2) is None
    assert tracker.update("502A", 0, 1) is None
    assert tracker.teams["502A"] == SkillsCounts(autonomous=2, driving=2)


def test_repeated_identical_report_only_fires_once() -> None:
    tracker = SkillsTracker()
    tracker.update("502A", 0, 0)

    assert tracker.update("502A", 1, 0) is not None
    assert tracker.update("502A", 1, 0) is None


def test_decrease_does_not_hide_later_increase_from_stored_value() -> None:
    tracker = SkillsTracker()
    tracker.update("502A", 2, 2)
    tracker.update("502A", 0, 0)

    assert tracker.update("502A", 2, 2) is None
    assert tracker.update("502A", 3, 2) is not None


def test_record_timestamp_only_moves_on_increase() -> None:
    clock = _Clock()
    tracker = SkillsTracker(clock=clock)
    tracker.update("502A", 0, 0)
    first = tracker.get_record("502A")

    clock.advance(60)
    tracker.update("502A", 0, 0)
    assert tracker.get_record("502A") == first

    clock.advance(60)
    tracker.update("502A", 1, 0)
    record = tracker.get_record("502A")
    assert record is not None
    assert record.last_updated_at == clock.now


def test_bulk_update_returns_changes_in_input_order() -> None:
    tracker = SkillsTracker()
    tracker.bulk_update(
        [
            TeamSkillsRow("100A", 0, 0),
            TeamSkillsRow("200B", 1, 1),
            TeamSkillsRow("300C", 2, 2),
            TeamSkillsRow("400D", 0, 0),
        ]
    )

    changes = tracker.bulk_update(
        [
            TeamSkillsRow("100A", 0, 0),
            TeamSkillsRow("400D", 1, 0),
            TeamSkillsRow("200B", 1, 2),
            TeamSkillsRow("300C", 1, 1),
            TeamSkillsRow("500E", 9, 9),
        ]
    )

    assert [c.team_id for c in changes] == ["400D", "200B"]
    assert changes[1].change.previous == SkillsCounts(autonomous=1, driving=1)


def test_bulk_update_marks_fetch_success() -> None:
    clock = _Clock()
    tracker = SkillsTracker(clock=clock)
    tracker.mark_fetch_failed()
    assert tracker.last_fetch_success is False

    clock.advance(5)
    tracker.bulk_update([])

    assert tracker.last_fetch_success is True
    assert tracker.last_fetch_timestamp == clock.now


def test_mark_fetch_failed_keeps_team_records() -> None:
    clock = _Clock()
    tracker = SkillsTracker(clock=clock)
    tracker.bulk_update([TeamSkillsRow("502A", 1, 1)])

    clock.advance(5)
    tracker.mark_fetch_failed()

    assert tracker.last_fetch_success is False
    assert tracker.last_fetch_timestamp == clock.now
    assert "502A" in tracker.teams


def test_reset_clears_everything() -> None:
    tracker = SkillsTracker()
    tracker.bulk_update([TeamSkillsRow("502A", 1, 1)])

    tracker.reset()

    summary = tracker.summary()
    assert summary.teams_tracked == 0
    assert summary.last_fetch_timestamp is None
    assert summary.last_fetch_success is False
    # First sighting again after reset.
    assert tracker.update("502A", 5, 5) is None
