from __future__ import annotations

from datetime import datetime

import pytest

from skillsqueue.exceptions import (
    InvalidRequestError,
    QueueClosedError,
    QueueEmptyError,
    SettingsValidationError,
    TeamAlreadyQueuedError,
    TeamNotServedError,
)
from skillsqueue.models.capacity import CapacityReason
from skillsqueue.models.queue import QueueEntry, QueueState
from skillsqueue.models.settings import QueueSettings
from skillsqueue.service import QueueService
from skillsqueue.store import QueueStore, SettingsStore

_NOW = datetime(2026, 2, 6, 11, 30)


def _service(
    *,
    serving: tuple[str, ...] = (),
    queued: tuple[str, ...] = (),
    **settings: object,
) -> QueueService:
    values: dict[str, object] = {
        "skills_cutoff_time": "2/6 12:00 PM",
        "skills_turnover_time": 10,
        "number_of_fields": 1,
    }
    values.update(settings)
    queue_store = QueueStore(
        state=QueueState(
            now_serving=[QueueEntry(number=n) for n in serving],
            queue=[QueueEntry(number=n) for n in queued],
        )
    )
    return QueueService(queue_store, SettingsStore(settings=QueueSettings(**values)), clock=lambda: _NOW)


def _numbers(entries: list[QueueEntry]) -> list[str]:
    return [e.number for e in entries]


@pytest.mark.asyncio
async def test_add_team_appends_and_broadcasts() -> None:
    service = _service()
    broadcasts: list[dict[str, object]] = []

    async def listener() -> None:
        broadcasts.append(service.snapshot())

    service.queue_store.add_listener(listener)

    entry = await service.add_team(" 502A ")

    assert entry.number == "502A"
    assert _numbers(service.queue_store.get_state().queue) == ["502A"]
    assert broadcasts[-1]["queue"] == [{"number": "502A", "at": None, "field": None}]
    assert "queueSettings" in broadcasts[-1]


@pytest.mark.asyncio
async def test_add_team_rejects_duplicates_in_either_list() -> None:
    service = _service(serving=("1A",), queued=("2B",))

    with pytest.raises(TeamAlreadyQueuedError):
        await service.add_team("1A")
    with pytest.raises(TeamAlreadyQueuedError):
        await service.add_team("2B")


@pytest.mark.asyncio
async def test_add_team_requires_team_number() -> None:
    with pytest.raises(InvalidRequestError):
        await _service().add_team("  ")


@pytest.mark.asyncio
async def test_add_filling_last_slot_closes_queue_permanently() -> None:
    # 30 minutes, 10 minute turnover, 1 field -> 3 slots.
    service = _service()

    for team in ("1A", "2B", "3C"):
        await service.add_team(team)

    assert service.settings_store.get_settings().skills_queue_closed is True
    with pytest.raises(QueueClosedError):
        await service.add_team("4D")

    # Freeing a slot does not reopen registration.
    await service.remove_team("1A")
    assert service.queue_status().reason == CapacityReason.PERMANENTLY_CLOSED


@pytest.mark.asyncio
async def test_add_after_cutoff_writes_closed_flag() -> None:
    service = _service(skills_cutoff_time="2/6 11:00 AM")

    with pytest.raises(QueueClosedError):
        await service.add_team("1A")

    assert service.settings_store.get_settings().skills_queue_closed is True
    assert service.queue_store.get_state().queue == []


@pytest.mark.asyncio
async def test_manual_open_admits_past_capacity() -> None:
    service = _service(queued=("1A", "2B", "3C"), skills_queue_manually_open=True)

    await service.add_team("4D")

    assert len(service.queue_store.get_state().queue) == 4
    assert service.settings_store.get_settings().skills_queue_closed is False


@pytest.mark.asyncio
async def test_serve_next_moves_head_to_field() -> None:
    service = _service(queued=("1A", "2B"))

    served = await service.serve_next(3)

    state = service.queue_store.get_state()
    assert served.number == "1A"
    assert served.field == 3
    assert served.at == _NOW
    assert _numbers(state.now_serving) == ["1A"]
    assert _numbers(state.queue) == ["2B"]


@pytest.mark.asyncio
async def test_serve_next_on_empty_queue() -> None:
    with pytest.raises(QueueEmptyError):
        await _service(serving=("1A",)).serve_next()


@pytest.mark.asyncio
async def test_unserve_reinserts_at_position() -> None:
    service = _service(serving=("1A", "9Z"), queued=("2B", "3C", "4D"))

    await service.unserve("9Z", 2)

    state = service.queue_store.get_state()
    assert _numbers(state.now_serving) == ["1A"]
    assert _numbers(state.queue) == ["2B", "9Z", "3C", "4D"]


@pytest.mark.asyncio
async def test_unserve_defaults_to_front() -> None:
    service = _service(serving=("1A",), queued=("2B",))

    await service.unserve("1A")

    assert _numbers(service.queue_store.get_state().queue) == ["1A", "2B"]


@pytest.mark.asyncio
async def test_unserve_errors() -> None:
    with pytest.raises(QueueEmptyError):
        await _service(queued=("1A",)).unserve("1A")
    with pytest.raises(TeamNotServedError):
        await _service(serving=("1A",)).unserve("2B")


@pytest.mark.asyncio
async def test_remove_team_from_both_lists_and_absent_is_fine() -> None:
    service = _service(serving=("1A",), queued=("2B", "3C"))

    await service.remove_team("2B")
    await service.remove_team("missing")

    state = service.queue_store.get_state()
    assert _numbers(state.now_serving) == ["1A"]
    assert _numbers(state.queue) == ["3C"]


@pytest.mark.asyncio
async def test_manual_open_update_clears_closed_flag() -> None:
    service = _service(skills_queue_closed=True)

    settings = await service.update_settings({"skillsQueueManuallyOpen": True})

    assert settings.skills_queue_manually_open is True
    assert settings.skills_queue_closed is False


@pytest.mark.asyncio
async def test_turning_manual_open_off_does_not_reopen() -> None:
    service = _service(skills_queue_closed=True, skills_queue_manually_open=True)

    settings = await service.update_settings({"skillsQueueManuallyOpen": False})

    assert settings.skills_queue_closed is True
    assert service.queue_status().reason == CapacityReason.PERMANENTLY_CLOSED


@pytest.mark.asyncio
@pytest.mark.parametrize("turnover", [0, 0.5, -3, "fast"])
async def test_settings_reject_bad_turnover(turnover: object) -> None:
    service = _service()

    with pytest.raises(SettingsValidationError):
        await service.update_settings({"skillsTurnoverTime": turnover})

    assert service.settings_store.get_settings().skills_turnover_time == 10


@pytest.mark.asyncio
async def test_settings_update_broadcasts() -> None:
    service = _service()
    calls: list[int] = []

    async def listener() -> None:
        calls.append(1)

    service.queue_store.add_listener(listener)
    await service.update_settings({"numberOfFields": 2})

    assert calls == [1]
    assert service.queue_status().total_capacity == 6


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", [0, -1, 2.5, "two", True])
async def test_settings_reject_bad_number_of_fields(fields: object) -> None:
    service = _service()

    with pytest.raises(SettingsValidationError):
        await service.update_settings({"numberOfFields": fields})

    assert service.settings_store.get_settings().number_of_fields == 1


@pytest.mark.asyncio
async def test_rejected_fields_update_does_not_close_queue() -> None:
    service = _service()

    with pytest.raises(SettingsValidationError):
        await service.update_settings({"number_of_fields": -1})
    await service.add_team("502A")

    assert service.settings_store.get_settings().skills_queue_closed is False
    assert service.queue_status().reason == CapacityReason.CAPACITY_AVAILABLE
