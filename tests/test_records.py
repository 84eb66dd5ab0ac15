"""Tests for wire parsing of command records and audit events."""

from __future__ import annotations

from datetime import timedelta, timezone

import pytest

from fleetwatch.engine.records import AuditEvent, CommandRecord, CommandStatus

from tests.conftest import at


@pytest.mark.parametrize(
    ("wire", "expected"),
    [("Queued", CommandStatus.QUEUED), ("inprogress", CommandStatus.IN_PROGRESS),
     ("IN_PROGRESS", CommandStatus.IN_PROGRESS), ("In Progress", CommandStatus.IN_PROGRESS),
     ("success", CommandStatus.SUCCESS)],
)
def test_status_from_wire(wire: str, expected: CommandStatus) -> None:
    assert CommandStatus.from_wire(wire) is expected


def test_status_from_wire_unknown() -> None:
    with pytest.raises(ValueError):
        CommandStatus.from_wire("Cancelled")


def test_status_lifecycle() -> None:
    assert CommandStatus.SENT.is_pending
    assert not CommandStatus.FAILED.is_pending
    assert CommandStatus.QUEUED.rank < CommandStatus.IN_PROGRESS.rank < CommandStatus.SUCCESS.rank
    assert CommandStatus.SUCCESS.rank == CommandStatus.FAILED.rank


def test_command_from_wire_camel_case() -> None:
    record = CommandRecord.from_wire({
        "id": 42,
        "commandType": "docker.stats",
        "status": "Success",
        "createdAt": "2024-05-01T12:00:00Z",
        "payload": {"containerId": "abc"},
        "outputLog": "[]",
    })
    assert record.id == "42"
    assert record.created_at == at(0)
    assert record.payload == '{"containerId": "abc"}'
    assert record.output_log == "[]"


def test_command_from_wire_snake_case() -> None:
    record = CommandRecord.from_wire({
        "command_id": "c1", "command_type": "docker.list", "status": "sent",
        "created_at": "2024-05-01T12:00:00", "error_message": None,
    })
    assert record.status is CommandStatus.SENT
    assert record.created_at == at(0)


@pytest.mark.parametrize(
    "data",
    [{}, {"id": "c1", "commandType": "docker.list", "status": "Success"},
     {"id": "c1", "commandType": "docker.list", "status": "Success", "createdAt": "yesterday"},
     {"id": "c1", "commandType": "docker.list", "status": "Success", "createdAt": 1714564800}],
)
def test_command_from_wire_rejects(data: dict) -> None:
    with pytest.raises(ValueError):
        CommandRecord.from_wire(data)


def test_event_from_wire() -> None:
    event = AuditEvent.from_wire({
        "id": "e1",
        "eventName": "operation.completed",
        "timestampUtc": "2024-05-01T12:00:00+00:00",
        "machineId": "m-1",
        "success": "yes",
        "dataJson": {"agentVersion": "1.0"},
    })
    assert event.machine_id == "m-1"
    assert event.success is None
    assert event.data_json == '{"agentVersion": "1.0"}'


def test_event_from_wire_requires_timestamp() -> None:
    with pytest.raises(ValueError):
        AuditEvent.from_wire({"id": "e1", "eventName": "x"})


def test_command_from_wire_converts_offsets_to_utc() -> None:
    record = CommandRecord.from_wire({
        "id": "c1", "commandType": "docker.list", "status": "Success",
        "createdAt": "2024-05-01T14:00:00+02:00",
    })
    assert record.created_at == at(0)
    assert record.created_at.utcoffset() == timedelta(0)


def test_event_from_wire_converts_negative_offset() -> None:
    event = AuditEvent.from_wire({
        "id": "e1", "eventName": "operation.start", "timestampUtc": "2024-05-01T07:30:00-04:30",
    })
    assert event.timestamp == at(0)
    assert event.timestamp.tzinfo is timezone.utc
