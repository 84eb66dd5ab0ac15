"""Shared fixtures and record builders for fleetwatch tests."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from fleetwatch.app import create_app
from fleetwatch.config import Settings
from fleetwatch.dao.command_dao import CommandDAO
from fleetwatch.dao.event_dao import EventDAO
from fleetwatch.engine.records import AuditEvent, CommandRecord, CommandStatus, Snapshot
from fleetwatch.services.snapshot_service import SnapshotService
from fleetwatch.utils.db import Database

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def at(minute: float) -> datetime:
    """Timestamp ``minute`` minutes after T0."""
    return T0 + timedelta(minutes=minute)


def _encode(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


def make_command(
    record_id: str,
    command_type: str,
    *,
    minute: float = 0,
    status: str = "Success",
    target: str | None = None,
    payload: Any = None,
    output: Any = None,
    error: str | None = None,
) -> CommandRecord:
    """CommandRecord builder; ``target`` becomes a containerId payload."""
    if target is not None:
        payload = {"containerId": target}
    return CommandRecord(
        id=record_id,
        command_type=command_type,
        status=CommandStatus.from_wire(status),
        created_at=at(minute),
        payload=_encode(payload),
        output_log=_encode(output),
        error=error,
    )


def wire_command(
    record_id: str,
    command_type: str,
    *,
    minute: float = 0,
    status: str = "Success",
    target: str | None = None,
    output: Any = None,
    error: str | None = None,
) -> dict[str, Any]:
    """Wire (camelCase) command dict as a command log API returns it."""
    data: dict[str, Any] = {
        "id": record_id,
        "commandType": command_type,
        "status": status,
        "createdAt": at(minute).isoformat().replace("+00:00", "Z"),
    }
    if target is not None:
        data["payload"] = json.dumps({"containerId": target})
    if output is not None:
        data["outputLog"] = _encode(output)
    if error is not None:
        data["error"] = error
    return data


def make_event(
    event_id: str,
    event_name: str,
    *,
    minute: float = 0,
    machine: str | None = None,
    success: bool | None = None,
    actor: str | None = None,
    data: dict[str, Any] | None = None,
    error: str | None = None,
) -> AuditEvent:
    return AuditEvent(
        id=event_id,
        event_name=event_name,
        timestamp=at(minute),
        machine_id=machine,
        actor_name=actor,
        success=success,
        error=error,
        data_json=_encode(data),
        category="agents",
    )


def wire_event(
    event_id: str,
    event_name: str,
    *,
    minute: float = 0,
    machine: str | None = None,
    success: bool | None = None,
    category: str = "agents",
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": event_id,
        "eventName": event_name,
        "timestampUtc": at(minute).isoformat(),
        "category": category,
    }
    if machine is not None:
        data["machineId"] = machine
    if success is not None:
        data["success"] = success
    return data


def make_snapshot(
    commands: Iterable[CommandRecord] = (),
    events: Iterable[AuditEvent] = (),
    node_id: str = "node-1",
) -> Snapshot:
    return Snapshot(node_id=node_id, commands=tuple(commands), events=tuple(events))


@pytest.fixture()
def settings() -> Settings:
    """Test settings with in-memory SQLite."""
    return Settings(database_url="sqlite+aiosqlite://", log_level="DEBUG")


@pytest.fixture()
async def database() -> AsyncIterator[Database]:
    """Fresh in-memory database with tables created."""
    db = Database("sqlite+aiosqlite://")
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture()
def snapshot_service(database: Database) -> SnapshotService:
    return SnapshotService(
        CommandDAO(database.pool),
        EventDAO(database.pool),
        command_window=80,
        event_window=200,
        event_category="agents",
    )


@pytest.fixture()
async def client(settings: Settings) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client wired to the test app with its database ready."""
    app = create_app(settings)

    @asynccontextmanager
    async def _lifespan() -> AsyncIterator[None]:
        database: Database = app.state.database
        await database.create_tables()
        yield
        await database.close()

    async with _lifespan(), httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
