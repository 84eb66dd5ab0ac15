"""Immutable log records the engine projects over.

``CommandRecord`` and ``AuditEvent`` are built once at the wire boundary
(``from_wire``) and never mutated afterwards. A ``Snapshot`` bundles the
records fetched by one poll for one node.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from fleetwatch.utils.time import Time


class CommandStatus(str, Enum):
    """Lifecycle of a remote command as reported by the command log."""

    QUEUED = "Queued"
    SENT = "Sent"
    IN_PROGRESS = "InProgress"
    SUCCESS = "Success"
    FAILED = "Failed"

    @property
    def is_pending(self) -> bool:
        """True while the remote side has not reported a terminal result."""
        return self in _PENDING

    @property
    def rank(self) -> int:
        """Position in the lifecycle; terminal states share the top rank."""
        return _RANK[self]

    @classmethod
    def from_wire(cls, value: str) -> CommandStatus:
        """Parse a status name ignoring case, spaces and underscores (``In Progress``).

        Raises:
            ValueError: If the name matches no status.
        """
        normalized = "".join(value.split()).replace("_", "").lower()
        for status in cls:
            if status.value.lower() == normalized:
                return status
        raise ValueError(f"Unknown command status: {value!r}")


_PENDING = frozenset({CommandStatus.QUEUED, CommandStatus.SENT, CommandStatus.IN_PROGRESS})
_RANK = {
    CommandStatus.QUEUED: 0,
    CommandStatus.SENT: 1,
    CommandStatus.IN_PROGRESS: 2,
    CommandStatus.SUCCESS: 3,
    CommandStatus.FAILED: 3,
}


class CommandTypes:
    """Command type tags understood by the projections."""

    DOCKER_LIST = "docker.list"
    DOCKER_START = "docker.start"
    DOCKER_STOP = "docker.stop"
    DOCKER_RESTART = "docker.restart"
    DOCKER_REMOVE = "docker.remove"
    DOCKER_STATS = "docker.stats"
    DOCKER_LOGS = "docker.logs"
    DOCKER_INSPECT = "docker.inspect"
    DOCKER_EXEC = "docker.exec"
    COMPOSE_LIST = "compose.list"
    COMPOSE_UP = "compose.up"
    COMPOSE_DOWN = "compose.down"

    CONTAINER_ACTIONS = frozenset({DOCKER_START, DOCKER_STOP, DOCKER_RESTART, DOCKER_REMOVE})
    COMPOSE_ACTIONS = frozenset({COMPOSE_UP, COMPOSE_DOWN})
    NAMESPACES = ("docker.", "compose.")


def _pick(data: dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-None value among ``keys``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str | None:
    """Coerce an optional scalar to str, keeping None."""
    return None if value is None else str(value)


def _opaque(value: Any) -> str | None:
    """Keep strings as-is; re-encode structured values into an opaque string."""
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value)


@dataclass(frozen=True)
class CommandRecord:
    """One entry of the polled command log."""

    id: str
    command_type: str
    status: CommandStatus
    created_at: datetime
    payload: str | None = None
    output_log: str | None = None
    error: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> CommandRecord:
        """Build a record from a REST command dict (camelCase or snake_case).

        Raises:
            ValueError: If id, type, status or timestamp are missing or invalid.
        """
        record_id = _pick(data, "id", "commandId", "command_id")
        command_type = _pick(data, "commandType", "command_type", "type")
        status = _pick(data, "status")
        created_at = _pick(data, "createdAt", "created_at")
        if record_id is None or not command_type or status is None or created_at is None:
            raise ValueError("Command record requires id, commandType, status and createdAt")
        return cls(
            id=str(record_id),
            command_type=str(command_type),
            status=CommandStatus.from_wire(str(status)),
            created_at=Time.parse(created_at),
            payload=_opaque(data.get("payload")),
            output_log=_opaque(_pick(data, "outputLog", "output_log")),
            error=_text(_pick(data, "error", "errorMessage")),
        )


@dataclass(frozen=True)
class AuditEvent:
    """One entry of the durable audit event stream."""

    id: str
    event_name: str
    timestamp: datetime
    machine_id: str | None = None
    actor_name: str | None = None
    success: bool | None = None
    error: str | None = None
    data_json: str | None = None
    category: str | None = None
    node_id: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> AuditEvent:
        """Build an event from a REST audit-event dict.

        Raises:
            ValueError: If id, eventName or timestampUtc are missing or invalid.
        """
        event_id = _pick(data, "id")
        event_name = _pick(data, "eventName", "event_name")
        timestamp = _pick(data, "timestampUtc", "timestamp_utc", "timestamp")
        if event_id is None or not event_name or timestamp is None:
            raise ValueError("Audit event requires id, eventName and timestampUtc")
        success = data.get("success")
        return cls(
            id=str(event_id),
            event_name=str(event_name),
            timestamp=Time.parse(timestamp),
            machine_id=_text(_pick(data, "machineId", "machine_id")),
            actor_name=_text(_pick(data, "actorName", "actor_name")),
            success=success if isinstance(success, bool) else None,
            error=_text(_pick(data, "error")),
            data_json=_opaque(_pick(data, "dataJson", "data_json")),
            category=_pick(data, "category"),
            node_id=_pick(data, "nodeId", "node_id"),
        )


@dataclass(frozen=True)
class Snapshot:
    """Immutable window of commands and events for one node."""

    node_id: str
    commands: tuple[CommandRecord, ...] = field(default_factory=tuple)
    events: tuple[AuditEvent, ...] = field(default_factory=tuple)
