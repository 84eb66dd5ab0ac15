"""Attempt records rebuilt from operation start/completed audit events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fleetwatch.engine.codec import PayloadCodec
from fleetwatch.engine.records import AuditEvent

# Attempt metadata field -> payload keys, most specific first.
_METADATA_KEYS: dict[str, tuple[str, ...]] = {
    "source": ("agentSource", "source"),
    "channel": ("agentChannel", "channel"),
    "version": ("agentVersion", "version"),
    "reported_version": ("reportedAgentVersion", "reportedVersion"),
}


@dataclass(frozen=True)
class AttemptMetadata:
    """Source, channel and version details of one attempt."""

    source: str | None = None
    channel: str | None = None
    version: str | None = None
    reported_version: str | None = None

    @classmethod
    def merge(cls, *payloads: dict[str, Any]) -> AttemptMetadata:
        """Take each field from the first payload that carries it."""
        values: dict[str, str | None] = {}
        for name, keys in _METADATA_KEYS.items():
            values[name] = None
            for payload in payloads:
                found = next(
                    (payload[key] for key in keys if isinstance(payload.get(key), str)),
                    None,
                )
                if found is not None:
                    values[name] = found
                    break
        return cls(**values)


@dataclass(frozen=True)
class Attempt:
    """One reconstructed start -> completion pairing.

    A standalone completion (its start fell outside the window) has
    ``started_at == completed_at``; an unmatched start has no completion.
    """

    id: str
    started_at: datetime
    completed_at: datetime | None = None
    success: bool | None = None
    target_id: str | None = None
    actor_name: str | None = None
    metadata: AttemptMetadata = field(default_factory=AttemptMetadata)
    error: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    @classmethod
    def from_events(cls, start: AuditEvent, completion: AuditEvent | None) -> Attempt:
        """Pair a start with its completion (or None while still running)."""
        start_data = PayloadCodec.load_object(start.data_json)
        if completion is None:
            return cls(
                id=start.id,
                started_at=start.timestamp,
                target_id=start.machine_id,
                actor_name=start.actor_name,
                metadata=AttemptMetadata.merge(start_data),
            )
        completion_data = PayloadCodec.load_object(completion.data_json)
        return cls(
            id=start.id,
            started_at=start.timestamp,
            completed_at=completion.timestamp,
            success=completion.success,
            target_id=start.machine_id or completion.machine_id,
            actor_name=start.actor_name or completion.actor_name,
            metadata=AttemptMetadata.merge(completion_data, start_data),
            error=completion.error,
        )

    @classmethod
    def standalone(cls, completion: AuditEvent) -> Attempt:
        """A completion whose start was never seen: started and finished at once."""
        return cls(
            id=completion.id,
            started_at=completion.timestamp,
            completed_at=completion.timestamp,
            success=completion.success,
            target_id=completion.machine_id,
            actor_name=completion.actor_name,
            metadata=AttemptMetadata.merge(PayloadCodec.load_object(completion.data_json)),
            error=completion.error,
        )
