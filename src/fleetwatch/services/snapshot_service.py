"""Ingest wire records into the store and load immutable snapshots."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from loguru import logger

from fleetwatch.dao.command_dao import CommandDAO
from fleetwatch.dao.event_dao import EventDAO
from fleetwatch.engine.records import AuditEvent, CommandRecord, CommandStatus, Snapshot
from fleetwatch.models.command import ObservedCommand
from fleetwatch.models.event import ObservedEvent
from fleetwatch.utils.time import Time

T = TypeVar("T")


class InvalidRecordError(Exception):
    """Raised when a wire batch contains no usable record."""


class SnapshotService:
    """Built once at startup with both DAOs pre-wired.

    Each method wraps its DAO calls in a transaction, one unit of work per
    service call.
    """

    def __init__(
        self,
        command_dao: CommandDAO,
        event_dao: EventDAO,
        *,
        command_window: int = 80,
        event_window: int = 200,
        event_category: str | None = "agents",
    ) -> None:
        self._commands = command_dao
        self._events = event_dao
        self._command_window = command_window
        self._event_window = event_window
        self._event_category = event_category

    @staticmethod
    def parse_batch(
        items: Iterable[Any], parse: Callable[[dict[str, Any]], T], kind: str,
    ) -> list[T]:
        """Parse wire dicts, skipping malformed entries.

        Raises:
            InvalidRecordError: If the batch is non-empty and nothing parsed.
        """
        parsed: list[T] = []
        skipped = 0
        for item in items:
            if not isinstance(item, dict):
                skipped += 1
                logger.warning("Skipping {} entry that is not an object", kind)
                continue
            try:
                parsed.append(parse(item))
            except ValueError as error:
                skipped += 1
                logger.warning("Skipping malformed {}: {}", kind, error)
        if skipped and not parsed:
            raise InvalidRecordError(f"No valid {kind} in batch of {skipped}")
        return parsed

    async def ingest_commands(
        self, node_id: str, items: Iterable[Any],
    ) -> dict[str, int]:
        """Store a polled batch of wire command records for a node.

        Returns:
            Dict with received, inserted and updated counts.

        Raises:
            InvalidRecordError: If no entry in a non-empty batch is usable.
        """
        records = self.parse_batch(items, CommandRecord.from_wire, "command")
        async with self._commands.transaction():
            inserted, updated = await self._commands.upsert(node_id, records)
            await self._commands.commit()
        logger.debug(
            "Node {}: {} commands received, {} new, {} advanced",
            node_id, len(records), inserted, updated,
        )
        return {"received": len(records), "inserted": inserted, "updated": updated}

    async def ingest_events(
        self, node_id: str, items: Iterable[Any],
    ) -> dict[str, int]:
        """Store a polled batch of wire audit events for a node.

        Returns:
            Dict with received and inserted counts.

        Raises:
            InvalidRecordError: If no entry in a non-empty batch is usable.
        """
        events = self.parse_batch(items, AuditEvent.from_wire, "event")
        async with self._events.transaction():
            inserted = await self._events.insert_missing(node_id, events)
            await self._events.commit()
        logger.debug("Node {}: {} events received, {} new", node_id, len(events), inserted)
        return {"received": len(events), "inserted": inserted}

    async def load_snapshot(self, node_id: str) -> Snapshot:
        """Most recent command and event windows of a node."""
        async with self._commands.transaction():
            command_rows = await self._commands.list_recent(node_id, self._command_window)
        async with self._events.transaction():
            event_rows = await self._events.list_recent(
                node_id, self._event_category, self._event_window,
            )
        # Rows come newest first; snapshots hold records oldest first.
        return Snapshot(
            node_id=node_id,
            commands=tuple(self._to_record(row) for row in reversed(command_rows)),
            events=tuple(self._to_event(row) for row in reversed(event_rows)),
        )

    @staticmethod
    def _to_record(row: ObservedCommand) -> CommandRecord:
        return CommandRecord(
            id=row.id,
            command_type=row.command_type,
            status=CommandStatus(row.status),
            created_at=Time.ensure_utc(row.created_at),
            payload=row.payload,
            output_log=row.output_log,
            error=row.error,
        )

    @staticmethod
    def _to_event(row: ObservedEvent) -> AuditEvent:
        return AuditEvent(
            id=row.id,
            event_name=row.event_name,
            timestamp=Time.ensure_utc(row.timestamp_utc),
            machine_id=row.machine_id,
            actor_name=row.actor_name,
            success=row.success,
            error=row.error,
            data_json=row.data_json,
            category=row.category,
            node_id=row.node_id,
        )
