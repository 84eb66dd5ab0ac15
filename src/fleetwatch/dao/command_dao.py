"""Data access for ObservedCommand rows."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetwatch.engine.records import CommandRecord, CommandStatus
from fleetwatch.models.command import ObservedCommand

_active_conn: ContextVar[AsyncSession] = ContextVar("_command_dao_conn")


class CommandDAO:
    """Mirror of the remote command log, one row per command id.

    Use transaction() to wrap a group of operations in one unit of work.
    """

    def __init__(self, pool: async_sessionmaker[AsyncSession]) -> None:
        self._pool = pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Open a unit of work. All DAO calls inside share one connection."""
        async with self._pool() as connection:
            context_token = _active_conn.set(connection)
            try:
                yield
            finally:
                _active_conn.reset(context_token)

    def _conn(self) -> AsyncSession:
        """Return the current unit-of-work connection."""
        return _active_conn.get()

    async def upsert(
        self, node_id: str, records: Sequence[CommandRecord],
    ) -> tuple[int, int]:
        """Insert unseen commands and advance the status of known ones.

        A stored row only moves forward in its lifecycle. Type, payload and
        creation time are never rewritten; a conflicting value is logged
        and ignored.

        Returns:
            (inserted, updated) row counts.
        """
        if not records:
            return 0, 0
        ids = {record.id for record in records}
        result = await self._conn().execute(
            select(ObservedCommand).where(ObservedCommand.id.in_(ids))
        )
        existing = {row.id: row for row in result.scalars()}
        inserted = updated = 0
        for record in records:
            row = existing.get(record.id)
            if row is None:
                row = ObservedCommand(
                    id=record.id,
                    node_id=node_id,
                    command_type=record.command_type,
                    status=record.status.value,
                    created_at=record.created_at,
                    payload=record.payload,
                    output_log=record.output_log,
                    error=record.error,
                )
                self._conn().add(row)
                existing[record.id] = row
                inserted += 1
                continue
            if row.command_type != record.command_type or row.payload != record.payload:
                logger.warning(
                    "Command {} changed immutable fields; keeping the first sighting",
                    record.id,
                )
            if record.status.rank <= CommandStatus(row.status).rank:
                continue
            row.status = record.status.value
            row.output_log = record.output_log
            row.error = record.error
            row.observed_at = datetime.now(timezone.utc)
            updated += 1
        await self._conn().flush()
        return inserted, updated

    async def list_recent(self, node_id: str, limit: int) -> list[ObservedCommand]:
        """Return the newest ``limit`` commands of a node, newest first."""
        result = await self._conn().execute(
            select(ObservedCommand)
            .where(ObservedCommand.node_id == node_id)
            .order_by(ObservedCommand.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars())

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._conn().commit()
