"""Data access for ObservedEvent rows."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetwatch.engine.records import AuditEvent
from fleetwatch.models.event import ObservedEvent

_active_conn: ContextVar[AsyncSession] = ContextVar("_event_dao_conn")


class EventDAO:
    """Append-only mirror of the audit event stream.

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

    async def insert_missing(self, node_id: str, events: Sequence[AuditEvent]) -> int:
        """Insert events whose id is not stored yet. Returns the insert count."""
        if not events:
            return 0
        ids = {event.id for event in events}
        result = await self._conn().execute(
            select(ObservedEvent.id).where(ObservedEvent.id.in_(ids))
        )
        seen = set(result.scalars())
        inserted = 0
        for event in events:
            if event.id in seen:
                continue
            seen.add(event.id)
            self._conn().add(ObservedEvent(
                id=event.id,
                node_id=node_id,
                category=event.category,
                event_name=event.event_name,
                timestamp_utc=event.timestamp,
                machine_id=event.machine_id,
                actor_name=event.actor_name,
                success=event.success,
                error=event.error,
                data_json=event.data_json,
            ))
            inserted += 1
        await self._conn().flush()
        return inserted

    async def list_recent(
        self, node_id: str, category: str | None, limit: int,
    ) -> list[ObservedEvent]:
        """Newest ``limit`` events of a node, newest first.

        ``category`` of None returns events of every category.
        """
        query = select(ObservedEvent).where(ObservedEvent.node_id == node_id)
        if category is not None:
            query = query.where(ObservedEvent.category == category)
        result = await self._conn().execute(
            query.order_by(ObservedEvent.timestamp_utc.desc()).limit(limit)
        )
        return list(result.scalars())

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._conn().commit()
