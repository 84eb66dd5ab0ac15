"""Ingest resource — accepts polled batches and push notifications."""

from __future__ import annotations

from typing import Any

from loguru import logger

from fleetwatch.engine.projection import ProjectionCache
from fleetwatch.services.refresh import RefreshHub
from fleetwatch.services.snapshot_service import InvalidRecordError, SnapshotService


class InvalidBatchError(Exception):
    """Raised when a posted batch holds no usable record."""


class IngestResource:
    """Stores command and event batches for a node.

    Built once at startup with all dependencies pre-wired.
    """

    def __init__(
        self,
        *,
        snapshot_service: SnapshotService,
        projections: ProjectionCache,
        refresh_hub: RefreshHub,
    ) -> None:
        self._service = snapshot_service
        self._projections = projections
        self._hub = refresh_hub

    async def commands(self, node_id: str, items: list[Any]) -> dict[str, int]:
        """Store wire command records.

        Raises:
            InvalidBatchError: If no record in the batch is usable.
        """
        try:
            return await self._service.ingest_commands(node_id, items)
        except InvalidRecordError as error:
            raise InvalidBatchError(str(error)) from error

    async def events(self, node_id: str, items: list[Any]) -> dict[str, int]:
        """Store wire audit events.

        Raises:
            InvalidBatchError: If no event in the batch is usable.
        """
        try:
            return await self._service.ingest_events(node_id, items)
        except InvalidRecordError as error:
            raise InvalidBatchError(str(error)) from error

    def notify(self, node_id: str, notification: dict[str, Any]) -> dict[str, str]:
        """Handle a push notification (log line or status change).

        Notifications are never applied as state; they drop the cached
        projection and wake the node's poller.
        """
        kind = str(notification.get("type", "refresh"))
        logger.debug("Node {}: {} notification", node_id, kind)
        self._projections.invalidate(node_id)
        self._hub.notify(node_id)
        return {"status": "accepted", "type": kind}
