"""Dashboard resource — protocol-agnostic read access to node projections."""

from __future__ import annotations

from typing import Any

from fleetwatch.engine.projection import ProjectionCache, ViewProjection
from fleetwatch.resources.views import ViewSerializer
from fleetwatch.services.snapshot_service import SnapshotService


class DashboardResource:
    """Serves projection views of the latest stored snapshot of a node.

    Built once at startup with all dependencies pre-wired. The projection
    of a node is rebuilt only when its snapshot changes.
    """

    def __init__(
        self, *, snapshot_service: SnapshotService, projections: ProjectionCache,
    ) -> None:
        self._service = snapshot_service
        self._projections = projections

    async def _projection(self, node_id: str) -> ViewProjection:
        snapshot = await self._service.load_snapshot(node_id)
        return self._projections.get(snapshot)

    async def containers(self, node_id: str) -> dict[str, Any]:
        """Container inventory with per-container action status."""
        projection = await self._projection(node_id)
        return ViewSerializer.containers(projection.containers())

    async def stacks(self, node_id: str) -> dict[str, Any]:
        """Compose stacks and the last compose action."""
        projection = await self._projection(node_id)
        return ViewSerializer.stacks(projection.stacks(), projection.compose_action())

    async def stats(self, node_id: str, container_id: str) -> dict[str, Any]:
        projection = await self._projection(node_id)
        return ViewSerializer.stats(projection.stats(container_id))

    async def logs(
        self, node_id: str, container_id: str, *, follow: bool = False,
    ) -> dict[str, Any]:
        projection = await self._projection(node_id)
        return ViewSerializer.logs(projection.logs(container_id, follow))

    async def exec_result(self, node_id: str, container_id: str) -> dict[str, Any]:
        projection = await self._projection(node_id)
        return ViewSerializer.exec_result(projection.exec_result(container_id))

    async def inspect(self, node_id: str, container_id: str) -> dict[str, Any]:
        projection = await self._projection(node_id)
        return ViewSerializer.inspect(projection.inspect(container_id))

    async def action(self, node_id: str, container_id: str) -> dict[str, Any]:
        """Pending/finished state of the latest action on one container."""
        projection = await self._projection(node_id)
        return ViewSerializer.action(projection.action_status(container_id))

    async def attempts(self, node_id: str) -> list[dict[str, Any]]:
        """Newest-first operation attempts."""
        projection = await self._projection(node_id)
        return [ViewSerializer.attempt(a) for a in projection.attempts()]

    async def recent_commands(
        self, node_id: str, limit: int | None = None,
    ) -> list[dict[str, Any] | None]:
        projection = await self._projection(node_id)
        return [ViewSerializer.command(r) for r in projection.recent_commands(limit)]
