"""Dashboard controller — thin HTTP adapter for DashboardResource."""

from __future__ import annotations

from typing import Any

from litestar import Controller, get
from litestar.exceptions import HTTPException

from fleetwatch.resources.dashboard import DashboardResource


class DashboardController(Controller):
    """Read-only projection views of one node."""

    path = "/api/nodes/{node_id:str}"

    @get("/containers")
    async def containers(
        self, node_id: str, dashboard_resource: DashboardResource,
    ) -> dict[str, Any]:
        """Latest container inventory with pending-action overlay."""
        return await dashboard_resource.containers(node_id)

    @get("/stacks")
    async def stacks(
        self, node_id: str, dashboard_resource: DashboardResource,
    ) -> dict[str, Any]:
        """Compose stacks and the last up/down."""
        return await dashboard_resource.stacks(node_id)

    @get("/attempts")
    async def attempts(
        self, node_id: str, dashboard_resource: DashboardResource,
    ) -> list[dict[str, Any]]:
        """Operation attempts, newest first."""
        return await dashboard_resource.attempts(node_id)

    @get("/commands")
    async def recent_commands(
        self,
        node_id: str,
        dashboard_resource: DashboardResource,
        limit: int | None = None,
    ) -> list[dict[str, Any] | None]:
        """Recent docker and compose commands, newest first."""
        if limit is not None and limit < 0:
            raise HTTPException(status_code=400, detail="limit must not be negative")
        return await dashboard_resource.recent_commands(node_id, limit)

    @get("/containers/{container_id:str}/stats")
    async def stats(
        self, node_id: str, container_id: str, dashboard_resource: DashboardResource,
    ) -> dict[str, Any]:
        """Current sample and bounded CPU/memory history."""
        return await dashboard_resource.stats(node_id, container_id)

    @get("/containers/{container_id:str}/logs")
    async def logs(
        self,
        node_id: str,
        container_id: str,
        dashboard_resource: DashboardResource,
        follow: bool = False,
    ) -> dict[str, Any]:
        """Latest log excerpt, or the last few chunks in follow mode."""
        return await dashboard_resource.logs(node_id, container_id, follow=follow)

    @get("/containers/{container_id:str}/exec")
    async def exec_result(
        self, node_id: str, container_id: str, dashboard_resource: DashboardResource,
    ) -> dict[str, Any]:
        return await dashboard_resource.exec_result(node_id, container_id)

    @get("/containers/{container_id:str}/inspect")
    async def inspect(
        self, node_id: str, container_id: str, dashboard_resource: DashboardResource,
    ) -> dict[str, Any]:
        return await dashboard_resource.inspect(node_id, container_id)

    @get("/containers/{container_id:str}/action")
    async def action(
        self, node_id: str, container_id: str, dashboard_resource: DashboardResource,
    ) -> dict[str, Any]:
        """State of the latest start/stop/restart/remove on the container."""
        return await dashboard_resource.action(node_id, container_id)
