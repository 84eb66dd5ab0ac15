"""Health check controller — thin HTTP adapter."""

from __future__ import annotations

from litestar import Controller, get

from fleetwatch.resources.health import HealthResource


class HealthController(Controller):
    """Liveness check for load balancers and the dashboard shell."""

    path = "/api"

    @get("/health")
    async def health(self, health_resource: HealthResource) -> dict[str, str]:
        """Return service and snapshot store status."""
        return await health_resource.check()
