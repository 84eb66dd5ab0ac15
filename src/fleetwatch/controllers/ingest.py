"""Ingest controller — thin HTTP adapter for IngestResource."""

from __future__ import annotations

from typing import Any

from litestar import Controller, post
from litestar.exceptions import HTTPException

from fleetwatch.resources.ingest import IngestResource, InvalidBatchError


class IngestController(Controller):
    """Accepts polled batches and push notifications for a node."""

    path = "/api/nodes/{node_id:str}/ingest"

    @post("/commands", status_code=202)
    async def post_commands(
        self, node_id: str, data: list[Any], ingest_resource: IngestResource,
    ) -> dict[str, int]:
        """Body: list of wire command records."""
        try:
            return await ingest_resource.commands(node_id, data)
        except InvalidBatchError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error

    @post("/events", status_code=202)
    async def post_events(
        self, node_id: str, data: list[Any], ingest_resource: IngestResource,
    ) -> dict[str, int]:
        """Body: list of wire audit events."""
        try:
            return await ingest_resource.events(node_id, data)
        except InvalidBatchError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error

    @post("/notifications", status_code=202)
    async def post_notification(
        self, node_id: str, data: dict[str, Any], ingest_resource: IngestResource,
    ) -> dict[str, str]:
        """Body: {"type": "log" | "status", ...}. Only triggers a refresh."""
        return ingest_resource.notify(node_id, data)
