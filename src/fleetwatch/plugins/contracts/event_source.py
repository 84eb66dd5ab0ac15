"""Abstract source of the durable audit event stream."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class EventSource(ABC):
    """Transport to the audit events recorded for managed nodes."""

    @abstractmethod
    async def list_events(
        self, node_id: str, category: str | None, limit: int,
    ) -> list[dict[str, Any]]:
        """Return up to ``limit`` of the newest wire audit events of a node."""
