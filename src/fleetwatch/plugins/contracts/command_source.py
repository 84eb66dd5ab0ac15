"""Abstract source of a node's remote command log."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class CommandSource(ABC):
    """Transport to the command log of managed nodes."""

    @abstractmethod
    async def list_commands(self, node_id: str, limit: int) -> list[dict[str, Any]]:
        """Return up to ``limit`` of the newest wire command records of a node."""

    @abstractmethod
    async def submit_command(
        self, node_id: str, command_type: str, payload: dict[str, Any] | None,
    ) -> dict[str, Any]:
        """Queue a command for a node and return its wire record.

        The result arrives later through ``list_commands``.
        """
