"""Push-channel wakeups for node pollers."""

from __future__ import annotations

import asyncio


class RefreshHub:
    """One asyncio.Event per node, set by notifications and cleared by waiters.

    Notifications carry no data; they only shorten the wait before the next
    poll of that node.
    """

    def __init__(self) -> None:
        self._events: dict[str, asyncio.Event] = {}

    def _event(self, node_id: str) -> asyncio.Event:
        if node_id not in self._events:
            self._events[node_id] = asyncio.Event()
        return self._events[node_id]

    def notify(self, node_id: str) -> None:
        """Wake the poller of ``node_id``."""
        self._event(node_id).set()

    def pending(self, node_id: str) -> bool:
        """True if a notification arrived since the last wait."""
        return node_id in self._events and self._events[node_id].is_set()

    async def wait(self, node_id: str, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for a notification.

        Returns:
            True if woken by a notification, False on timeout.
        """
        event = self._event(node_id)
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        event.clear()
        return True
