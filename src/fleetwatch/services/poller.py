"""Polling loop that keeps a node's snapshot store current."""

from __future__ import annotations

import asyncio

from loguru import logger

from fleetwatch.plugins.contracts.command_source import CommandSource
from fleetwatch.plugins.contracts.event_source import EventSource
from fleetwatch.services.refresh import RefreshHub
from fleetwatch.services.snapshot_service import InvalidRecordError, SnapshotService


class NodePoller:
    """Fetches the command log and event stream of a node and ingests them.

    Commands are polled every ``command_interval`` seconds; events only when
    ``event_interval`` has elapsed since their last fetch. A notification on
    the ``RefreshHub`` cuts the current wait short and forces both fetches.
    Source errors are logged and never stop the loop.
    """

    def __init__(
        self,
        command_source: CommandSource,
        event_source: EventSource,
        snapshot_service: SnapshotService,
        *,
        refresh_hub: RefreshHub | None = None,
        command_window: int = 80,
        event_window: int = 200,
        event_category: str | None = "agents",
        command_interval: float = 5.0,
        event_interval: float = 30.0,
    ) -> None:
        self._commands = command_source
        self._events = event_source
        self._service = snapshot_service
        self._hub = refresh_hub
        self._command_window = command_window
        self._event_window = event_window
        self._event_category = event_category
        self._command_interval = command_interval
        self._event_interval = event_interval

    async def poll_once(self, node_id: str, *, include_events: bool = True) -> bool:
        """Fetch and ingest one round for a node.

        Returns:
            True if every fetch and ingest succeeded.
        """
        ok = True
        try:
            items = await self._commands.list_commands(node_id, self._command_window)
            await self._service.ingest_commands(node_id, items)
        except InvalidRecordError as error:
            logger.warning("Node {}: command batch rejected: {}", node_id, error)
            ok = False
        except Exception:
            logger.exception("Node {}: command poll failed", node_id)
            ok = False
        if not include_events:
            return ok
        try:
            items = await self._events.list_events(
                node_id, self._event_category, self._event_window,
            )
            await self._service.ingest_events(node_id, items)
        except InvalidRecordError as error:
            logger.warning("Node {}: event batch rejected: {}", node_id, error)
            ok = False
        except Exception:
            logger.exception("Node {}: event poll failed", node_id)
            ok = False
        return ok

    async def run(self, node_id: str, stop: asyncio.Event) -> None:
        """Poll ``node_id`` until ``stop`` is set."""
        loop = asyncio.get_running_loop()
        last_events: float | None = None
        logger.info("Polling node {} every {}s", node_id, self._command_interval)
        while not stop.is_set():
            now = loop.time()
            include_events = last_events is None or now - last_events >= self._event_interval
            await self.poll_once(node_id, include_events=include_events)
            if include_events:
                last_events = now
            if await self._wait(node_id, stop):
                last_events = None
        logger.info("Stopped polling node {}", node_id)

    async def _wait(self, node_id: str, stop: asyncio.Event) -> bool:
        """Sleep one interval. Returns True when woken by a notification."""
        if self._hub is None:
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._command_interval)
            except asyncio.TimeoutError:
                pass
            return False
        hub_wait = asyncio.ensure_future(self._hub.wait(node_id, self._command_interval))
        stop_wait = asyncio.ensure_future(stop.wait())
        done, pending = await asyncio.wait(
            {hub_wait, stop_wait}, return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
        return hub_wait in done and hub_wait.result()
