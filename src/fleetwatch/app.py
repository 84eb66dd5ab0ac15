"""Litestar application factory and CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from litestar import Litestar
from litestar.datastructures import State
from litestar.di import Provide

from fleetwatch.config import ConfigLoader, Settings
from fleetwatch.controllers.dashboard import DashboardController
from fleetwatch.controllers.health import HealthController
from fleetwatch.controllers.ingest import IngestController
from fleetwatch.dao.command_dao import CommandDAO
from fleetwatch.dao.event_dao import EventDAO
from fleetwatch.engine.projection import ProjectionCache, ProjectionOptions, ViewProjection
from fleetwatch.engine.records import AuditEvent, CommandRecord, Snapshot
from fleetwatch.plugins.contracts.command_source import CommandSource
from fleetwatch.plugins.contracts.event_source import EventSource
from fleetwatch.resources.dashboard import DashboardResource
from fleetwatch.resources.health import HealthResource
from fleetwatch.resources.ingest import IngestResource
from fleetwatch.resources.views import ViewSerializer
from fleetwatch.services.poller import NodePoller
from fleetwatch.services.refresh import RefreshHub
from fleetwatch.services.snapshot_service import SnapshotService
from fleetwatch.utils.db import Database
from fleetwatch.utils.log import Logging


class AppFactory:
    """Builds and configures the Litestar application. All methods are static."""

    @staticmethod
    def projection_options(settings: Settings) -> ProjectionOptions:
        """Projection tuning taken from settings."""
        return ProjectionOptions(
            correlation_key=settings.correlation_key,
            stats_history_points=settings.stats_history_points,
            log_follow_chunks=settings.log_follow_chunks,
            recent_commands_limit=settings.recent_commands_limit,
            attempt_start_event=settings.attempt_start_event,
            attempt_completed_event=settings.attempt_completed_event,
            attempt_limit=settings.attempt_limit,
            attempt_matcher=settings.attempt_matcher,
        )

    @staticmethod
    def _build(
        settings: Settings,
        command_source: CommandSource | None = None,
        event_source: EventSource | None = None,
    ) -> State:
        """Construct the full object graph once.

        database → command_dao ─┬→ snapshot_service ─┬→ DashboardResource
                   event_dao ───┘                    └→ IngestResource ← refresh_hub
        projections (shared cache) → both resources
        sources + snapshot_service + refresh_hub → NodePoller (optional)
        """
        database = Database(settings.database_url)
        snapshot_service = SnapshotService(
            CommandDAO(database.pool),
            EventDAO(database.pool),
            command_window=settings.command_window,
            event_window=settings.event_window,
            event_category=settings.event_category or None,
        )
        projections = ProjectionCache(AppFactory.projection_options(settings))
        refresh_hub = RefreshHub()
        poller: NodePoller | None = None
        if command_source is not None and event_source is not None:
            poller = NodePoller(
                command_source,
                event_source,
                snapshot_service,
                refresh_hub=refresh_hub,
                command_window=settings.command_window,
                event_window=settings.event_window,
                event_category=settings.event_category or None,
                command_interval=settings.command_poll_interval,
                event_interval=settings.event_poll_interval,
            )
        return State({
            "database": database,
            "poller": poller,
            "poll_nodes": list(settings.poll_nodes),
            "health": HealthResource(database),
            "dashboard": DashboardResource(
                snapshot_service=snapshot_service, projections=projections,
            ),
            "ingest": IngestResource(
                snapshot_service=snapshot_service,
                projections=projections,
                refresh_hub=refresh_hub,
            ),
        })

    @staticmethod
    @asynccontextmanager
    async def _lifespan(app: Litestar) -> AsyncIterator[None]:
        """Create tables and start pollers on startup; stop and dispose on shutdown."""
        database: Database = app.state.database
        await database.create_tables()
        poller: NodePoller | None = app.state.poller
        stop = asyncio.Event()
        tasks = []
        if poller is not None:
            tasks = [
                asyncio.create_task(poller.run(node_id, stop))
                for node_id in app.state.poll_nodes
            ]
        try:
            yield
        finally:
            stop.set()
            await asyncio.gather(*tasks)
            await database.close()

    @staticmethod
    def provide_health(state: State) -> HealthResource:
        """Provide the pre-built HealthResource from app state."""
        health_resource: HealthResource = state.health
        return health_resource

    @staticmethod
    def provide_dashboard(state: State) -> DashboardResource:
        """Provide the pre-built DashboardResource from app state."""
        dashboard_resource: DashboardResource = state.dashboard
        return dashboard_resource

    @staticmethod
    def provide_ingest(state: State) -> IngestResource:
        """Provide the pre-built IngestResource from app state."""
        ingest_resource: IngestResource = state.ingest
        return ingest_resource

    @staticmethod
    def create_app(
        settings: Settings | None = None,
        command_source: CommandSource | None = None,
        event_source: EventSource | None = None,
    ) -> Litestar:
        """Create and configure the Litestar application."""
        if settings is None:
            settings = ConfigLoader.load_settings()
        Logging.configure(settings.log_level)
        return Litestar(
            route_handlers=[HealthController, DashboardController, IngestController],
            state=AppFactory._build(settings, command_source, event_source),
            lifespan=[AppFactory._lifespan],
            dependencies={
                "health_resource": Provide(AppFactory.provide_health, sync_to_thread=False),
                "dashboard_resource": Provide(AppFactory.provide_dashboard, sync_to_thread=False),
                "ingest_resource": Provide(AppFactory.provide_ingest, sync_to_thread=False),
            },
        )


# Public alias so conftest / uvicorn can call create_app() without knowing AppFactory.
create_app = AppFactory.create_app


class CLI:
    """Command-line interface for fleetwatch."""

    @staticmethod
    def _build_parser() -> argparse.ArgumentParser:
        """Build the CLI argument parser."""
        parser = argparse.ArgumentParser(
            prog="fleetwatch", description="Fleet dashboard backend",
        )
        subparsers = parser.add_subparsers(dest="command")

        run_parser = subparsers.add_parser("run", help="Start the server")
        run_parser.add_argument("--host", default="0.0.0.0")
        run_parser.add_argument("--port", type=int, default=8000)
        run_parser.add_argument("--reload", action="store_true", help="Auto-reload on file changes")

        project_parser = subparsers.add_parser(
            "project", help="Print the views of a snapshot file as JSON",
        )
        project_parser.add_argument(
            "snapshot",
            help='JSON file: {"commands": [...], "events": [...]} or a list of commands',
        )
        project_parser.add_argument("--node", default="local", help="Node id to report")
        project_parser.add_argument("--target", help="Container id for per-container views")
        project_parser.add_argument("--follow", action="store_true", help="Follow-mode logs")

        return parser

    @staticmethod
    def load_snapshot(path: Path, node_id: str) -> Snapshot:
        """Read a snapshot file, skipping malformed entries.

        Raises:
            InvalidRecordError: If a non-empty list holds no usable entry.
            ValueError: If the file is not a list or an object.
        """
        data = json.loads(path.read_text())
        if isinstance(data, list):
            data = {"commands": data}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object or list")
        commands = SnapshotService.parse_batch(
            data.get("commands") or [], CommandRecord.from_wire, "command",
        )
        events = SnapshotService.parse_batch(
            data.get("events") or [], AuditEvent.from_wire, "event",
        )
        return Snapshot(node_id=node_id, commands=tuple(commands), events=tuple(events))

    @staticmethod
    def project(
        snapshot: Snapshot, options: ProjectionOptions,
        target: str | None = None, follow: bool = False,
    ) -> dict[str, Any]:
        """All views of ``snapshot``; per-container views only with a target."""
        projection = ViewProjection(snapshot, options)
        views: dict[str, Any] = {
            "node": snapshot.node_id,
            "containers": ViewSerializer.containers(projection.containers()),
            "stacks": ViewSerializer.stacks(projection.stacks(), projection.compose_action()),
            "attempts": [ViewSerializer.attempt(a) for a in projection.attempts()],
            "recentCommands": [
                ViewSerializer.command(record) for record in projection.recent_commands()
            ],
        }
        if target:
            views["target"] = {
                "id": target,
                "action": ViewSerializer.action(projection.action_status(target)),
                "stats": ViewSerializer.stats(projection.stats(target)),
                "logs": ViewSerializer.logs(projection.logs(target, follow)),
                "exec": ViewSerializer.exec_result(projection.exec_result(target)),
                "inspect": ViewSerializer.inspect(projection.inspect(target)),
            }
        return views

    @staticmethod
    def main(argv: list[str] | None = None) -> None:
        """CLI entry point. Catches all exceptions and exits cleanly."""
        parser = CLI._build_parser()
        args = parser.parse_args(argv)

        if args.command is None:
            parser.print_help()
            sys.exit(1)

        try:
            if args.command == "run":
                import uvicorn

                uvicorn.run(
                    "fleetwatch.app:create_app",
                    factory=True,
                    host=args.host,
                    port=args.port,
                    reload=args.reload,
                )
            elif args.command == "project":
                settings = ConfigLoader.load_settings()
                Logging.configure(settings.log_level)
                snapshot = CLI.load_snapshot(Path(args.snapshot), args.node)
                views = CLI.project(
                    snapshot,
                    AppFactory.projection_options(settings),
                    target=args.target,
                    follow=args.follow,
                )
                print(json.dumps(views, indent=2, default=str))
        except KeyboardInterrupt:
            pass
        except Exception as error:
            print(f"Error: {error}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    CLI.main()
