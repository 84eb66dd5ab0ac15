"""Read-only views over one snapshot, memoized per snapshot.

``ViewProjection`` composes the index, status resolver, series builder,
log assembler and attempt correlator into the shapes the dashboard reads.
``ProjectionCache`` keeps the last projection per node and reuses it while
the snapshot is unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, TypeVar

from fleetwatch.engine import container_inspect
from fleetwatch.engine.attempts import Attempt
from fleetwatch.engine.correlator import AttemptCorrelator
from fleetwatch.engine.index import CommandLogIndex
from fleetwatch.engine.log_tail import LogTail, LogTailAssembler
from fleetwatch.engine.outputs import (
    ComposeStack,
    ContainerInfo,
    ExecResult,
    OutputDecoder,
    StatsSample,
)
from fleetwatch.engine.records import CommandRecord, CommandTypes, Snapshot
from fleetwatch.engine.series import MetricPoint, TimeSeriesReconstructor
from fleetwatch.engine.status import ActionStatus, ActionStatusResolver

T = TypeVar("T")


@dataclass(frozen=True)
class ProjectionOptions:
    """Tuning knobs, normally built from ``Settings``."""

    correlation_key: str = "containerId"
    stats_history_points: int = 30
    log_follow_chunks: int = 5
    recent_commands_limit: int = 8
    attempt_start_event: str = "operation.start"
    attempt_completed_event: str = "operation.completed"
    attempt_limit: int = 20
    attempt_matcher: str = "greedy"


@dataclass(frozen=True)
class ContainerView:
    container: ContainerInfo
    action: ActionStatus


@dataclass(frozen=True)
class ContainerListView:
    items: tuple[ContainerView, ...] = ()
    error: str | None = None
    source: CommandRecord | None = None

    @property
    def running(self) -> int:
        return sum(1 for item in self.items if item.container.state == "running")

    @property
    def exited(self) -> int:
        return sum(1 for item in self.items if item.container.state == "exited")


@dataclass(frozen=True)
class StackListView:
    stacks: tuple[ComposeStack, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class StatsView:
    current: StatsSample | None = None
    history: tuple[MetricPoint, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class ExecView:
    result: ExecResult | None = None
    error: str | None = None
    source: CommandRecord | None = None


@dataclass(frozen=True)
class InspectView:
    summary: container_inspect.InspectSummary | None = None
    details: container_inspect.InspectDetails | None = None
    raw: Any = None
    error: str | None = None


@dataclass
class ViewProjection:
    """All dashboard views derivable from one snapshot.

    Every view is computed on first access and then reused; the projection
    never changes after construction, so callers may share it freely.
    """

    snapshot: Snapshot
    options: ProjectionOptions = field(default_factory=ProjectionOptions)
    _memo: dict[tuple[Any, ...], Any] = field(default_factory=dict, init=False, repr=False)

    def _cached(self, key: tuple[Any, ...], build: Callable[[], T]) -> T:
        if key not in self._memo:
            self._memo[key] = build()
        result: T = self._memo[key]
        return result

    @cached_property
    def index(self) -> CommandLogIndex:
        return CommandLogIndex(self.snapshot.commands, key_field=self.options.correlation_key)

    def containers(self) -> ContainerListView:
        """Latest container inventory with the pending-action overlay."""
        return self._cached(("containers",), self._build_containers)

    def _build_containers(self) -> ContainerListView:
        record = self.index.latest_successful(CommandTypes.DOCKER_LIST)
        decoded = OutputDecoder.decode(record)
        containers: list[ContainerInfo] = decoded.value if isinstance(decoded.value, list) else []
        statuses = ActionStatusResolver.resolve_many(self.index, (c.id for c in containers))
        items = tuple(ContainerView(container=c, action=statuses[c.id]) for c in containers)
        return ContainerListView(items=items, error=decoded.error, source=record)

    def action_status(self, target_id: str) -> ActionStatus:
        """Pending/idle/finished state of the latest action on ``target_id``."""
        return self._cached(
            ("action", target_id),
            lambda: ActionStatusResolver.resolve(self.index, target_id),
        )

    def stacks(self) -> StackListView:
        """Compose stacks from the latest successful ``compose.list``."""
        return self._cached(("stacks",), self._build_stacks)

    def _build_stacks(self) -> StackListView:
        decoded = OutputDecoder.decode(self.index.latest_successful(CommandTypes.COMPOSE_LIST))
        stacks = decoded.value if isinstance(decoded.value, list) else []
        return StackListView(stacks=tuple(stacks), error=decoded.error)

    def compose_action(self) -> CommandRecord | None:
        """Most recent successful ``compose.up`` or ``compose.down``."""
        return self._cached(
            ("compose_action",),
            lambda: self.index.latest_successful_of(CommandTypes.COMPOSE_ACTIONS),
        )

    def stats(self, target_id: str) -> StatsView:
        """Current stats sample for a container plus its bounded history."""
        return self._cached(("stats", target_id), lambda: self._build_stats(target_id))

    def _build_stats(self, target_id: str) -> StatsView:
        record = self.index.latest_successful(
            CommandTypes.DOCKER_STATS, lambda key: key is None or key == target_id,
        )
        decoded = OutputDecoder.decode(record)
        history = TimeSeriesReconstructor.build_series(
            self.index, target_id, max_points=self.options.stats_history_points,
        )
        return StatsView(
            current=TimeSeriesReconstructor.find_entry(decoded.value, target_id),
            history=tuple(history),
            error=decoded.error,
        )

    def logs(self, target_id: str, follow: bool = False) -> LogTail:
        """Single-shot or follow-mode log tail for a container."""
        return self._cached(
            ("logs", target_id, follow),
            lambda: LogTailAssembler.assemble(
                self.index, target_id, follow=follow, chunks=self.options.log_follow_chunks,
            ),
        )

    def exec_result(self, target_id: str) -> ExecView:
        """Result of the latest successful exec in a container."""
        return self._cached(("exec", target_id), lambda: self._build_exec(target_id))

    def _build_exec(self, target_id: str) -> ExecView:
        record = self.index.latest_successful(CommandTypes.DOCKER_EXEC, lambda key: key == target_id)
        decoded = OutputDecoder.decode(record)
        result = decoded.value if isinstance(decoded.value, ExecResult) else None
        return ExecView(result=result, error=decoded.error, source=record)

    def inspect(self, target_id: str) -> InspectView:
        """Summary and details of the latest ``docker.inspect`` of a container."""
        return self._cached(("inspect", target_id), lambda: self._build_inspect(target_id))

    def _build_inspect(self, target_id: str) -> InspectView:
        record = self.index.latest_successful(CommandTypes.DOCKER_INSPECT, lambda key: key == target_id)
        decoded = OutputDecoder.decode(record)
        return InspectView(
            summary=container_inspect.summarize(decoded.value),
            details=container_inspect.details(decoded.value),
            raw=decoded.value,
            error=decoded.error,
        )

    def attempts(self) -> list[Attempt]:
        """Newest-first operation attempts from the snapshot's events."""
        return self._cached(("attempts",), self._build_attempts)

    def _build_attempts(self) -> list[Attempt]:
        correlator = AttemptCorrelator(
            AttemptCorrelator.matcher_named(self.options.attempt_matcher),
            start_event=self.options.attempt_start_event,
            completed_event=self.options.attempt_completed_event,
            limit=self.options.attempt_limit,
        )
        return correlator.correlate(self.snapshot.events)

    def recent_commands(self, limit: int | None = None) -> list[CommandRecord]:
        """Most recent docker/compose commands, newest first."""
        count = self.options.recent_commands_limit if limit is None else limit
        return self._cached(
            ("recent", count),
            lambda: self.index.recent(CommandTypes.NAMESPACES, count),
        )


class ProjectionCache:
    """Last projection per node, replaced whenever the snapshot changes."""

    def __init__(self, options: ProjectionOptions | None = None) -> None:
        self._options = options or ProjectionOptions()
        self._projections: dict[str, ViewProjection] = {}

    def get(self, snapshot: Snapshot) -> ViewProjection:
        """Projection for ``snapshot``, reused if the contents are unchanged."""
        cached = self._projections.get(snapshot.node_id)
        if cached is not None and cached.snapshot == snapshot:
            return cached
        projection = ViewProjection(snapshot, self._options)
        self._projections[snapshot.node_id] = projection
        return projection

    def invalidate(self, node_id: str) -> None:
        """Drop the cached projection of a node."""
        self._projections.pop(node_id, None)
