"""Turn the audit event stream into a bounded, newest-first attempt history."""

from __future__ import annotations

from collections.abc import Iterable

from fleetwatch.engine.attempts import Attempt
from fleetwatch.engine.records import AuditEvent
from fleetwatch.plugins.contracts.attempt_matcher import AttemptMatcher
from fleetwatch.plugins.greedy_matcher import GreedyScanMatcher
from fleetwatch.plugins.operation_id_matcher import OperationIdMatcher

_MATCHERS: dict[str, type[AttemptMatcher]] = {
    "greedy": GreedyScanMatcher,
    "operation_id": OperationIdMatcher,
}


class AttemptCorrelator:
    """Filter, order and pair operation events, then cap the history."""

    def __init__(
        self,
        matcher: AttemptMatcher | None = None,
        *,
        start_event: str = "operation.start",
        completed_event: str = "operation.completed",
        limit: int = 20,
    ) -> None:
        self._matcher = matcher or GreedyScanMatcher()
        self._start_event = start_event
        self._completed_event = completed_event
        self._limit = limit

    @staticmethod
    def matcher_named(name: str) -> AttemptMatcher:
        """Build a matcher from its config name.

        Raises:
            ValueError: If no matcher has that name.
        """
        try:
            return _MATCHERS[name]()
        except KeyError:
            raise ValueError(f"Unknown attempt matcher: {name!r}") from None

    def correlate(self, events: Iterable[AuditEvent]) -> list[Attempt]:
        """Newest-first attempts built from ``events`` (any order, may repeat)."""
        if self._limit <= 0:
            return []
        unique: dict[str, AuditEvent] = {}
        for event in events:
            unique.setdefault(event.id, event)
        ordered = sorted(unique.values(), key=lambda event: event.timestamp)
        starts = [e for e in ordered if e.event_name == self._start_event]
        completions = [e for e in ordered if e.event_name == self._completed_event]
        attempts = self._matcher.match(starts, completions)
        attempts.sort(key=lambda attempt: attempt.started_at, reverse=True)
        return attempts[: self._limit]
