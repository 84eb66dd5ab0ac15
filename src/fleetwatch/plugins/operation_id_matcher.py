"""Exact matcher keyed on an operation id carried in the event payload."""

from __future__ import annotations

from collections.abc import Sequence

from fleetwatch.engine.attempts import Attempt
from fleetwatch.engine.codec import PayloadCodec
from fleetwatch.engine.records import AuditEvent
from fleetwatch.plugins.contracts.attempt_matcher import AttemptMatcher
from fleetwatch.plugins.greedy_matcher import GreedyScanMatcher


def _operation_id(event: AuditEvent, field: str) -> str | None:
    value = PayloadCodec.load_object(event.data_json).get(field)
    return value if isinstance(value, str) and value else None


class OperationIdMatcher(AttemptMatcher):
    """Pair events sharing ``operationId`` exactly, greedy for the rest.

    Opt-in alternative to ``GreedyScanMatcher`` for event producers that
    stamp every start/completed pair with a unique id. Events that carry an
    id are only ever paired by that id; events without one are handed to
    the fallback matcher among themselves.
    """

    def __init__(
        self,
        field: str = "operationId",
        fallback: AttemptMatcher | None = None,
    ) -> None:
        self._field = field
        self._fallback = fallback or GreedyScanMatcher()

    def match(
        self,
        starts: Sequence[AuditEvent],
        completions: Sequence[AuditEvent],
    ) -> list[Attempt]:
        """Exact pairs first, then the fallback over events without ids."""
        by_operation: dict[str, AuditEvent] = {}
        anonymous_completions: list[AuditEvent] = []
        for completion in completions:
            operation_id = _operation_id(completion, self._field)
            if operation_id is None:
                anonymous_completions.append(completion)
            else:
                by_operation.setdefault(operation_id, completion)

        attempts: list[Attempt] = []
        claimed: set[str] = set()
        anonymous_starts: list[AuditEvent] = []
        for start in starts:
            operation_id = _operation_id(start, self._field)
            if operation_id is None:
                anonymous_starts.append(start)
                continue
            completion = by_operation.get(operation_id)
            if completion is not None and completion.id not in claimed:
                claimed.add(completion.id)
                attempts.append(Attempt.from_events(start, completion))
            else:
                attempts.append(Attempt.from_events(start, None))

        attempts.extend(
            Attempt.standalone(completion)
            for completion in completions
            if completion.id not in claimed
            and _operation_id(completion, self._field) is not None
        )
        attempts.extend(self._fallback.match(anonymous_starts, anonymous_completions))
        return attempts
