"""Greedy scan-order matcher — the default attempt pairing policy."""

from __future__ import annotations

from collections.abc import Sequence

from fleetwatch.engine.attempts import Attempt
from fleetwatch.engine.records import AuditEvent
from fleetwatch.plugins.contracts.attempt_matcher import AttemptMatcher


class GreedyScanMatcher(AttemptMatcher):
    """Each start, earliest first, claims the first compatible completion.

    Compatible means unclaimed, not earlier than the start, and on the same
    machine (an unknown machine on either side matches anything). This is
    first-come rather than globally optimal: with overlapping operations on
    one machine a later start can take a completion that belonged to an
    earlier one. Events carry no shared operation id to settle that.
    """

    def match(
        self,
        starts: Sequence[AuditEvent],
        completions: Sequence[AuditEvent],
    ) -> list[Attempt]:
        """Pair greedily; leftover completions become standalone attempts."""
        claimed: set[str] = set()
        attempts: list[Attempt] = []
        for start in sorted(starts, key=lambda event: event.timestamp):
            completion = self._claim(start, completions, claimed)
            attempts.append(Attempt.from_events(start, completion))
        attempts.extend(
            Attempt.standalone(completion)
            for completion in completions
            if completion.id not in claimed
        )
        return attempts

    @staticmethod
    def _claim(
        start: AuditEvent,
        completions: Sequence[AuditEvent],
        claimed: set[str],
    ) -> AuditEvent | None:
        for completion in completions:
            if completion.id in claimed:
                continue
            if start.machine_id and completion.machine_id and completion.machine_id != start.machine_id:
                continue
            if completion.timestamp < start.timestamp:
                continue
            claimed.add(completion.id)
            return completion
        return None
