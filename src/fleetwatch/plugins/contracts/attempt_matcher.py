"""Attempt matcher contract — pluggable start/completion pairing."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from fleetwatch.engine.attempts import Attempt
from fleetwatch.engine.records import AuditEvent


class AttemptMatcher(ABC):
    """Pairs operation start events with completion events.

    Implementations decide the pairing policy. Callers pass both lists
    sorted ascending by timestamp and sort the result themselves.
    """

    @abstractmethod
    def match(
        self,
        starts: Sequence[AuditEvent],
        completions: Sequence[AuditEvent],
    ) -> list[Attempt]:
        """Build one attempt per start plus one per unclaimed completion.

        Args:
            starts: Start events, ascending by timestamp.
            completions: Completion events, ascending by timestamp.

        Returns:
            Attempts in no particular order.
        """
