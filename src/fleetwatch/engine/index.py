"""In-memory index over one node's window of command records."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable
from functools import cached_property

from fleetwatch.engine.codec import PayloadCodec
from fleetwatch.engine.records import CommandRecord, CommandStatus

KeyPredicate = Callable[[str | None], bool]


class CommandLogIndex:
    """Read-only lookups over a deduplicated, time-ordered command window.

    Input may be in any order and may repeat ids across overlapping polls.
    For a repeated id the most advanced status wins; the record keeps the
    input position of its first sighting, which is the tie-break used by
    every "latest" query when two records share a ``created_at``.
    """

    def __init__(
        self,
        records: Iterable[CommandRecord],
        key_field: str = "containerId",
    ) -> None:
        self._key_field = key_field
        positions: dict[str, int] = {}
        latest: dict[str, CommandRecord] = {}
        for record in records:
            current = latest.get(record.id)
            if current is None:
                positions[record.id] = len(positions)
                latest[record.id] = record
            elif record.status.rank >= current.status.rank:
                latest[record.id] = record
        self._records = tuple(latest[record_id] for record_id in positions)
        self._keys = {
            record.id: PayloadCodec.correlation_key(record.payload, key_field)
            for record in self._records
        }

    def __len__(self) -> int:
        return len(self._records)

    @cached_property
    def ordered(self) -> tuple[CommandRecord, ...]:
        """Records ascending by ``created_at``; ties keep input order."""
        return tuple(sorted(self._records, key=lambda r: r.created_at))

    def key_of(self, record: CommandRecord) -> str | None:
        """Correlation key of an indexed record (None when untargeted)."""
        if record.id in self._keys:
            return self._keys[record.id]
        return PayloadCodec.correlation_key(record.payload, self._key_field)

    def successful(self, command_type: str) -> list[CommandRecord]:
        """Successful records of one type, oldest first."""
        return [
            record for record in self.ordered
            if record.command_type == command_type
            and record.status is CommandStatus.SUCCESS
        ]

    def latest_successful(
        self,
        command_type: str,
        predicate: KeyPredicate | None = None,
    ) -> CommandRecord | None:
        """Most recent successful record of ``command_type``.

        ``predicate`` receives the record's correlation key and filters the
        candidates; failed and pending records are never returned.
        """
        return self.latest_successful_of((command_type,), predicate)

    def latest_successful_of(
        self,
        command_types: Collection[str],
        predicate: KeyPredicate | None = None,
    ) -> CommandRecord | None:
        """Most recent successful record across a family of types."""
        best: CommandRecord | None = None
        for record in self._records:
            if record.command_type not in command_types:
                continue
            if record.status is not CommandStatus.SUCCESS:
                continue
            if predicate is not None and not predicate(self.key_of(record)):
                continue
            if best is None or record.created_at > best.created_at:
                best = record
        return best

    def latest_by_target(
        self, command_types: Collection[str],
    ) -> dict[str, CommandRecord]:
        """Most recent record of any status per correlation key.

        Untargeted records belong to no target and are left out.
        """
        overlay: dict[str, CommandRecord] = {}
        for record in self._records:
            if record.command_type not in command_types:
                continue
            target = self.key_of(record)
            if target is None:
                continue
            existing = overlay.get(target)
            if existing is None or record.created_at > existing.created_at:
                overlay[target] = record
        return overlay

    def recent(self, prefixes: tuple[str, ...], limit: int) -> list[CommandRecord]:
        """Most recent records whose type starts with one of ``prefixes``."""
        if limit <= 0:
            return []
        matching = [r for r in self.ordered if r.command_type.startswith(prefixes)]
        return matching[::-1][:limit]
