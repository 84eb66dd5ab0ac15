"""Pending/success/failed overlay for targets of container actions."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from fleetwatch.engine.index import CommandLogIndex
from fleetwatch.engine.records import CommandRecord, CommandStatus, CommandTypes


@dataclass(frozen=True)
class ActionStatus:
    """Derived state of the most recent action aimed at one target.

    ``status`` is None when no action was ever recorded (idle).
    """

    target_id: str
    command_type: str | None = None
    status: CommandStatus | None = None
    is_pending: bool = False
    label: str | None = None
    error: str | None = None

    @property
    def is_idle(self) -> bool:
        return self.status is None


class ActionStatusResolver:
    """Static helpers deriving ``ActionStatus`` from a command index."""

    @staticmethod
    def label_for(command_type: str) -> str:
        """Display label: the command type without its namespace prefix."""
        for namespace in CommandTypes.NAMESPACES:
            if command_type.startswith(namespace):
                return command_type[len(namespace):]
        return command_type

    @staticmethod
    def resolve(
        index: CommandLogIndex,
        target_id: str,
        action_types: Collection[str] = CommandTypes.CONTAINER_ACTIONS,
    ) -> ActionStatus:
        """Status of the latest action record targeting ``target_id``."""
        overlay = index.latest_by_target(action_types)
        return ActionStatusResolver._from_record(target_id, overlay.get(target_id))

    @staticmethod
    def resolve_many(
        index: CommandLogIndex,
        target_ids: Iterable[str],
        action_types: Collection[str] = CommandTypes.CONTAINER_ACTIONS,
    ) -> dict[str, ActionStatus]:
        """Resolve several targets against a single overlay scan."""
        overlay = index.latest_by_target(action_types)
        return {
            target_id: ActionStatusResolver._from_record(target_id, overlay.get(target_id))
            for target_id in target_ids
        }

    @staticmethod
    def _from_record(target_id: str, record: CommandRecord | None) -> ActionStatus:
        if record is None:
            return ActionStatus(target_id=target_id)
        return ActionStatus(
            target_id=target_id,
            command_type=record.command_type,
            status=record.status,
            is_pending=record.status.is_pending,
            label=ActionStatusResolver.label_for(record.command_type),
            error=record.error if record.status is CommandStatus.FAILED else None,
        )
