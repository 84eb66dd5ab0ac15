"""JSON-ready dicts for projection views, shared by the API and the CLI."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from pydantic import BaseModel

from fleetwatch.engine.attempts import Attempt
from fleetwatch.engine.log_tail import LogTail
from fleetwatch.engine.projection import (
    ContainerListView,
    ExecView,
    InspectView,
    StackListView,
    StatsView,
)
from fleetwatch.engine.records import CommandRecord
from fleetwatch.engine.status import ActionStatus
from fleetwatch.utils.time import Time


class ViewSerializer:
    """Static converters from engine views to plain dicts."""

    @staticmethod
    def _model(model: BaseModel | None) -> dict[str, Any] | None:
        return None if model is None else model.model_dump(by_alias=True)

    @staticmethod
    def command(record: CommandRecord | None) -> dict[str, Any] | None:
        if record is None:
            return None
        return {
            "id": record.id,
            "commandType": record.command_type,
            "status": record.status.value,
            "createdAt": Time.isoformat(record.created_at),
            "payload": record.payload,
            "error": record.error,
        }

    @staticmethod
    def action(status: ActionStatus) -> dict[str, Any]:
        return {
            "targetId": status.target_id,
            "commandType": status.command_type,
            "status": status.status.value if status.status else None,
            "isPending": status.is_pending,
            "label": status.label,
            "error": status.error,
        }

    @staticmethod
    def containers(view: ContainerListView) -> dict[str, Any]:
        return {
            "items": [
                {
                    **item.container.model_dump(by_alias=True),
                    "name": item.container.primary_name,
                    "action": ViewSerializer.action(item.action),
                }
                for item in view.items
            ],
            "running": view.running,
            "exited": view.exited,
            "error": view.error,
            "source": ViewSerializer.command(view.source),
        }

    @staticmethod
    def stacks(view: StackListView, compose_action: CommandRecord | None) -> dict[str, Any]:
        return {
            "stacks": [stack.model_dump(by_alias=True) for stack in view.stacks],
            "error": view.error,
            "lastAction": ViewSerializer.command(compose_action),
        }

    @staticmethod
    def stats(view: StatsView) -> dict[str, Any]:
        return {
            "current": ViewSerializer._model(view.current),
            "history": [
                {"timestamp": Time.isoformat(point.timestamp), **point.values}
                for point in view.history
            ],
            "error": view.error,
        }

    @staticmethod
    def logs(tail: LogTail) -> dict[str, Any]:
        return {"content": tail.content, "truncated": tail.truncated, "error": tail.error}

    @staticmethod
    def exec_result(view: ExecView) -> dict[str, Any]:
        return {
            "result": ViewSerializer._model(view.result),
            "error": view.error,
            "source": ViewSerializer.command(view.source),
        }

    @staticmethod
    def inspect(view: InspectView) -> dict[str, Any]:
        return {
            "summary": asdict(view.summary) if view.summary else None,
            "details": asdict(view.details) if view.details else None,
            "raw": view.raw,
            "error": view.error,
        }

    @staticmethod
    def attempt(attempt: Attempt) -> dict[str, Any]:
        return {
            "id": attempt.id,
            "startedAt": Time.isoformat(attempt.started_at),
            "completedAt": Time.isoformat(attempt.completed_at),
            "success": attempt.success,
            "targetId": attempt.target_id,
            "actorName": attempt.actor_name,
            "source": attempt.metadata.source,
            "channel": attempt.metadata.channel,
            "version": attempt.metadata.version,
            "reportedVersion": attempt.metadata.reported_version,
            "error": attempt.error,
        }
