"""Typed views of command outputs, validated once per record.

Each command type that the projections read has a pydantic model; the
``OutputDecoder`` maps a record onto that model after ``PayloadCodec`` has
extracted the JSON. Types without a model decode to the raw JSON value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from fleetwatch.engine.codec import PayloadCodec
from fleetwatch.engine.records import CommandRecord, CommandTypes

UNEXPECTED_RESPONSE = "Unexpected response."


class _Output(BaseModel):
    """Base for agent outputs: camelCase on the wire, extra keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ContainerInfo(_Output):
    """One container from ``docker.list``."""

    id: str
    names: list[str] = Field(default_factory=list)
    image: str = ""
    state: str = ""
    status: str = ""
    created: str | None = None

    @property
    def primary_name(self) -> str:
        """First container name without Docker's leading slash."""
        if not self.names:
            return "Unknown"
        return self.names[0].removeprefix("/")


class StatsSample(_Output):
    """One container sample from ``docker.stats``. Numbers arrive as text."""

    id: str
    name: str = ""
    cpu_percent: str | float | None = None
    mem_usage: str | None = None
    mem_percent: str | float | None = None
    net_io: str | None = Field(default=None, alias="netIO")
    block_io: str | None = Field(default=None, alias="blockIO")
    pids: str | int | None = None


class LogsResult(_Output):
    """Bounded log excerpt from ``docker.logs``."""

    container_id: str | None = None
    content: str = ""
    truncated: bool = False
    tail: int | None = None
    since: str | None = None
    timestamps: bool | None = None


class ExecResult(_Output):
    """Result of ``docker.exec``."""

    container_id: str | None = None
    exit_code: int | None = None
    output: str = ""
    error: str = ""
    success: bool = False


class ActionResult(_Output):
    """Acknowledgement of a container start/stop/restart/remove."""

    success: bool = False
    container_id: str | None = None
    action: str | None = None


class ComposeStack(_Output):
    """One stack from ``compose.list``; Docker reports these in PascalCase."""

    name: str = Field(alias="Name")
    status: str = Field(default="", alias="Status")
    config_files: str = Field(default="", alias="ConfigFiles")


@dataclass(frozen=True)
class _Shape:
    model: type[_Output]
    many: bool


_SHAPES: dict[str, _Shape] = {
    CommandTypes.DOCKER_LIST: _Shape(ContainerInfo, many=True),
    CommandTypes.DOCKER_STATS: _Shape(StatsSample, many=True),
    CommandTypes.DOCKER_LOGS: _Shape(LogsResult, many=False),
    CommandTypes.DOCKER_EXEC: _Shape(ExecResult, many=False),
    CommandTypes.COMPOSE_LIST: _Shape(ComposeStack, many=True),
    **{
        action: _Shape(ActionResult, many=False)
        for action in CommandTypes.CONTAINER_ACTIONS
    },
}


@dataclass(frozen=True)
class DecodedOutput:
    """Typed output of one record: a model, a list of models, or raw JSON."""

    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when a usable value was decoded."""
        return self.error is None and self.value is not None


class OutputDecoder:
    """Static helpers turning ``CommandRecord.output_log`` into typed data."""

    @staticmethod
    def decode(record: CommandRecord | None) -> DecodedOutput:
        """Decode a record's output according to its command type.

        List outputs are validated item by item; invalid items are dropped
        so one bad sample does not hide the rest.
        """
        if record is None:
            return DecodedOutput()
        parsed = PayloadCodec.parse(record.output_log)
        if parsed.error is not None or parsed.value is None:
            return DecodedOutput(error=parsed.error)
        shape = _SHAPES.get(record.command_type)
        if shape is None:
            return DecodedOutput(value=parsed.value)
        if shape.many:
            if not isinstance(parsed.value, list):
                return DecodedOutput(value=[], error=UNEXPECTED_RESPONSE)
            return DecodedOutput(value=OutputDecoder._validate_items(record, shape, parsed.value))
        try:
            return DecodedOutput(value=shape.model.model_validate(parsed.value))
        except ValidationError as error:
            logger.debug("Output of {} {} failed validation: {}", record.command_type, record.id, error)
            return DecodedOutput(error=UNEXPECTED_RESPONSE)

    @staticmethod
    def _validate_items(
        record: CommandRecord, shape: _Shape, items: list[Any],
    ) -> list[_Output]:
        valid: list[_Output] = []
        for item in items:
            try:
                valid.append(shape.model.model_validate(item))
            except ValidationError:
                logger.debug("Dropping invalid {} item in {}", record.command_type, record.id)
        return valid
