"""Assemble a container's log tail from one or several logs commands."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from fleetwatch.engine.index import CommandLogIndex
from fleetwatch.engine.outputs import LogsResult, OutputDecoder
from fleetwatch.engine.records import CommandTypes

CHUNK_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True)
class LogTail:
    """Log text for one target; ``error`` carries a remote-reported failure."""

    content: str = ""
    truncated: bool = False
    error: str | None = None


class LogTailAssembler:
    """Static helpers for single-shot and follow-mode log tails."""

    @staticmethod
    def assemble(
        index: CommandLogIndex,
        target_id: str,
        follow: bool = False,
        chunks: int = 5,
        logs_command_type: str = CommandTypes.DOCKER_LOGS,
    ) -> LogTail:
        """Log tail for ``target_id``.

        Single-shot returns the latest successful fetch. Follow mode joins
        the last ``chunks`` fetches for the target, oldest first, and marks
        the result truncated if any fetch was.
        """
        if follow:
            return LogTailAssembler._follow(index, target_id, chunks, logs_command_type)
        record = index.latest_successful(logs_command_type, lambda key: key == target_id)
        decoded = OutputDecoder.decode(record)
        if not isinstance(decoded.value, LogsResult):
            return LogTail(error=decoded.error)
        return LogTail(content=decoded.value.content, truncated=decoded.value.truncated)

    @staticmethod
    def _follow(
        index: CommandLogIndex, target_id: str, chunks: int, logs_command_type: str,
    ) -> LogTail:
        if chunks <= 0:
            return LogTail()
        records = [
            record for record in index.successful(logs_command_type)
            if record.output_log and index.key_of(record) == target_id
        ][-chunks:]
        contents: list[str] = []
        truncated = False
        for record in records:
            decoded = OutputDecoder.decode(record)
            if not isinstance(decoded.value, LogsResult):
                logger.debug("Skipping logs {} for {}: {}", record.id, target_id, decoded.error)
                continue
            if decoded.value.content:
                contents.append(decoded.value.content)
                truncated = truncated or decoded.value.truncated
        return LogTail(content=CHUNK_SEPARATOR.join(contents), truncated=truncated)
