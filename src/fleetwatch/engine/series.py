"""Rebuild per-target metric series from historical stats commands."""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger

from fleetwatch.engine.index import CommandLogIndex
from fleetwatch.engine.outputs import OutputDecoder, StatsSample
from fleetwatch.engine.records import CommandTypes

MetricValues = dict[str, float | None]
Extractor = Callable[[Any], MetricValues]

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


@dataclass(frozen=True)
class MetricPoint:
    """One sample of a series, stamped with the command's creation time."""

    timestamp: datetime
    values: MetricValues = field(default_factory=dict)


def parse_percent(value: Any) -> float | None:
    """Read a leading number from text like ``"12.3%"`` or ``"1.5 MiB"``.

    Returns None (never 0) when nothing numeric can be read, so charts show
    a gap instead of a false zero.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if match is None:
            return None
        number = float(match.group(1))
    return number if math.isfinite(number) else None


def stats_extractor(sample: StatsSample) -> MetricValues:
    """CPU and memory percentages of a ``docker.stats`` sample."""
    return {
        "cpu_percent": parse_percent(sample.cpu_percent),
        "mem_percent": parse_percent(sample.mem_percent),
    }


def _entry_id(entry: Any) -> str | None:
    if isinstance(entry, dict):
        value = entry.get("id")
    else:
        value = getattr(entry, "id", None)
    return value if isinstance(value, str) else None


class TimeSeriesReconstructor:
    """Static helpers scanning a command index for metric samples."""

    @staticmethod
    def find_entry(entries: Any, target_id: str) -> Any:
        """First entry whose id starts with ``target_id``.

        Remote ids may be the full 64-char form of a locally stored short id.
        """
        if not isinstance(entries, list) or not target_id:
            return None
        for entry in entries:
            entry_id = _entry_id(entry)
            if entry_id is not None and entry_id.startswith(target_id):
                return entry
        return None

    @staticmethod
    def build_series(
        index: CommandLogIndex,
        target_id: str,
        metric_command_type: str = CommandTypes.DOCKER_STATS,
        extractor: Extractor = stats_extractor,
        max_points: int = 30,
    ) -> list[MetricPoint]:
        """Chronological series of samples for one target, newest ``max_points``.

        Commands aimed at another target are skipped; untargeted commands
        are scanned for an entry matching the target. Undecodable outputs
        are skipped without aborting the scan.
        """
        if max_points <= 0:
            return []
        points: list[MetricPoint] = []
        for record in index.successful(metric_command_type):
            if not record.output_log:
                continue
            key = index.key_of(record)
            if key is not None and key != target_id:
                continue
            decoded = OutputDecoder.decode(record)
            if decoded.error is not None:
                logger.debug("Skipping {} {}: {}", record.command_type, record.id, decoded.error)
                continue
            entry = TimeSeriesReconstructor.find_entry(decoded.value, target_id)
            if entry is None:
                continue
            points.append(MetricPoint(timestamp=record.created_at, values=extractor(entry)))
        return points[-max_points:]
