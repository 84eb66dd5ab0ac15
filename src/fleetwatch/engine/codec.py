"""Tolerant decoding of opaque command payloads and outputs.

Remote results are free-form strings: bare JSON, JSON preceded by banners
or shell prompts, or an ``{"error": "..."}`` envelope. ``PayloadCodec``
maps all of them onto a ``ParseResult`` and never raises.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

NO_JSON_FOUND = "No JSON payload found in output"

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class ParseResult:
    """Outcome of decoding one opaque string.

    ``value`` and ``error`` both None means the result is not available yet.
    """

    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when a value was decoded."""
        return self.error is None and self.value is not None


class PayloadCodec:
    """Static helpers for opaque result and payload strings."""

    @staticmethod
    def parse(raw: str | None) -> ParseResult:
        """Extract the JSON value embedded in ``raw``.

        Decoding starts at the first ``[`` or ``{``; anything before it is
        treated as log noise and anything after the first complete value is
        ignored. An object carrying a string ``error`` field is a failure
        reported by the remote side.
        """
        if not raw:
            return ParseResult()
        starts = [pos for pos in (raw.find("["), raw.find("{")) if pos >= 0]
        if not starts:
            return ParseResult(error=NO_JSON_FOUND)
        try:
            value, _ = _decoder.raw_decode(raw, min(starts))
        except json.JSONDecodeError as error:
            return ParseResult(error=str(error))
        if isinstance(value, dict) and isinstance(value.get("error"), str):
            return ParseResult(error=value["error"])
        return ParseResult(value=value)

    @staticmethod
    def load_object(raw: str | None) -> dict[str, Any]:
        """Decode a strict JSON object; anything else becomes an empty dict."""
        if not raw:
            return {}
        try:
            value = json.loads(raw)
        except ValueError:
            return {}
        return value if isinstance(value, dict) else {}

    @staticmethod
    def correlation_key(payload: str | None, field: str = "containerId") -> str | None:
        """Return the target id carried in a command payload.

        Malformed payloads, non-objects and non-string keys all yield None,
        which marks the command as untargeted.
        """
        key = PayloadCodec.load_object(payload).get(field)
        return key if isinstance(key, str) and key else None
