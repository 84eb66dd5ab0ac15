"""Timezone helpers."""

from __future__ import annotations

from datetime import datetime, timezone


class Time:
    """Static helpers for datetime normalization."""

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Ensure a datetime is UTC-aware. SQLite may strip timezone info.

        Naive values are taken as UTC; aware values are converted to UTC so
        that stores which drop the offset keep the right instant.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def parse(value: str | datetime) -> datetime:
        """Parse an ISO-8601 timestamp from the wire into an aware datetime.

        Accepts a trailing ``Z``; naive values are taken as UTC and any other
        offset is converted to UTC.

        Raises:
            ValueError: If the value is not a valid ISO-8601 timestamp.
        """
        if isinstance(value, datetime):
            return Time.ensure_utc(value)
        if not isinstance(value, str):
            raise ValueError(f"Not a timestamp: {value!r}")
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return Time.ensure_utc(datetime.fromisoformat(text))

    @staticmethod
    def isoformat(dt: datetime | None) -> str | None:
        """Serialize an optional datetime for JSON responses."""
        return dt.isoformat() if dt is not None else None
