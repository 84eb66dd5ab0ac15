"""Logging setup — loguru sink configured once at startup."""

from __future__ import annotations

import sys

from loguru import logger

_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} | {message}"
)


class Logging:
    """Static helpers for the process-wide loguru sink."""

    @staticmethod
    def configure(level: str = "INFO") -> None:
        """Replace the default sink with a single stderr sink at ``level``."""
        logger.remove()
        logger.add(sys.stderr, level=level.upper(), format=_FORMAT)
