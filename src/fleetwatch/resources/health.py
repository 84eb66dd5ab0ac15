"""Health resource — protocol-agnostic liveness and storage check."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from fleetwatch.utils.db import Database


class HealthResource:
    """Reports whether the service and its snapshot store respond."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def check(self) -> dict[str, str]:
        """Return service and database status."""
        try:
            async with self._database.pool() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as error:
            return {"status": "degraded", "database": type(error).__name__}
        return {"status": "ok", "database": "ok"}
