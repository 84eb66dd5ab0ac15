"""Mirror of command records observed in the polled command log."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from fleetwatch.utils.db import Base


class ObservedCommand(Base):
    """Latest known state of one remote command.

    ``command_type``, ``payload`` and ``created_at`` are fixed at first
    sighting. Later polls may only advance ``status`` and fill in
    ``output_log`` / ``error``.
    """

    __tablename__ = "observed_commands"
    __table_args__ = (Index("ix_observed_commands_node_created", "node_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    node_id: Mapped[str] = mapped_column(String(64), index=True)
    command_type: Mapped[str] = mapped_column(String(64))
    status: Mapped[str] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    payload: Mapped[str | None] = mapped_column(Text, nullable=True)
    output_log: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    observed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
