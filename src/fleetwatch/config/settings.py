"""Settings model — pydantic-settings with env var support."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings

ENV_PREFIX = "FLEETWATCH_"


class Settings(BaseSettings):
    """Dashboard backend settings.

    Use ``ConfigLoader.load_settings()`` to build with YAML + env var layering.
    Direct construction (e.g. in tests) skips YAML loading.

    Window sizes bound how much of the command log and event stream a single
    projection looks at; they keep recomputation proportional to the window
    rather than to the whole history.
    """

    database_url: str = "sqlite+aiosqlite:///fleetwatch.db"
    log_level: str = "INFO"

    # Snapshot windows
    command_window: int = 80
    event_window: int = 200
    event_category: str = "agents"

    # Projection tuning
    correlation_key: str = "containerId"
    stats_history_points: int = 30
    log_follow_chunks: int = 5
    recent_commands_limit: int = 8

    # Attempt correlation
    attempt_start_event: str = "operation.start"
    attempt_completed_event: str = "operation.completed"
    attempt_limit: int = 20
    attempt_matcher: Literal["greedy", "operation_id"] = "greedy"

    # Poller cadence, seconds
    command_poll_interval: float = 5.0
    event_poll_interval: float = 30.0
    # Nodes polled in the background when sources are wired in
    poll_nodes: list[str] = []

    model_config = {"env_prefix": ENV_PREFIX}
