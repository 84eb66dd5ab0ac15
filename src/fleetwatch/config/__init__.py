"""Settings for the fleet dashboard backend, layered from YAML and FLEETWATCH_* env vars."""

from fleetwatch.config.loader import ConfigLoader
from fleetwatch.config.settings import ENV_PREFIX, Settings

__all__ = ["ENV_PREFIX", "ConfigLoader", "Settings"]
