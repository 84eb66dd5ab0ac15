"""SQLAlchemy ORM models."""

# Import all models so Base.metadata registers them for create_all().
from fleetwatch.models.command import ObservedCommand as ObservedCommand
from fleetwatch.models.event import ObservedEvent as ObservedEvent
