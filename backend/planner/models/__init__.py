"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from planner.models.events import Event
from planner.models.preferences import UserPreferences
from planner.models.tasks import Task
from planner.models.users import User

__all__ = [
    "Event",
    "Task",
    "User",
    "UserPreferences",
]
