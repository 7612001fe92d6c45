"""Activity Service: daily wellness activity suggestions and completions."""

from .catalog import CATALOG, CATALOG_BY_ID, Activity, average_mood, select_activities
from .handler import create_activity_blueprint
from .planner import ActivityPlanner
from .repository import ActivityRepository

__all__ = [
    "CATALOG",
    "CATALOG_BY_ID",
    "Activity",
    "average_mood",
    "select_activities",
    "create_activity_blueprint",
    "ActivityPlanner",
    "ActivityRepository",
]
