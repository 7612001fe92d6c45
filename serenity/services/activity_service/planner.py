"""Daily activity plan: mood-aware, avoiding recent repeats."""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from serenity.services.mood_service import MoodRepository
from serenity.shared.utils import hash_pii
from .catalog import average_mood, select_activities
from .repository import REPEAT_WINDOW_DAYS, ActivityRepository, today_utc

logger = logging.getLogger(__name__)

MOOD_SAMPLE_SIZE = 3


class ActivityPlanner:
    """Builds today's suggestions for one user."""

    def __init__(self, activities: ActivityRepository, moods: MoodRepository):
        self.activities = activities
        self.moods = moods

    def today(self, user_id: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """Up to four activities with a completed flag for today.

        Args:
            user_id: Owner
            day: Override for "today" (UTC)
        """
        day = day or today_utc()

        recent_moods = self.moods.find_for_user(user_id, order_by="date", limit=MOOD_SAMPLE_SIZE)
        mood = average_mood(recent_moods)
        recent_ids = self.activities.ids_since(user_id, day - timedelta(days=REPEAT_WINDOW_DAYS))

        picks = select_activities(mood, recent_ids)
        done_today = self.activities.ids_on(user_id, day)

        logger.info(
            "ACTIVITIES_PLANNED",
            extra={
                "user_id_hash": hash_pii(user_id),
                "average_mood": round(mood, 2),
                "recent_count": len(recent_ids),
                "picked": [a.id for a in picks],
            }
        )
        return [a.to_dict(completed=a.id in done_today) for a in picks]
