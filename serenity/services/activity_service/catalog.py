"""Wellness activity catalogue and the daily selection rule."""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

DEFAULT_AVERAGE_MOOD = 5.0
DAILY_ACTIVITY_COUNT = 4


@dataclass(frozen=True)
class Activity:
    id: str
    title: str
    description: str
    duration: str
    category: str
    difficulty: str
    mood_range: Tuple[int, int]

    def suits(self, mood: float) -> bool:
        low, high = self.mood_range
        return low <= mood <= high

    def to_dict(self, completed: bool = False) -> Dict[str, Any]:
        """Client view; the mood range stays server-side."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "category": self.category,
            "difficulty": self.difficulty,
            "completed": completed,
        }


CATALOG: Tuple[Activity, ...] = (
    # Mindfulness
    Activity("breathing-exercise", "5-Minute Breathing Exercise",
             "Practice deep breathing to reduce stress and anxiety",
             "5 minutes", "Mindfulness", "Easy", (1, 10)),
    Activity("meditation", "Guided Meditation",
             "Listen to a calming meditation session",
             "10 minutes", "Mindfulness", "Medium", (1, 8)),
    Activity("body-scan", "Body Scan Meditation",
             "Progressive relaxation from head to toe",
             "15 minutes", "Mindfulness", "Medium", (1, 7)),

    # Physical
    Activity("walk-outside", "Take a Walk Outside",
             "Get some fresh air and gentle movement",
             "15 minutes", "Physical", "Easy", (3, 10)),
    Activity("stretching", "Gentle Stretching",
             "Release tension with simple stretches",
             "10 minutes", "Physical", "Easy", (1, 10)),
    Activity("dance-break", "Dance Break",
             "Put on your favorite song and move your body",
             "5 minutes", "Physical", "Easy", (4, 10)),

    # Reflection
    Activity("gratitude-journal", "Gratitude Journaling",
             "Write down three things you're grateful for today",
             "10 minutes", "Reflection", "Easy", (1, 10)),
    Activity("mood-reflection", "Mood Reflection",
             "Reflect on what influenced your mood today",
             "8 minutes", "Reflection", "Easy", (1, 8)),
    Activity("future-self", "Future Self Visualization",
             "Imagine your best self and what they would do",
             "12 minutes", "Reflection", "Medium", (3, 10)),

    # Creative
    Activity("doodle", "Free-form Doodling",
             "Let your creativity flow with simple drawing",
             "10 minutes", "Creative", "Easy", (2, 10)),
    Activity("music-listening", "Music Therapy",
             "Listen to music that matches or improves your mood",
             "15 minutes", "Creative", "Easy", (1, 10)),

    # Social
    Activity("reach-out", "Reach Out to Someone",
             "Send a message to a friend or family member",
             "5 minutes", "Social", "Easy", (1, 10)),
    Activity("compliment-self", "Self-Compassion Practice",
             "Write yourself a kind and encouraging message",
             "8 minutes", "Social", "Easy", (1, 8)),
)

CATALOG_BY_ID: Dict[str, Activity] = {a.id: a for a in CATALOG}


def average_mood(entries: Sequence[Dict[str, Any]]) -> float:
    """Mean of the entries' mood scores; 5 when there are none."""
    scores = [e["mood"] for e in entries if isinstance(e.get("mood"), (int, float))]
    if not scores:
        return DEFAULT_AVERAGE_MOOD
    return sum(scores) / len(scores)


def select_activities(
    mood: float,
    recent_ids: Iterable[str],
    catalog: Optional[Sequence[Activity]] = None,
    count: int = DAILY_ACTIVITY_COUNT,
) -> List[Activity]:
    """Pick up to count activities suited to mood and not done recently.

    Falls back to the first Easy activities when nothing qualifies.
    """
    pool = CATALOG if catalog is None else catalog
    recent = set(recent_ids)
    suitable = [a for a in pool if a.suits(mood) and a.id not in recent]
    if suitable:
        return suitable[:count]
    return [a for a in pool if a.difficulty == "Easy"][:count]
