"""DSA problem model."""
import enum
from typing import List

from app.models.base import Document


class Level(str, enum.Enum):
    BASIC = "basic"
    MEDIUM = "medium"
    ADVANCED = "advanced"


LEVELS = tuple(level.value for level in Level)


class Difficulty(str, enum.Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class Problem(Document):
    problem_id: str
    name: str
    difficulty: Difficulty
    level: Level
    link: str
    description: str = ""
    tags: List[str] = []
    created_at: str
    updated_at: str
