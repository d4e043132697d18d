"""Per-user solved-problem progress."""
from typing import Dict, List, Optional

from pydantic import Field

from app.models.base import Document
from app.models.problem import LEVELS


class LevelProgress(Document):
    solved: List[str] = []
    total: int = 0


def _empty_levels() -> Dict[str, LevelProgress]:
    return {level: LevelProgress() for level in LEVELS}


class ProgressRecord(Document):
    """Row in the progress table, keyed by userId.

    Invariants: ``total_solved == len(solved_problems)`` and every per-level
    ``solved`` list is a subset of ``solved_problems``.
    """

    user_id: str
    solved_problems: List[str] = []
    progress_by_level: Dict[str, LevelProgress] = Field(default_factory=_empty_levels)
    total_solved: int = 0
    last_updated: Optional[str] = None
    version: int = 0

    def solved_in(self, level: str) -> List[str]:
        entry = self.progress_by_level.get(level)
        return list(entry.solved) if entry else []


class ProgressStats(Document):
    total_solved: int = 0
    basic_solved: int = 0
    medium_solved: int = 0
    advanced_solved: int = 0
    last_updated: Optional[str] = None


class LeaderboardEntry(ProgressStats):
    user_id: str
