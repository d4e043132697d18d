"""Per-user solved-problem tracking and leaderboard."""
import logging
from typing import Callable, List

from app.core.errors import AppError, ErrorKind
from app.db.store import DocumentTable, VersionConflict
from app.models.base import utc_now_iso
from app.models.problem import LEVELS
from app.models.progress import LeaderboardEntry, LevelProgress, ProgressRecord, ProgressStats

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 3
DEFAULT_LEADERBOARD_LIMIT = 10


def _stats(record: ProgressRecord, cls=ProgressStats, **extra):
    return cls(
        total_solved=record.total_solved,
        basic_solved=len(record.solved_in("basic")),
        medium_solved=len(record.solved_in("medium")),
        advanced_solved=len(record.solved_in("advanced")),
        last_updated=record.last_updated,
        **extra,
    )


class ProgressService:
    """Read-modify-write over one progress record per user.

    Writes are conditional on the record's ``version`` so two concurrent
    solves for the same user cannot silently drop one another; a conflicting
    write re-reads and re-applies the change.
    """

    def __init__(self, table: DocumentTable):
        self.table = table

    def get_progress(self, user_id: str) -> ProgressRecord:
        """Stored record, or an empty one (not persisted) for a new user."""
        item = self.table.get(user_id)
        if item:
            record = ProgressRecord.from_item(item)
            for level in LEVELS:
                record.progress_by_level.setdefault(level, LevelProgress())
            return record
        return ProgressRecord(user_id=user_id, last_updated=utc_now_iso())

    def _apply(self, user_id: str, change: Callable[[ProgressRecord], bool]) -> ProgressRecord:
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            record = self.get_progress(user_id)
            if not change(record):
                return record

            expected = record.version
            record.total_solved = len(record.solved_problems)
            record.last_updated = utc_now_iso()
            record.version = expected + 1
            try:
                self.table.put(record.to_item(), expected_version=expected)
                return record
            except VersionConflict:
                logger.info("Progress for %s changed concurrently (attempt %d)", user_id, attempt)

        raise AppError(ErrorKind.CONFLICT, "Progress was modified concurrently, please retry")

    def mark_solved(self, user_id: str, problem_id: str, level: str) -> ProgressRecord:
        """Add ``problem_id`` to the global and per-level lists. Idempotent."""

        def solve(record: ProgressRecord) -> bool:
            if problem_id in record.solved_problems:
                return False
            record.solved_problems.append(problem_id)
            entry = record.progress_by_level.setdefault(level, LevelProgress())
            if problem_id not in entry.solved:
                entry.solved.append(problem_id)
            return True

        return self._apply(user_id, solve)

    def mark_unsolved(self, user_id: str, problem_id: str, level: str) -> ProgressRecord:
        """Remove ``problem_id`` from the global list and every level list."""

        def unsolve(record: ProgressRecord) -> bool:
            changed = problem_id in record.solved_problems
            record.solved_problems = [p for p in record.solved_problems if p != problem_id]
            record.progress_by_level.setdefault(level, LevelProgress())
            for entry in record.progress_by_level.values():
                if problem_id in entry.solved:
                    entry.solved = [p for p in entry.solved if p != problem_id]
                    changed = True
            return changed

        return self._apply(user_id, unsolve)

    def get_stats(self, user_id: str) -> ProgressStats:
        return _stats(self.get_progress(user_id))

    def get_leaderboard(self, limit: int = DEFAULT_LEADERBOARD_LIMIT) -> List[LeaderboardEntry]:
        """Top users by problems solved; ties ordered by userId."""
        limit = max(1, limit)
        records = [ProgressRecord.from_item(item) for item in self.table.scan()]
        records.sort(key=lambda r: (-r.total_solved, r.user_id))
        return [_stats(r, LeaderboardEntry, user_id=r.user_id) for r in records[:limit]]
