"""DSA problem CRUD."""
import logging
from typing import List, Optional

from app.core.errors import AppError, ErrorKind
from app.db.store import DocumentTable, ScanFilter
from app.models.base import utc_now_iso
from app.models.problem import Problem
from app.utils.ids import generate_id

logger = logging.getLogger(__name__)

PROBLEM_NOT_FOUND_MESSAGE = "Problem not found"
IMMUTABLE_FIELDS = {"problem_id", "created_at", "updated_at"}


def _unique(tags: Optional[List[str]]) -> List[str]:
    return list(dict.fromkeys(tags or []))


class ProblemService:
    def __init__(self, table: DocumentTable):
        self.table = table

    def create(
        self,
        name: str,
        difficulty: str,
        level: str,
        link: str,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Problem:
        now = utc_now_iso()
        problem = Problem(
            problem_id=generate_id("problem"),
            name=name,
            difficulty=difficulty,
            level=level,
            link=link,
            description=description or "",
            tags=_unique(tags),
            created_at=now,
            updated_at=now,
        )
        self.table.put(problem.to_item())
        logger.info("Created problem %s (%s)", problem.problem_id, problem.level.value)
        return problem

    def list_all(self) -> List[Problem]:
        return [Problem.from_item(item) for item in self.table.scan()]

    def list_by_level(self, level: str) -> List[Problem]:
        items = self.table.scan(ScanFilter(equals={"level": level}))
        return [Problem.from_item(item) for item in items]

    def get(self, problem_id: str) -> Optional[Problem]:
        item = self.table.get(problem_id)
        return Problem.from_item(item) if item else None

    def update(self, problem_id: str, updates: dict) -> Problem:
        """Merge ``updates`` (snake_case field names) over the stored problem.

        The problem must already exist; an update never creates one.
        """
        problem = self.get(problem_id)
        if not problem:
            raise AppError(ErrorKind.NOT_FOUND, PROBLEM_NOT_FOUND_MESSAGE)

        changes = {k: v for k, v in updates.items() if k not in IMMUTABLE_FIELDS and v is not None}
        if "tags" in changes:
            changes["tags"] = _unique(changes["tags"])
        merged = problem.model_dump()
        merged.update(changes)
        merged["updated_at"] = utc_now_iso()

        updated = Problem.model_validate(merged)
        self.table.put(updated.to_item())
        return updated

    def delete(self, problem_id: str) -> None:
        # Solved lists in user progress are left untouched
        if not self.table.delete(problem_id):
            raise AppError(ErrorKind.NOT_FOUND, PROBLEM_NOT_FOUND_MESSAGE)
        logger.info("Deleted problem %s", problem_id)
