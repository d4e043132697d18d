"""DSA problem routes. Reads are public, writes are admin only."""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.core.deps import CurrentUser, get_problem_service, require_admin
from app.core.errors import AppError, ErrorKind
from app.models.problem import LEVELS, Difficulty, Level
from app.services.problem_service import PROBLEM_NOT_FOUND_MESSAGE, ProblemService


router = APIRouter(prefix="/api/dsa", tags=["DSA Problems"])

INVALID_LEVEL_MESSAGE = "Invalid level. Must be: basic, medium, or advanced"


class CreateProblemRequest(BaseModel):
    name: str = Field(min_length=1)
    difficulty: Difficulty
    level: Level
    link: str = Field(min_length=1)
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class UpdateProblemRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    difficulty: Optional[Difficulty] = None
    level: Optional[Level] = None
    link: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


@router.get("")
def list_problems(problems: ProblemService = Depends(get_problem_service)):
    items = problems.list_all()
    return {"success": True, "count": len(items), "problems": [p.to_json() for p in items]}


@router.get("/level/{level}")
def list_problems_by_level(level: str, problems: ProblemService = Depends(get_problem_service)):
    if level not in LEVELS:
        raise AppError(ErrorKind.VALIDATION, INVALID_LEVEL_MESSAGE)
    items = problems.list_by_level(level)
    return {
        "success": True,
        "level": level,
        "count": len(items),
        "problems": [p.to_json() for p in items],
    }


@router.get("/{problem_id}")
def get_problem(problem_id: str, problems: ProblemService = Depends(get_problem_service)):
    problem = problems.get(problem_id)
    if not problem:
        raise AppError(ErrorKind.NOT_FOUND, PROBLEM_NOT_FOUND_MESSAGE)
    return {"success": True, "problem": problem.to_json()}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_problem(
    request: CreateProblemRequest,
    current_user: CurrentUser = Depends(require_admin),
    problems: ProblemService = Depends(get_problem_service),
):
    problem = problems.create(
        name=request.name,
        difficulty=request.difficulty.value,
        level=request.level.value,
        link=request.link,
        description=request.description,
        tags=request.tags,
    )
    return {"success": True, "message": "DSA problem created successfully", "problem": problem.to_json()}


@router.put("/{problem_id}")
def update_problem(
    problem_id: str,
    request: UpdateProblemRequest,
    current_user: CurrentUser = Depends(require_admin),
    problems: ProblemService = Depends(get_problem_service),
):
    problem = problems.update(problem_id, request.model_dump(exclude_unset=True))
    return {"success": True, "message": "Problem updated successfully", "problem": problem.to_json()}


@router.delete("/{problem_id}")
def delete_problem(
    problem_id: str,
    current_user: CurrentUser = Depends(require_admin),
    problems: ProblemService = Depends(get_problem_service),
):
    problems.delete(problem_id)
    return {"success": True, "message": "Problem deleted successfully"}
