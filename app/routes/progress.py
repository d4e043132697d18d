"""Progress routes. All require a bearer access token."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.core.deps import CurrentUser, get_current_user, get_progress_service
from app.core.errors import AppError, ErrorKind
from app.models.problem import LEVELS
from app.services.progress_service import DEFAULT_LEADERBOARD_LIMIT, ProgressService


router = APIRouter(prefix="/api/progress", tags=["Progress"])


class SolveRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    problem_id: Optional[str] = None
    level: Optional[str] = None


def _validated(request: SolveRequest) -> SolveRequest:
    if not request.problem_id or not request.level:
        raise AppError(ErrorKind.VALIDATION, "problemId and level are required")
    if request.level not in LEVELS:
        raise AppError(ErrorKind.VALIDATION, "Invalid level. Must be: basic, medium, or advanced")
    return request


@router.get("")
def get_progress(
    current_user: CurrentUser = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
):
    record = progress.get_progress(current_user.user_id)
    return {"success": True, "progress": record.to_json(exclude={"version"})}


@router.get("/stats")
def get_stats(
    current_user: CurrentUser = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
):
    stats = progress.get_stats(current_user.user_id)
    return {"success": True, "stats": stats.to_json()}


@router.get("/leaderboard")
def get_leaderboard(
    limit: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
):
    try:
        size = int(limit or 0) or DEFAULT_LEADERBOARD_LIMIT
    except ValueError:
        size = DEFAULT_LEADERBOARD_LIMIT
    entries = progress.get_leaderboard(size)
    return {"success": True, "leaderboard": [e.to_json() for e in entries]}


@router.post("/solve")
def solve_problem(
    request: SolveRequest,
    current_user: CurrentUser = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
):
    request = _validated(request)
    record = progress.mark_solved(current_user.user_id, request.problem_id, request.level)
    return {
        "success": True,
        "message": "Problem marked as solved",
        "progress": record.to_json(exclude={"version"}),
    }


@router.post("/unsolve")
def unsolve_problem(
    request: SolveRequest,
    current_user: CurrentUser = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
):
    request = _validated(request)
    record = progress.mark_unsolved(current_user.user_id, request.problem_id, request.level)
    return {
        "success": True,
        "message": "Problem marked as unsolved",
        "progress": record.to_json(exclude={"version"}),
    }
