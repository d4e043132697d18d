"""Stored document models."""
from app.models.user import Role, PublicUser, UserRecord
from app.models.problem import Level, LEVELS, Difficulty, Problem
from app.models.progress import LevelProgress, ProgressRecord, ProgressStats, LeaderboardEntry
from app.models.product import Product

__all__ = [
    "Role",
    "PublicUser",
    "UserRecord",
    "Level",
    "LEVELS",
    "Difficulty",
    "Problem",
    "LevelProgress",
    "ProgressRecord",
    "ProgressStats",
    "LeaderboardEntry",
    "Product",
]
