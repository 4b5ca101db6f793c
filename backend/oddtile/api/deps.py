"""API dependencies."""
from typing import Optional

from fastapi import Cookie, Header

from ..core.generator import get_generator, LevelGenerator
from ..core.game_service import get_game_service, get_stats_repository, GameService
from ..storage import StatsRepository

SESSION_COOKIE = "sessionId"


def get_level_generator() -> LevelGenerator:
    """Dependency for level generator."""
    return get_generator()


def get_game() -> GameService:
    """Dependency for game service."""
    return get_game_service()


def get_stats() -> StatsRepository:
    """Dependency for statistics repository."""
    return get_stats_repository()


def get_session_id(session_id: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE)) -> Optional[str]:
    """Session id from the session cookie."""
    return session_id


def get_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Account id forwarded by the upstream auth layer, if any."""
    return x_user_id or None
