"""Statistics repository protocol.

Every storage backend satisfies ``StatsRepository``. The protocol is
``@runtime_checkable`` so callers can guard with ``isinstance``.
"""
from typing import Any, Dict, Protocol, runtime_checkable

from ..models.level import GameSummary, LevelResult


class StatsRepositoryError(Exception):
    """Raised when a backend fails to read or write statistics."""


@runtime_checkable
class StatsRepository(Protocol):
    """Persistence contract for finished games.

    Lifecycle::

        repo.initialize()
        try:
            game_id = repo.record_game(summary)
            stats = repo.aggregate_for_user(user_id)
        finally:
            repo.close()
    """

    def initialize(self) -> None:
        """Open the backend and create its schema if needed."""
        ...

    def close(self) -> None:
        """Release backend resources. Safe to call multiple times."""
        ...

    def record_game_session(self, summary: GameSummary) -> int:
        """Store one finished game and return its id."""
        ...

    def record_level_result(self, game_session_id: int, result: LevelResult) -> None:
        """Store one level outcome belonging to a recorded game."""
        ...

    def record_game(self, summary: GameSummary) -> int:
        """Store a finished game and all of its level results atomically.

        Either every row is written or none is.
        """
        ...

    def aggregate_for_user(self, user_id: str) -> Dict[str, Any]:
        """Return overall, best, by-level and recent statistics for a user."""
        ...


def empty_aggregate() -> Dict[str, Any]:
    """Aggregate shape for a user with no recorded games."""
    return {
        "overall": {
            "total_games": 0,
            "games_won": 0,
            "avg_levels_per_game": None,
            "hardest_challenge_faced": None,
            "total_time_played": None,
            "total_strikes": None,
        },
        "best": {
            "fastest_completion": None,
            "fewest_strikes_completion": None,
        },
        "by_level": [],
        "recent": [],
    }
