"""Null (no-op) statistics backend.

``NullStatsRepository`` satisfies ``StatsRepository`` without any I/O.
Writes are discarded and every user reads back as having no games.
"""
from typing import Any, Dict

from ...models.level import GameSummary, LevelResult
from ..protocols import empty_aggregate


class NullStatsRepository:
    """No-op repository for deployments without account statistics."""

    def initialize(self) -> None:
        """No-op initialisation."""

    def close(self) -> None:
        """No-op close."""

    def record_game_session(self, summary: GameSummary) -> int:
        """Discard the game and return 0."""
        return 0

    def record_level_result(self, game_session_id: int, result: LevelResult) -> None:
        """Discard the level result."""

    def record_game(self, summary: GameSummary) -> int:
        """Discard the game and its levels and return 0."""
        return 0

    def aggregate_for_user(self, user_id: str) -> Dict[str, Any]:
        """Return an empty aggregate."""
        return empty_aggregate()
