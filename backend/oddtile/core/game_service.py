"""Game service tying sessions, gameplay and statistics together."""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from ..config import get_settings
from ..models.level import GameSummary
from ..storage import StatsRepository, StatsRepositoryError, create_stats_repository
from .game import GameEngine, GameSession, SelectResult
from .generator import get_generator
from .session_store import SessionStore, get_session_store

logger = logging.getLogger(__name__)


class SessionNotFoundError(LookupError):
    """Raised when a request refers to no active session."""


@dataclass
class FinishedGame:
    """Final summary of a game and whether it reached persistent storage."""
    summary: GameSummary
    persisted: bool


class GameService:
    """Runs games for the HTTP layer.

    Sessions live in the session store until the game ends. Finished games
    of signed-in users are written to the statistics repository; a storage
    failure is logged and the result is still returned to the player.
    """

    def __init__(
        self,
        engine: GameEngine,
        store: SessionStore,
        repository: StatsRepository,
    ):
        self.engine = engine
        self.store = store
        self.repository = repository

    def start(self, user_id: Optional[str] = None) -> GameSession:
        """Create and store a new session at level 1."""
        self.store.expire()
        session_id = str(uuid.uuid4())
        session = self.engine.start(session_id, user_id=user_id)
        self.store.create(session_id, session)
        logger.info(
            "Started session %s (%s)",
            session_id,
            f"user {user_id}" if user_id else "guest",
        )
        return session

    def get(self, session_id: Optional[str]) -> GameSession:
        """
        Look up an active session.

        Raises:
            SessionNotFoundError: If the id is missing, unknown or expired.
        """
        session = self.store.get(session_id) if session_id else None
        if session is None:
            raise SessionNotFoundError("No active session")
        return session

    def select(self, session_id: Optional[str], row: int, tile: int) -> SelectResult:
        """Apply a tile selection, finishing the game if it ended."""
        session = self.get(session_id)
        result = self.engine.select_tile(session, row, tile)
        if result.summary is not None:
            result.persisted = self._finish(session, result.summary).persisted
        else:
            self.store.update(session.session_id, session)
        return result

    def quit(self, session_id: Optional[str]) -> FinishedGame:
        """End a game at the player's request."""
        session = self.get(session_id)
        summary = self.engine.abandon(session)
        return self._finish(session, summary)

    def _finish(self, session: GameSession, summary: GameSummary) -> FinishedGame:
        self.store.delete(session.session_id)
        persisted = False
        if summary.user_id is not None:
            persisted = self._persist(summary)
        logger.info(
            "Session %s ended: %s after %d level(s)",
            session.session_id,
            session.phase.value,
            len(summary.level_results),
        )
        return FinishedGame(summary=summary, persisted=persisted)

    def _persist(self, summary: GameSummary) -> bool:
        try:
            self.repository.record_game(summary)
        except StatsRepositoryError as e:
            logger.error("Error saving game session %s: %s", summary.session_id, e)
            return False
        return True


# Singleton instances
_stats_repository = None
_game_service = None


def get_stats_repository() -> StatsRepository:
    """Get or create the initialised statistics repository.

    If the configured backend cannot be opened, games are still playable:
    the error is logged and the null backend is used instead.
    """
    global _stats_repository
    if _stats_repository is None:
        settings = get_settings()
        repository = create_stats_repository(settings.stats_backend, settings.stats_db_path)
        try:
            repository.initialize()
        except StatsRepositoryError as e:
            logger.error("Stats backend '%s' unavailable, statistics disabled: %s", settings.stats_backend, e)
            repository = create_stats_repository("null")
            repository.initialize()
        _stats_repository = repository
    return _stats_repository


def get_game_service() -> GameService:
    """Get or create game service singleton instance."""
    global _game_service
    if _game_service is None:
        settings = get_settings()
        engine = GameEngine(
            generator=get_generator(),
            max_level=settings.max_level,
            max_strikes=settings.max_strikes,
        )
        _game_service = GameService(
            engine=engine,
            store=get_session_store(),
            repository=get_stats_repository(),
        )
    return _game_service
