"""Core business logic package.

This package contains the level generator, the game state machine,
the session store, and the game service.
"""
from .generator import LevelGenerator, get_generator, seeded_source
from .game import GameEngine, GamePhase, GameSession, InvalidMoveError, SelectOutcome
from .session_store import InMemorySessionStore, SessionStore, get_session_store
from .game_service import GameService, SessionNotFoundError, get_game_service

__all__ = [
    "LevelGenerator",
    "get_generator",
    "seeded_source",
    "GameEngine",
    "GamePhase",
    "GameSession",
    "InvalidMoveError",
    "SelectOutcome",
    "InMemorySessionStore",
    "SessionStore",
    "get_session_store",
    "GameService",
    "SessionNotFoundError",
    "get_game_service",
]
