"""Statistics repository factory.

Usage::

    from oddtile.storage.factory import create_stats_repository

    repo = create_stats_repository("sqlite", db_path="game_database.db")
    repo.initialize()
"""
from typing import Optional

from .protocols import StatsRepository, StatsRepositoryError


def create_stats_repository(backend: str, db_path: Optional[str] = None) -> StatsRepository:
    """Construct a statistics backend.

    Args:
        backend: ``"null"`` or ``"sqlite"``.
        db_path: Database path for the SQLite backend.

    Returns:
        An uninitialised ``StatsRepository`` implementation.

    Raises:
        StatsRepositoryError: If the backend is unknown or db_path is missing.
    """
    if backend == "null":
        from .backends.null import NullStatsRepository

        return NullStatsRepository()

    if backend == "sqlite":
        if not db_path:
            raise StatsRepositoryError("backend='sqlite' requires a db_path")
        from .backends.sqlite import SQLiteStatsRepository

        return SQLiteStatsRepository(db_path)

    raise StatsRepositoryError(
        f"Unknown stats backend: {backend!r}. Supported backends: 'null', 'sqlite'."
    )
