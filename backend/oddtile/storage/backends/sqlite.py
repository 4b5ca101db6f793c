"""SQLite statistics backend.

Persists finished games to a local SQLite database. Satisfies the
``StatsRepository`` protocol.

Usage::

    repo = SQLiteStatsRepository("game_database.db")
    repo.initialize()
    try:
        game_id = repo.record_game(summary)
    finally:
        repo.close()
"""
import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...models.level import GameSummary, LevelResult
from ..protocols import StatsRepositoryError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS game_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    started_at TEXT NOT NULL,
    completed_at TEXT,
    levels_completed INTEGER NOT NULL DEFAULT 0,
    total_time_seconds INTEGER,
    total_strikes INTEGER DEFAULT 0,
    game_completed BOOLEAN DEFAULT 0,
    smallest_difference REAL,
    smallest_difference_example TEXT
);

CREATE TABLE IF NOT EXISTS level_results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_session_id INTEGER NOT NULL,
    level_number INTEGER NOT NULL,
    time_seconds INTEGER NOT NULL,
    strikes INTEGER NOT NULL DEFAULT 0,
    average_color_difference REAL,
    completed BOOLEAN DEFAULT 1,
    failed BOOLEAN DEFAULT 0,
    FOREIGN KEY (game_session_id) REFERENCES game_sessions (id)
);

CREATE INDEX IF NOT EXISTS idx_game_sessions_user ON game_sessions (user_id);
CREATE INDEX IF NOT EXISTS idx_level_results_game ON level_results (game_session_id);
"""

OVERALL_QUERY = """
SELECT
    COUNT(*) AS total_games,
    COUNT(CASE WHEN game_completed = 1 THEN 1 END) AS games_won,
    CAST(AVG(levels_completed) AS REAL) AS avg_levels_per_game,
    MIN(smallest_difference) AS hardest_challenge_faced,
    SUM(total_time_seconds) AS total_time_played,
    SUM(total_strikes) AS total_strikes
FROM game_sessions
WHERE user_id = ?
"""

BEST_QUERY = """
SELECT
    MIN(total_time_seconds) AS fastest_completion,
    MIN(total_strikes) AS fewest_strikes_completion
FROM game_sessions
WHERE user_id = ? AND game_completed = 1
"""

BY_LEVEL_QUERY = """
SELECT
    lr.level_number,
    COUNT(*) AS times_played,
    CAST(AVG(lr.time_seconds) AS REAL) AS avg_time,
    CAST(AVG(lr.strikes) AS REAL) AS avg_strikes,
    COUNT(CASE WHEN lr.completed = 1 THEN 1 END) AS times_completed,
    CAST(COUNT(CASE WHEN lr.completed = 1 THEN 1 END) * 100.0 / COUNT(*) AS REAL) AS success_rate
FROM level_results lr
JOIN game_sessions gs ON lr.game_session_id = gs.id
WHERE gs.user_id = ?
GROUP BY lr.level_number
ORDER BY lr.level_number
"""

RECENT_QUERY = """
SELECT
    started_at,
    levels_completed,
    total_time_seconds,
    total_strikes,
    game_completed,
    smallest_difference
FROM game_sessions
WHERE user_id = ?
ORDER BY started_at DESC, id DESC
LIMIT ?
"""


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


class SQLiteStatsRepository:
    """SQLite-backed statistics repository.

    One connection is shared by all request threads and serialised with a
    lock. ``":memory:"`` gives a throwaway database for tests.

    Args:
        db_path: Database file path or ``":memory:"``.
        recent_limit: Number of games returned in ``recent``.
    """

    def __init__(self, db_path: str = MEMORY_PATH, recent_limit: int = 10):
        self.db_path = db_path
        self.recent_limit = recent_limit
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Open the connection and create tables.

        Raises:
            StatsRepositoryError: If the database cannot be opened.
        """
        if self._conn is not None:
            return
        try:
            if self.db_path != MEMORY_PATH:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            conn.executescript(SCHEMA)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StatsRepositoryError(f"Failed to open stats database {self.db_path}: {e}") from e
        self._conn = conn
        logger.info("SQLite stats database ready at %s", self.db_path)

    def close(self) -> None:
        """Close the connection. Safe to call multiple times."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record_game_session(self, summary: GameSummary) -> int:
        """Insert a finished game.

        Args:
            summary: End-of-game summary. Must carry a user id.

        Returns:
            The new ``game_sessions`` row id.

        Raises:
            StatsRepositoryError: On a missing user id or database error.
        """
        params = self._game_params(summary)
        with self._lock:
            conn = self._connection()
            try:
                game_id = self._insert_game(conn, params)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StatsRepositoryError(f"Failed to record game session: {e}") from e
            return game_id

    def record_level_result(self, game_session_id: int, result: LevelResult) -> None:
        """Insert one level outcome.

        Raises:
            StatsRepositoryError: On a database error, including an unknown
                ``game_session_id``.
        """
        with self._lock:
            conn = self._connection()
            try:
                self._insert_level(conn, game_session_id, result)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StatsRepositoryError(f"Failed to record level result: {e}") from e

    def record_game(self, summary: GameSummary) -> int:
        """Insert a finished game and its level results in one transaction.

        Returns:
            The new ``game_sessions`` row id.

        Raises:
            StatsRepositoryError: On a missing user id or database error. No
                rows are left behind on failure.
        """
        params = self._game_params(summary)
        with self._lock:
            conn = self._connection()
            try:
                game_id = self._insert_game(conn, params)
                for result in summary.level_results:
                    self._insert_level(conn, game_id, result)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StatsRepositoryError(f"Failed to record game: {e}") from e
            return game_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def aggregate_for_user(self, user_id: str) -> Dict[str, Any]:
        """Aggregate a user's recorded games.

        Returns:
            Dict with ``overall``, ``best``, ``by_level`` and ``recent``.
        """
        with self._lock:
            conn = self._connection()
            try:
                overall = dict(conn.execute(OVERALL_QUERY, (user_id,)).fetchone())
                best = dict(conn.execute(BEST_QUERY, (user_id,)).fetchone())
                by_level = self._rows(conn.execute(BY_LEVEL_QUERY, (user_id,)))
                recent = self._rows(conn.execute(RECENT_QUERY, (user_id, self.recent_limit)))
            except sqlite3.Error as e:
                raise StatsRepositoryError(f"Failed to aggregate stats for {user_id}: {e}") from e

        for game in recent:
            game["game_completed"] = bool(game["game_completed"])
        return {
            "overall": overall,
            "best": best,
            "by_level": by_level,
            "recent": recent,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StatsRepositoryError("Repository not initialized; call initialize() first")
        return self._conn

    @staticmethod
    def _game_params(summary: GameSummary) -> tuple:
        if summary.user_id is None:
            raise StatsRepositoryError("Cannot record a game without a user id")
        example = summary.smallest_difference_example
        return (
            summary.user_id,
            _iso(summary.started_at),
            _iso(summary.completed_at),
            summary.levels_completed,
            summary.total_time_seconds,
            summary.total_strikes,
            summary.game_completed,
            summary.smallest_difference,
            json.dumps(example.to_dict()) if example else None,
        )

    @staticmethod
    def _insert_game(conn: sqlite3.Connection, params: tuple) -> int:
        cursor = conn.execute(
            """
            INSERT INTO game_sessions (
                user_id, started_at, completed_at, levels_completed,
                total_time_seconds, total_strikes, game_completed,
                smallest_difference, smallest_difference_example
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            params,
        )
        return cursor.lastrowid

    @staticmethod
    def _insert_level(conn: sqlite3.Connection, game_session_id: int, result: LevelResult) -> None:
        conn.execute(
            """
            INSERT INTO level_results (
                game_session_id, level_number, time_seconds, strikes,
                average_color_difference, completed, failed
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                game_session_id,
                result.level,
                result.time_seconds,
                result.strikes,
                result.average_color_difference,
                not result.failed,
                result.failed,
            ),
        )

    @staticmethod
    def _rows(cursor: sqlite3.Cursor) -> List[Dict[str, Any]]:
        return [dict(row) for row in cursor.fetchall()]
