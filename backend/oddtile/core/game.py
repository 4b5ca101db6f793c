"""Game progress state machine.

A session moves through the levels one at a time:

    start -> in_level(1) -> in_level(2) -> ... -> won
                  |              |
                  +---- lost <---+   (max strikes on one level, or quit)

Each finished level is folded into the session's result history together
with the smallest color difference faced so far.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from ..models.level import (
    DifficultyExample,
    GameSummary,
    LevelResult,
    LevelSpec,
)
from .generator import LevelGenerator, get_generator

logger = logging.getLogger(__name__)


class InvalidMoveError(ValueError):
    """Raised when a selection does not apply to the current board."""


class GamePhase(str, Enum):
    """Session lifecycle state."""
    IN_LEVEL = "in_level"
    WON = "won"
    LOST = "lost"


class SelectOutcome(str, Enum):
    """Effect of a tile selection."""
    SOLVED = "solved"
    MISS = "miss"
    IGNORED = "ignored"


@dataclass
class GameSession:
    """Mutable state of one game in progress."""
    session_id: str
    level: int
    level_spec: LevelSpec
    started_at: float
    level_started_at: float
    user_id: Optional[str] = None
    phase: GamePhase = GamePhase.IN_LEVEL
    strikes_used: int = 0
    solved_rows: Set[int] = field(default_factory=set)
    level_results: List[LevelResult] = field(default_factory=list)
    smallest_difference: Optional[int] = None
    smallest_difference_example: Optional[DifficultyExample] = None

    @property
    def is_over(self) -> bool:
        return self.phase != GamePhase.IN_LEVEL

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the client wire format."""
        example = self.smallest_difference_example
        return {
            "level": self.level,
            "phase": self.phase.value,
            "strikesUsed": self.strikes_used,
            "solvedRows": sorted(self.solved_rows),
            "levelStats": [r.to_dict() for r in self.level_results],
            "smallestDifference": self.smallest_difference,
            "smallestDifferenceExample": example.to_dict() if example else None,
            "isAuthenticated": self.user_id is not None,
            **self.level_spec.to_dict(),
        }


@dataclass
class SelectResult:
    """Result of applying one tile selection to a session."""
    outcome: SelectOutcome
    session: GameSession
    level_completed: bool = False
    next_level: Optional[LevelSpec] = None
    summary: Optional[GameSummary] = None
    persisted: bool = False  # set by the service once a finished game is stored


class GameEngine:
    """Applies gameplay events to sessions."""

    def __init__(
        self,
        generator: Optional[LevelGenerator] = None,
        max_level: int = 10,
        max_strikes: int = 3,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize engine.

        Args:
            generator: Level generator. Defaults to the shared instance.
            max_level: Last level; finishing it wins the game.
            max_strikes: Strikes on a single level that end the game.
            clock: Wall-clock time source in seconds. Defaults to time.time.
        """
        if max_level < 1 or max_strikes < 1:
            raise ValueError("max_level and max_strikes must be positive")
        self.generator = generator or get_generator()
        self.max_level = max_level
        self.max_strikes = max_strikes
        self._clock = clock or time.time

    def start(self, session_id: str, user_id: Optional[str] = None) -> GameSession:
        """Create a session at level 1 with no strikes and no history."""
        now = self._clock()
        return GameSession(
            session_id=session_id,
            user_id=user_id,
            level=1,
            level_spec=self.generator.generate(1),
            started_at=now,
            level_started_at=now,
        )

    def select_tile(self, session: GameSession, row: int, tile: int) -> SelectResult:
        """
        Apply a tile selection.

        Selecting the odd tile solves the row; any other tile is a strike.
        Selections on an already solved row are ignored.

        Raises:
            InvalidMoveError: If the game is over or row/tile is off the board.
        """
        self._check_row(session, row)
        if not 0 <= tile < session.level_spec.tiles_per_row:
            raise InvalidMoveError(
                f"Tile index {tile} out of range (0-{session.level_spec.tiles_per_row - 1})"
            )
        if row in session.solved_rows:
            return SelectResult(outcome=SelectOutcome.IGNORED, session=session)

        if tile == session.level_spec.row_specs[row].odd_tile_index:
            return self.solve_row(session, row)
        return self.miss_row(session, row)

    def solve_row(self, session: GameSession, row: int) -> SelectResult:
        """Mark a row solved, advancing the level when every row is solved."""
        self._check_row(session, row)
        if row in session.solved_rows:
            return SelectResult(outcome=SelectOutcome.IGNORED, session=session)

        session.solved_rows.add(row)
        if len(session.solved_rows) < session.level_spec.rows:
            return SelectResult(outcome=SelectOutcome.SOLVED, session=session)

        self._finish_level(session, failed=False)

        if session.level >= self.max_level:
            session.phase = GamePhase.WON
            logger.info("Session %s won after %d levels", session.session_id, session.level)
            return SelectResult(
                outcome=SelectOutcome.SOLVED,
                session=session,
                level_completed=True,
                summary=self.summarize(session),
            )

        next_spec = self.generator.generate(session.level + 1)
        session.level += 1
        session.level_spec = next_spec
        session.strikes_used = 0
        session.solved_rows = set()
        session.level_started_at = self._clock()
        logger.debug("Session %s advanced to level %d", session.session_id, session.level)
        return SelectResult(
            outcome=SelectOutcome.SOLVED,
            session=session,
            level_completed=True,
            next_level=next_spec,
        )

    def miss_row(self, session: GameSession, row: int) -> SelectResult:
        """Record a wrong selection, losing the game at max strikes."""
        self._check_row(session, row)
        if row in session.solved_rows:
            return SelectResult(outcome=SelectOutcome.IGNORED, session=session)

        session.strikes_used += 1
        if session.strikes_used < self.max_strikes:
            return SelectResult(outcome=SelectOutcome.MISS, session=session)

        self._finish_level(session, failed=True)
        session.phase = GamePhase.LOST
        logger.info("Session %s lost on level %d", session.session_id, session.level)
        return SelectResult(
            outcome=SelectOutcome.MISS,
            session=session,
            summary=self.summarize(session),
        )

    def abandon(self, session: GameSession) -> GameSummary:
        """End a game early. The level in progress counts as failed."""
        if not session.is_over:
            self._finish_level(session, failed=True)
            session.phase = GamePhase.LOST
            logger.info("Session %s quit on level %d", session.session_id, session.level)
        return self.summarize(session)

    def summarize(self, session: GameSession) -> GameSummary:
        """Build the end-of-game summary for a session."""
        return GameSummary(
            session_id=session.session_id,
            user_id=session.user_id,
            started_at=session.started_at,
            completed_at=self._clock(),
            level_results=list(session.level_results),
            smallest_difference=session.smallest_difference,
            smallest_difference_example=session.smallest_difference_example,
            game_completed=session.phase == GamePhase.WON,
        )

    def _finish_level(self, session: GameSession, failed: bool) -> LevelResult:
        """Append the current level to the history and fold in its hardest row."""
        spec = session.level_spec
        result = LevelResult(
            level=session.level,
            time_seconds=int(self._clock() - session.level_started_at),
            strikes=session.strikes_used,
            average_color_difference=spec.average_color_difference,
            smallest_difference=spec.smallest_row_difference,
            failed=failed,
        )
        session.level_results.append(result)

        if (
            session.smallest_difference is None
            or spec.smallest_row_difference < session.smallest_difference
        ):
            session.smallest_difference = spec.smallest_row_difference
            session.smallest_difference_example = spec.hardest_row_example
        return result

    def _check_row(self, session: GameSession, row: int) -> None:
        if session.is_over:
            raise InvalidMoveError(f"Game is over ({session.phase.value})")
        if not 0 <= row < session.level_spec.rows:
            raise InvalidMoveError(
                f"Row index {row} out of range (0-{session.level_spec.rows - 1})"
            )
