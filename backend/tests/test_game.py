"""Tests for the game state machine."""
import pytest
from oddtile.core.game import (
    GameEngine,
    GamePhase,
    InvalidMoveError,
    SelectOutcome,
)
from oddtile.core.generator import LevelGenerator, seeded_source


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def odd_tile(session, row):
    return session.level_spec.row_specs[row].odd_tile_index


def wrong_tile(session, row):
    return (odd_tile(session, row) + 1) % session.level_spec.tiles_per_row


def solve_level(engine, session):
    """Select the odd tile in every row; return the last result."""
    result = None
    for row in range(session.level_spec.rows):
        result = engine.select_tile(session, row, odd_tile(session, row))
    return result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    """Create engine with a seeded generator and fake clock."""
    generator = LevelGenerator(random_source=seeded_source(2024))
    return GameEngine(generator=generator, max_level=10, max_strikes=3, clock=clock)


@pytest.fixture
def session(engine):
    return engine.start("session-1", user_id="user-1")


class TestStart:
    """Test cases for starting a game."""

    def test_start_at_level_one(self, session, clock):
        """A new session starts at level 1 with nothing recorded."""
        assert session.level == 1
        assert session.phase == GamePhase.IN_LEVEL
        assert session.strikes_used == 0
        assert session.solved_rows == set()
        assert session.level_results == []
        assert session.smallest_difference is None
        assert session.started_at == clock.now
        assert session.level_spec.level == 1

    def test_invalid_engine_limits(self):
        with pytest.raises(ValueError):
            GameEngine(generator=LevelGenerator(), max_level=0)


class TestSolveRow:
    """Test cases for solving rows."""

    def test_partial_solve_stays_on_level(self, engine, session):
        result = engine.select_tile(session, 0, odd_tile(session, 0))

        assert result.outcome == SelectOutcome.SOLVED
        assert not result.level_completed
        assert session.solved_rows == {0}
        assert session.level == 1

    def test_solving_all_rows_advances(self, engine, session, clock):
        """Finishing every row records the level and starts the next."""
        clock.advance(12)
        result = solve_level(engine, session)

        assert result.level_completed
        assert result.next_level is not None
        assert session.level == 2
        assert session.level_spec is result.next_level
        assert session.solved_rows == set()
        assert len(session.level_results) == 1

        recorded = session.level_results[0]
        assert recorded.level == 1
        assert recorded.time_seconds == 12
        assert recorded.strikes == 0
        assert not recorded.failed

    def test_solved_row_selection_ignored(self, engine, session):
        """Clicking a solved row does nothing, even on a wrong tile."""
        engine.select_tile(session, 0, odd_tile(session, 0))
        again = engine.select_tile(session, 0, odd_tile(session, 0))
        wrong = engine.select_tile(session, 0, wrong_tile(session, 0))

        assert again.outcome == SelectOutcome.IGNORED
        assert wrong.outcome == SelectOutcome.IGNORED
        assert session.strikes_used == 0

    def test_win_after_last_level(self, clock):
        """Clearing the final level wins the game."""
        engine = GameEngine(
            generator=LevelGenerator(random_source=seeded_source(5)),
            max_level=2,
            clock=clock,
        )
        session = engine.start("s")
        solve_level(engine, session)
        clock.advance(30)
        result = solve_level(engine, session)

        assert session.phase == GamePhase.WON
        assert result.level_completed
        assert result.next_level is None
        summary = result.summary
        assert summary.game_completed
        assert summary.levels_completed == 2
        assert summary.total_time_seconds == 30
        assert [r.level for r in summary.level_results] == [1, 2]

    def test_level_results_carry_difficulty(self, engine, session):
        spec = session.level_spec
        solve_level(engine, session)
        recorded = session.level_results[0]

        assert recorded.average_color_difference == spec.average_color_difference
        assert recorded.smallest_difference == spec.smallest_row_difference


class TestMissRow:
    """Test cases for strikes."""

    def test_miss_adds_strike(self, engine, session):
        result = engine.select_tile(session, 0, wrong_tile(session, 0))

        assert result.outcome == SelectOutcome.MISS
        assert session.strikes_used == 1
        assert session.phase == GamePhase.IN_LEVEL
        assert result.summary is None

    def test_three_strikes_lose(self, engine, session):
        """Max strikes ends the game regardless of rows remaining."""
        engine.select_tile(session, 0, odd_tile(session, 0))
        for _ in range(3):
            result = engine.select_tile(session, 1, wrong_tile(session, 1))

        assert session.phase == GamePhase.LOST
        assert result.summary is not None
        assert not result.summary.game_completed
        assert result.summary.levels_completed == 0
        assert result.summary.total_strikes == 3
        assert session.level_results[-1].failed

    def test_strikes_reset_each_level(self, engine, session):
        engine.select_tile(session, 0, wrong_tile(session, 0))
        engine.select_tile(session, 0, wrong_tile(session, 0))
        solve_level(engine, session)

        assert session.level == 2
        assert session.strikes_used == 0
        assert session.level_results[0].strikes == 2

    def test_strikes_total_across_levels(self, engine, session):
        engine.select_tile(session, 0, wrong_tile(session, 0))
        solve_level(engine, session)
        engine.select_tile(session, 0, wrong_tile(session, 0))
        engine.select_tile(session, 0, wrong_tile(session, 0))
        result = engine.select_tile(session, 0, wrong_tile(session, 0))

        assert result.summary.total_strikes == 4
        assert result.summary.levels_completed == 1


class TestInvalidMoves:
    """Test cases for rejected selections."""

    @pytest.mark.parametrize("row", [-1, 3, 100])
    def test_row_out_of_range(self, engine, session, row):
        with pytest.raises(InvalidMoveError):
            engine.select_tile(session, row, 0)

    @pytest.mark.parametrize("tile", [-1, 9])
    def test_tile_out_of_range(self, engine, session, tile):
        with pytest.raises(InvalidMoveError):
            engine.select_tile(session, 0, tile)

    def test_no_moves_after_game_over(self, engine, session):
        for _ in range(3):
            engine.select_tile(session, 0, wrong_tile(session, 0))

        with pytest.raises(InvalidMoveError):
            engine.select_tile(session, 0, odd_tile(session, 0))


class TestHardestChallenge:
    """Test cases for the running smallest difference."""

    def test_smallest_difference_is_minimum_over_levels(self, engine, session):
        faced = []
        for _ in range(4):
            faced.append(session.level_spec)
            solve_level(engine, session)

        smallest = min(spec.smallest_row_difference for spec in faced)
        assert session.smallest_difference == smallest
        first_with_min = next(s for s in faced if s.smallest_row_difference == smallest)
        assert session.smallest_difference_example == first_with_min.hardest_row_example

    def test_failed_level_counts(self, engine, session):
        spec = session.level_spec
        for _ in range(3):
            engine.select_tile(session, 0, wrong_tile(session, 0))

        assert session.smallest_difference == spec.smallest_row_difference


class TestAbandon:
    """Test cases for quitting."""

    def test_abandon_records_failed_level(self, engine, session, clock):
        solve_level(engine, session)
        clock.advance(7)
        summary = engine.abandon(session)

        assert session.phase == GamePhase.LOST
        assert [r.failed for r in summary.level_results] == [False, True]
        assert summary.level_results[-1].time_seconds == 7
        assert summary.levels_completed == 1
        assert summary.user_id == "user-1"

    def test_abandon_finished_game_is_stable(self, engine, session):
        for _ in range(3):
            engine.select_tile(session, 0, wrong_tile(session, 0))
        summary = engine.abandon(session)

        assert len(summary.level_results) == 1

    def test_summary_wire_format(self, engine, session):
        summary = engine.abandon(session)
        data = summary.to_dict()

        assert data["gameCompleted"] is False
        assert data["levelsCompleted"] == 0
        assert data["smallestDifferenceExample"]["baseColor"].startswith("hsl(")
        assert data["levelStats"][0]["failed"] is True
