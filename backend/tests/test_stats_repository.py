"""Tests for statistics repositories."""
import pytest
from oddtile.models.level import DifficultyExample, GameSummary, LevelResult
from oddtile.storage import StatsRepository, StatsRepositoryError, create_stats_repository, empty_aggregate
from oddtile.storage.backends.null import NullStatsRepository
from oddtile.storage.backends.sqlite import SQLiteStatsRepository


def make_summary(user_id="user-1", completed=False, strikes=(0, 3), times=(10, 20), started=1_700_000_000.0):
    """Build a summary with one result per strikes entry; last is failed unless completed."""
    results = []
    for i, (s, t) in enumerate(zip(strikes, times)):
        last = i == len(strikes) - 1
        results.append(
            LevelResult(
                level=i + 1,
                time_seconds=t,
                strikes=s,
                average_color_difference=20.0 - i,
                smallest_difference=18 - i,
                failed=last and not completed,
            )
        )
    example = DifficultyExample("hsl(10, 70%, 50%)", "hsl(10, 70%, 67%)", 17, False)
    return GameSummary(
        session_id="s",
        user_id=user_id,
        started_at=started,
        completed_at=started + sum(times),
        level_results=results,
        smallest_difference=min(r.smallest_difference for r in results),
        smallest_difference_example=example,
        game_completed=completed,
    )


def record(repo, summary):
    game_id = repo.record_game_session(summary)
    for result in summary.level_results:
        repo.record_level_result(game_id, result)
    return game_id


@pytest.fixture
def repo():
    """Create an in-memory SQLite repository."""
    repository = SQLiteStatsRepository(":memory:")
    repository.initialize()
    yield repository
    repository.close()


class TestSQLiteRepository:
    """Test cases for SQLiteStatsRepository."""

    def test_satisfies_protocol(self, repo):
        assert isinstance(repo, StatsRepository)

    def test_record_returns_ids(self, repo):
        first = repo.record_game_session(make_summary())
        second = repo.record_game_session(make_summary())

        assert second > first > 0

    def test_aggregate_empty_user(self, repo):
        stats = repo.aggregate_for_user("nobody")

        assert stats["overall"]["total_games"] == 0
        assert stats["overall"]["games_won"] == 0
        assert stats["best"]["fastest_completion"] is None
        assert stats["by_level"] == []
        assert stats["recent"] == []

    def test_aggregate_overall(self, repo):
        record(repo, make_summary(strikes=(1, 3), times=(10, 20)))
        record(repo, make_summary(completed=True, strikes=(0, 2), times=(15, 25), started=1_700_000_500.0))
        record(repo, make_summary(user_id="someone-else"))

        overall = repo.aggregate_for_user("user-1")["overall"]
        assert overall["total_games"] == 2
        assert overall["games_won"] == 1
        assert overall["avg_levels_per_game"] == pytest.approx(1.5)
        assert overall["hardest_challenge_faced"] == 17
        assert overall["total_time_played"] == 70
        assert overall["total_strikes"] == 6

    def test_aggregate_best(self, repo):
        record(repo, make_summary(completed=True, strikes=(2, 2), times=(30, 30)))
        record(repo, make_summary(completed=True, strikes=(0, 1), times=(50, 50)))
        record(repo, make_summary(strikes=(0, 3), times=(1, 1)))

        best = repo.aggregate_for_user("user-1")["best"]
        assert best["fastest_completion"] == 60
        assert best["fewest_strikes_completion"] == 1

    def test_aggregate_by_level(self, repo):
        record(repo, make_summary(strikes=(1, 3), times=(10, 20)))
        record(repo, make_summary(completed=True, strikes=(3, 1), times=(20, 40)))

        by_level = repo.aggregate_for_user("user-1")["by_level"]
        assert [row["level_number"] for row in by_level] == [1, 2]
        level_two = by_level[1]
        assert level_two["times_played"] == 2
        assert level_two["times_completed"] == 1
        assert level_two["success_rate"] == pytest.approx(50.0)
        assert level_two["avg_time"] == pytest.approx(30.0)
        assert level_two["avg_strikes"] == pytest.approx(2.0)

    def test_aggregate_recent_newest_first(self, repo):
        for i in range(12):
            record(repo, make_summary(started=1_700_000_000.0 + i * 100))

        recent = repo.aggregate_for_user("user-1")["recent"]
        assert len(recent) == 10
        assert recent[0]["started_at"] > recent[-1]["started_at"]
        assert recent[0]["game_completed"] is False

    def test_record_game_writes_levels(self, repo):
        game_id = repo.record_game(make_summary(strikes=(1, 3), times=(10, 20)))

        stats = repo.aggregate_for_user("user-1")
        assert game_id > 0
        assert stats["overall"]["total_games"] == 1
        assert [row["level_number"] for row in stats["by_level"]] == [1, 2]

    def test_record_game_is_atomic(self, repo):
        """A level row that cannot be written rolls back the whole game."""
        summary = make_summary()
        summary.level_results.append(
            LevelResult(
                level=3,
                time_seconds=None,
                strikes=0,
                average_color_difference=15.0,
                smallest_difference=14,
            )
        )

        with pytest.raises(StatsRepositoryError):
            repo.record_game(summary)

        stats = repo.aggregate_for_user("user-1")
        assert stats["overall"]["total_games"] == 0
        assert stats["by_level"] == []

    def test_record_without_user_fails(self, repo):
        with pytest.raises(StatsRepositoryError):
            repo.record_game_session(make_summary(user_id=None))

    def test_level_result_for_unknown_game_fails(self, repo):
        with pytest.raises(StatsRepositoryError):
            repo.record_level_result(999, make_summary().level_results[0])

    def test_uninitialized_repository_fails(self):
        repository = SQLiteStatsRepository(":memory:")

        with pytest.raises(StatsRepositoryError):
            repository.aggregate_for_user("user-1")

    def test_close_is_idempotent(self):
        repository = SQLiteStatsRepository(":memory:")
        repository.initialize()
        repository.close()
        repository.close()

    def test_file_database(self, tmp_path):
        path = tmp_path / "nested" / "stats.db"
        repository = SQLiteStatsRepository(str(path))
        repository.initialize()
        record(repository, make_summary())
        repository.close()

        reopened = SQLiteStatsRepository(str(path))
        reopened.initialize()
        assert reopened.aggregate_for_user("user-1")["overall"]["total_games"] == 1
        reopened.close()


class TestNullRepository:
    """Test cases for NullStatsRepository."""

    def test_discards_writes(self):
        repo = NullStatsRepository()
        repo.initialize()
        record(repo, make_summary())
        assert repo.record_game(make_summary()) == 0

        assert repo.aggregate_for_user("user-1") == empty_aggregate()
        assert isinstance(repo, StatsRepository)


class TestFactory:
    """Test cases for create_stats_repository."""

    def test_null_backend(self):
        assert isinstance(create_stats_repository("null"), NullStatsRepository)

    def test_sqlite_backend(self):
        assert isinstance(create_stats_repository("sqlite", ":memory:"), SQLiteStatsRepository)

    def test_sqlite_requires_path(self):
        with pytest.raises(StatsRepositoryError):
            create_stats_repository("sqlite")

    def test_unknown_backend(self):
        with pytest.raises(StatsRepositoryError):
            create_stats_repository("postgres")
