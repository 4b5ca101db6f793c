"""Statistics persistence package.

This package contains the repository protocol and its storage backends.
"""
from .protocols import StatsRepository, StatsRepositoryError, empty_aggregate
from .factory import create_stats_repository

__all__ = [
    "StatsRepository",
    "StatsRepositoryError",
    "empty_aggregate",
    "create_stats_repository",
]
