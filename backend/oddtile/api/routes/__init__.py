"""API routes package.

This package contains all API route handlers for the application.
"""
from . import game
from . import levels
from . import endless
from . import stats

__all__ = [
    "game",
    "levels",
    "endless",
    "stats",
]
