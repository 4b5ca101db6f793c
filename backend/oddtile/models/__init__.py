"""Data models package.

This package contains level models, difficulty profiles, and API schemas.
"""
from .level import (
    Channel,
    ColorSample,
    RowSpec,
    DifficultyExample,
    LevelSpec,
    DifficultyProfile,
    LevelResult,
    GameSummary,
    PresentationMode,
    InvalidLevelError,
    CHANNEL_MIN,
    CHANNEL_MAX,
)
from .difficulty_profiles import (
    DIFFICULTY_PROFILES,
    DEFAULT_PROFILE_NAME,
    ENDLESS_LEVEL_BAND,
    get_profile,
    list_profiles,
)
from .schemas import (
    LevelResponse,
    GameStartResponse,
    GameStateResponse,
    SelectTileRequest,
    SelectTileResponse,
    QuitResponse,
    CurveResponse,
    AggregateStatsResponse,
    ErrorResponse,
)

__all__ = [
    # Level models
    "Channel",
    "ColorSample",
    "RowSpec",
    "DifficultyExample",
    "LevelSpec",
    "DifficultyProfile",
    "LevelResult",
    "GameSummary",
    "PresentationMode",
    "InvalidLevelError",
    "CHANNEL_MIN",
    "CHANNEL_MAX",
    # Difficulty profiles
    "DIFFICULTY_PROFILES",
    "DEFAULT_PROFILE_NAME",
    "ENDLESS_LEVEL_BAND",
    "get_profile",
    "list_profiles",
    # API schemas
    "LevelResponse",
    "GameStartResponse",
    "GameStateResponse",
    "SelectTileRequest",
    "SelectTileResponse",
    "QuitResponse",
    "CurveResponse",
    "AggregateStatsResponse",
    "ErrorResponse",
]
