"""Application configuration settings."""
import os
import json
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional, List

from .models.difficulty_profiles import DIFFICULTY_PROFILES


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Odd Tile Out"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 4000

    # CORS settings - as comma-separated string or JSON array
    cors_origins: str = "http://localhost:5173"
    cookie_secure: bool = False

    # Game settings
    difficulty_profile: str = "standard"
    max_level: int = 10
    max_strikes: int = 3

    # Session store settings
    session_ttl_seconds: int = 60 * 60
    max_sessions: int = 10000

    # Statistics persistence: "null" or "sqlite"
    stats_backend: str = "sqlite"
    stats_db_path: str = "./game_database.db"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level name."""
        return v.upper()

    @field_validator("difficulty_profile")
    @classmethod
    def validate_difficulty_profile(cls, v: str) -> str:
        """Profile must be one of the shipped curves."""
        v = v.lower()
        if v not in DIFFICULTY_PROFILES:
            raise ValueError(f"Unknown difficulty profile: {v}. Valid: {list(DIFFICULTY_PROFILES)}")
        return v

    @field_validator("stats_backend")
    @classmethod
    def validate_stats_backend(cls, v: str) -> str:
        """Only known backends are accepted."""
        v = v.lower()
        if v not in ("null", "sqlite"):
            raise ValueError(f"Unknown stats backend: {v}. Must be 'null' or 'sqlite'")
        return v

    @field_validator("max_level", "max_strikes", "session_ttl_seconds", "max_sessions")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts and durations must be positive."""
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from string (comma-separated or JSON)."""
        if not self.cors_origins:
            return ["http://localhost:5173"]

        # Try JSON parse first
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            pass

        # Fall back to comma-separated
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Don't use lru_cache in production to allow env var updates
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings instance (cached in production for performance)."""
    global _settings
    if _settings is None or os.getenv("DEBUG", "false").lower() == "true":
        _settings = Settings()
    return _settings
