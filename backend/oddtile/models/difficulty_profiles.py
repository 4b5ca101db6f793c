"""
Difficulty curve profiles for the odd-tile generator.

Each profile is one complete tuning of the level curve. The game has gone
through several tunings, so they are kept side by side as named profiles
instead of being merged into one formula.

- standard: the ten-level game. 3 → 8 rows, 9 → 12 tiles, budget 26 → 10.
- endless:  hard band used by endless mode (effective level 8-9).
- extended: longer board for runs past level 10. 4 → 15 rows, 9 → 15 tiles.
"""
from typing import Dict, List, Any

from .level import DifficultyProfile


STANDARD = DifficultyProfile(
    name="standard",
    base_rows=3,
    row_growth=0.6,          # 3, 3, 4, 4, 5, 6, 6, 7, 7, 8
    max_rows=8,
    base_tiles=9,
    tile_growth_divisor=4,   # 9, 9, 9, 10, 10, 10, 10, 11, 11, 11
    max_tiles=12,
    budget_offset=28,
    budget_slope=1.8,        # 26, 24, 22, 20, 19, 17, 15, 13, 11, 10
    budget_floor=10,
    row_multiplier_range=(0.85, 1.15),
    saturation_min_level=5,
    saturation_probability=0.25,
    description="Ten-level main game curve",
)

ENDLESS = DifficultyProfile(
    name="endless",
    base_rows=3,
    row_growth=0.6,
    max_rows=8,
    base_tiles=9,
    tile_growth_divisor=4,
    max_tiles=12,
    budget_offset=30,
    budget_slope=1.8,        # level 8 → 15, level 9 → 13
    budget_floor=12,
    row_multiplier_range=(0.85, 1.15),
    saturation_min_level=0,  # saturation rows at every level
    saturation_probability=0.25,
    description="Fixed hard band for endless mode",
)

EXTENDED = DifficultyProfile(
    name="extended",
    base_rows=4,
    row_growth=1.0,
    max_rows=15,
    base_tiles=9,
    tile_growth_divisor=2,
    max_tiles=15,
    budget_offset=30,
    budget_slope=2.0,
    budget_floor=6,
    row_multiplier_range=(0.75, 1.25),
    saturation_min_level=4,
    saturation_probability=0.30,
    description="Larger board and steeper budget for long runs",
)

DIFFICULTY_PROFILES: Dict[str, DifficultyProfile] = {
    STANDARD.name: STANDARD,
    ENDLESS.name: ENDLESS,
    EXTENDED.name: EXTENDED,
}

DEFAULT_PROFILE_NAME = STANDARD.name

# Endless mode draws its effective level from this band
ENDLESS_LEVEL_BAND = (8, 9)


def get_profile(name: str) -> DifficultyProfile:
    """
    Look up a profile by name.

    Raises:
        KeyError: If no profile has that name.
    """
    try:
        return DIFFICULTY_PROFILES[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown difficulty profile: {name}. "
            f"Valid profiles: {list(DIFFICULTY_PROFILES)}"
        )


def list_profiles() -> List[Dict[str, Any]]:
    """Return every profile as a dictionary."""
    return [profile.to_dict() for profile in DIFFICULTY_PROFILES.values()]
