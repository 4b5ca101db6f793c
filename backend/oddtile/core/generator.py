"""Level generator engine with a calibrated difficulty curve."""
import logging
import math
import random
from dataclasses import replace
from typing import Callable, List, Optional

from ..models.level import (
    Channel,
    ColorSample,
    DifficultyExample,
    DifficultyProfile,
    InvalidLevelError,
    LevelSpec,
    PresentationMode,
    RowSpec,
    CHANNEL_MIN,
    CHANNEL_MAX,
)
from ..models.difficulty_profiles import (
    ENDLESS,
    ENDLESS_LEVEL_BAND,
    STANDARD,
    get_profile,
)
from ..config import get_settings
from ..utils.helpers import clamp

logger = logging.getLogger(__name__)

# Zero-argument callable returning uniform floats in [0, 1)
RandomSource = Callable[[], float]


def seeded_source(seed: int) -> RandomSource:
    """Build a reproducible random source for tests and replays."""
    return random.Random(seed).random


def validate_level(level) -> int:
    """
    Check that a level number is a positive integer.

    Raises:
        InvalidLevelError: If level is not an int, is a bool, or is < 1.
    """
    if isinstance(level, bool) or not isinstance(level, int):
        raise InvalidLevelError(f"Level must be a positive integer, got {level!r}")
    if level < 1:
        raise InvalidLevelError(f"Level must be a positive integer, got {level}")
    return level


class LevelGenerator:
    """Generates odd-tile color puzzles along a difficulty curve.

    Board shape and difficulty budget depend only on the level number and
    profile. Colors, odd positions and per-row variation come from the
    random source, so two calls for the same level differ in content but
    not in difficulty.
    """

    HUE_RANGE = 360

    def __init__(
        self,
        profile: Optional[DifficultyProfile] = None,
        random_source: Optional[RandomSource] = None,
    ):
        """
        Initialize generator.

        Args:
            profile: Difficulty curve to follow. Defaults to the standard curve.
            random_source: Uniform [0, 1) float source. Defaults to random.random.
        """
        self.profile = profile or STANDARD
        self._random = random_source or random.random

    # ------------------------------------------------------------------
    # Curve shape
    # ------------------------------------------------------------------

    def rows_for_level(self, level: int, profile: Optional[DifficultyProfile] = None) -> int:
        """Row count for a level, non-decreasing and capped at max_rows."""
        p = profile or self.profile
        level = validate_level(level)
        rows = p.base_rows + math.floor((level - 1) * p.row_growth)
        return min(p.max_rows, rows)

    def tiles_for_level(self, level: int, profile: Optional[DifficultyProfile] = None) -> int:
        """Tiles per row for a level, non-decreasing and capped at max_tiles."""
        p = profile or self.profile
        level = validate_level(level)
        tiles = p.base_tiles + level // p.tile_growth_divisor
        return min(p.max_tiles, tiles)

    def difficulty_budget(self, level: int, profile: Optional[DifficultyProfile] = None) -> int:
        """Base color difference for a level, non-increasing and floored."""
        p = profile or self.profile
        level = validate_level(level)
        budget = math.floor(p.budget_offset - level * p.budget_slope)
        return max(p.budget_floor, budget)

    def saturation_eligible(self, level: int, profile: Optional[DifficultyProfile] = None) -> bool:
        """Whether rows at this level may carry their difference in saturation."""
        p = profile or self.profile
        level = validate_level(level)
        return level > p.saturation_min_level

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(self, level: int, profile: Optional[DifficultyProfile] = None) -> LevelSpec:
        """
        Generate a level.

        Args:
            level: Level number (1-based).
            profile: Optional curve override for this call.

        Returns:
            LevelSpec with per-row colors and difficulty summary.

        Raises:
            InvalidLevelError: If level is not a positive integer.
            ValueError: If the profile yields fewer than one row or two tiles.
        """
        p = profile or self.profile
        level = validate_level(level)

        rows = self.rows_for_level(level, p)
        tiles_per_row = self.tiles_for_level(level, p)
        budget = self.difficulty_budget(level, p)
        allow_saturation = self.saturation_eligible(level, p)
        if rows < 1 or tiles_per_row < 2:
            raise ValueError(
                f"Profile '{p.name}' gives a degenerate board at level {level}: "
                f"{rows} rows of {tiles_per_row} tiles"
            )

        row_specs = [
            self._generate_row(p, tiles_per_row, budget, allow_saturation)
            for _ in range(rows)
        ]
        return self._build_level(level, tiles_per_row, budget, row_specs)

    def generate_endless(self) -> LevelSpec:
        """
        Generate one endless-mode level.

        The effective level is drawn from the endless band and the level
        carries a presentation mode for the renderer.
        """
        low, high = ENDLESS_LEVEL_BAND
        effective_level = low + math.floor(self._random() * (high - low + 1))
        spec = self.generate(effective_level, ENDLESS)

        mode = (
            PresentationMode.BOUNCING
            if self._random() < 0.5
            else PresentationMode.SCROLLING
        )
        logger.debug("Endless level at effective level %d, mode=%s", effective_level, mode.value)
        return replace(spec, presentation_mode=mode)

    def _generate_row(
        self,
        profile: DifficultyProfile,
        tiles_per_row: int,
        budget: int,
        allow_saturation: bool,
    ) -> RowSpec:
        """Generate a single row. Draw order: hue, odd index, multiplier, channel, direction."""
        base = ColorSample(hue=math.floor(self._random() * self.HUE_RANGE))
        odd_tile_index = math.floor(self._random() * tiles_per_row)

        low, high = profile.row_multiplier_range
        multiplier = low + self._random() * (high - low)
        target = max(1, math.floor(budget * multiplier))

        uses_saturation = allow_saturation and self._random() < profile.saturation_probability
        channel = Channel.SATURATION if uses_saturation else Channel.LIGHTNESS

        direction = -1 if self._random() < 0.5 else 1
        base_value = base.channel_value(channel)
        perturbed = clamp(base_value + target * direction, CHANNEL_MIN, CHANNEL_MAX)

        return RowSpec(
            base_color=base,
            odd_color=base.with_channel(channel, perturbed),
            odd_tile_index=odd_tile_index,
            # Recorded after clamping so statistics reflect what was shown
            color_difference=abs(perturbed - base_value),
            uses_saturation_diff=uses_saturation,
        )

    def _build_level(
        self,
        level: int,
        tiles_per_row: int,
        budget: int,
        row_specs: List[RowSpec],
    ) -> LevelSpec:
        """Package rows with their average and hardest (first minimum) row."""
        differences = [row.color_difference for row in row_specs]
        smallest = min(differences)
        hardest_row = row_specs[differences.index(smallest)]

        return LevelSpec(
            level=level,
            rows=len(row_specs),
            tiles_per_row=tiles_per_row,
            difficulty_budget=budget,
            row_specs=tuple(row_specs),
            average_color_difference=sum(differences) / len(differences),
            smallest_row_difference=smallest,
            hardest_row_example=DifficultyExample.from_row(hardest_row),
        )


# Singleton instance
_generator = None


def get_generator() -> LevelGenerator:
    """Get or create generator singleton instance."""
    global _generator
    if _generator is None:
        settings = get_settings()
        _generator = LevelGenerator(profile=get_profile(settings.difficulty_profile))
    return _generator
