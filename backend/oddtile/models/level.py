"""Level data models and structures."""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Tuple
from enum import Enum

from ..utils.helpers import format_hsl


# Appearance family shared by every base tile
BASE_SATURATION = 70
BASE_LIGHTNESS = 50

# Perturbed channel values never leave this range
CHANNEL_MIN = 10
CHANNEL_MAX = 90


class InvalidLevelError(ValueError):
    """Raised when a level number is not a positive integer."""


class Channel(str, Enum):
    """Color channel carrying a row's difference."""
    SATURATION = "saturation"
    LIGHTNESS = "lightness"


class PresentationMode(str, Enum):
    """Cosmetic rendering mode for endless levels."""
    SCROLLING = "scrolling"
    BOUNCING = "bouncing"


@dataclass(frozen=True)
class ColorSample:
    """A color in HSL space (hue in degrees, saturation/lightness in percent)."""
    hue: int
    saturation: int = BASE_SATURATION
    lightness: int = BASE_LIGHTNESS

    def with_channel(self, channel: Channel, value: int) -> "ColorSample":
        """Return a copy with one channel replaced."""
        if channel == Channel.SATURATION:
            return ColorSample(self.hue, value, self.lightness)
        return ColorSample(self.hue, self.saturation, value)

    def channel_value(self, channel: Channel) -> int:
        if channel == Channel.SATURATION:
            return self.saturation
        return self.lightness

    @property
    def css(self) -> str:
        return format_hsl(self.hue, self.saturation, self.lightness)


@dataclass(frozen=True)
class RowSpec:
    """One puzzle row: uniform base tiles plus exactly one odd tile."""
    base_color: ColorSample
    odd_color: ColorSample
    odd_tile_index: int
    color_difference: int
    uses_saturation_diff: bool

    @property
    def base_color_css(self) -> str:
        return self.base_color.css

    @property
    def odd_color_css(self) -> str:
        return self.odd_color.css

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the client wire format."""
        return {
            "baseColor": self.base_color_css,
            "oddColor": self.odd_color_css,
            "oddTileIndex": self.odd_tile_index,
            "colorDifference": self.color_difference,
            "usesSaturationDiff": self.uses_saturation_diff,
        }


@dataclass(frozen=True)
class DifficultyExample:
    """Colors of the hardest row faced, kept for end-of-game display."""
    base_color: str
    odd_color: str
    difference: int
    uses_saturation_diff: bool

    @classmethod
    def from_row(cls, row: RowSpec) -> "DifficultyExample":
        return cls(
            base_color=row.base_color_css,
            odd_color=row.odd_color_css,
            difference=row.color_difference,
            uses_saturation_diff=row.uses_saturation_diff,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "baseColor": self.base_color,
            "oddColor": self.odd_color,
            "difference": self.difference,
            "usesSaturationDiff": self.uses_saturation_diff,
        }


@dataclass(frozen=True)
class LevelSpec:
    """A generated level. Immutable once returned by the generator."""
    level: int
    rows: int
    tiles_per_row: int
    difficulty_budget: int
    row_specs: Tuple[RowSpec, ...]
    average_color_difference: float
    smallest_row_difference: int
    hardest_row_example: DifficultyExample
    presentation_mode: Optional[PresentationMode] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the client wire format."""
        data = {
            "rows": self.rows,
            "tilesPerRow": self.tiles_per_row,
            "colorData": [row.to_dict() for row in self.row_specs],
            "averageColorDifference": self.average_color_difference,
            "smallestRowDifference": self.smallest_row_difference,
            "difficultyExample": self.hardest_row_example.to_dict(),
        }
        if self.presentation_mode is not None:
            data["presentationMode"] = self.presentation_mode.value
        return data


@dataclass(frozen=True)
class DifficultyProfile:
    """Tuning constants for one difficulty curve.

    rows(n)   = min(max_rows, base_rows + floor((n - 1) * row_growth))
    tiles(n)  = min(max_tiles, base_tiles + floor(n / tile_growth_divisor))
    budget(n) = max(budget_floor, floor(budget_offset - n * budget_slope))
    """
    name: str
    base_rows: int
    row_growth: float
    max_rows: int
    base_tiles: int
    tile_growth_divisor: int
    max_tiles: int
    budget_offset: float
    budget_slope: float
    budget_floor: int
    row_multiplier_range: Tuple[float, float] = (0.85, 1.15)
    saturation_min_level: int = 5  # saturation rows appear strictly above this level
    saturation_probability: float = 0.25
    description: str = ""

    def __post_init__(self):
        """Reject curves that could produce a degenerate level."""
        if self.base_rows < 1 or self.max_rows < self.base_rows:
            raise ValueError(f"Profile '{self.name}': invalid row bounds")
        # rows must never shrink and the budget must never grow with level
        if self.row_growth < 0:
            raise ValueError(f"Profile '{self.name}': row_growth must be >= 0")
        if self.budget_slope < 0:
            raise ValueError(f"Profile '{self.name}': budget_slope must be >= 0")
        if self.base_tiles < 2 or self.max_tiles < self.base_tiles:
            raise ValueError(f"Profile '{self.name}': invalid tile bounds")
        if self.tile_growth_divisor < 1:
            raise ValueError(f"Profile '{self.name}': tile_growth_divisor must be >= 1")
        if self.budget_floor < 1:
            raise ValueError(f"Profile '{self.name}': budget_floor must be positive")
        low, high = self.row_multiplier_range
        if not 0 < low <= high:
            raise ValueError(f"Profile '{self.name}': invalid row multiplier range")
        if not 0.0 <= self.saturation_probability <= 1.0:
            raise ValueError(f"Profile '{self.name}': saturation_probability out of range")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "base_rows": self.base_rows,
            "row_growth": self.row_growth,
            "max_rows": self.max_rows,
            "base_tiles": self.base_tiles,
            "tile_growth_divisor": self.tile_growth_divisor,
            "max_tiles": self.max_tiles,
            "budget_offset": self.budget_offset,
            "budget_slope": self.budget_slope,
            "budget_floor": self.budget_floor,
            "row_multiplier_range": list(self.row_multiplier_range),
            "saturation_min_level": self.saturation_min_level,
            "saturation_probability": self.saturation_probability,
            "description": self.description,
        }


@dataclass
class LevelResult:
    """Outcome of one played level, folded into end-of-game statistics."""
    level: int
    time_seconds: int
    strikes: int
    average_color_difference: float
    smallest_difference: int
    failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level": self.level,
            "timeSeconds": self.time_seconds,
            "strikes": self.strikes,
            "averageColorDifference": round(self.average_color_difference, 3),
            "smallestDifference": self.smallest_difference,
            "failed": self.failed,
        }


@dataclass
class GameSummary:
    """End-of-game statistics handed to the persistence layer."""
    session_id: str
    user_id: Optional[str]
    started_at: float
    completed_at: float
    level_results: List[LevelResult] = field(default_factory=list)
    smallest_difference: Optional[int] = None
    smallest_difference_example: Optional[DifficultyExample] = None
    game_completed: bool = False

    @property
    def levels_completed(self) -> int:
        return sum(1 for r in self.level_results if not r.failed)

    @property
    def total_strikes(self) -> int:
        return sum(r.strikes for r in self.level_results)

    @property
    def total_time_seconds(self) -> int:
        return int(self.completed_at - self.started_at)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the client wire format."""
        example = self.smallest_difference_example
        return {
            "levelStats": [r.to_dict() for r in self.level_results],
            "smallestDifference": self.smallest_difference,
            "smallestDifferenceExample": example.to_dict() if example else None,
            "totalTime": self.total_time_seconds,
            "totalStrikes": self.total_strikes,
            "levelsCompleted": self.levels_completed,
            "gameCompleted": self.game_completed,
        }
