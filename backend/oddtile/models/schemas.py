"""Pydantic schemas for API request/response validation."""
from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional


class ColorRow(BaseModel):
    """One row of tiles as sent to the client."""
    baseColor: str = Field(..., description="Color of every non-odd tile, e.g. hsl(120, 70%, 50%)")
    oddColor: str = Field(..., description="Color of the odd tile")
    oddTileIndex: int = Field(..., ge=0, description="Index of the odd tile")
    colorDifference: int = Field(..., gt=0, description="Channel difference after clamping")
    usesSaturationDiff: bool = Field(..., description="True if saturation carries the difference")


class DifficultyExampleModel(BaseModel):
    """Colors of the hardest row."""
    baseColor: str
    oddColor: str
    difference: int
    usesSaturationDiff: bool


class LevelResponse(BaseModel):
    """Generated level in client wire format."""
    rows: int = Field(..., ge=1, description="Number of rows")
    tilesPerRow: int = Field(..., ge=2, description="Tiles in each row")
    colorData: List[ColorRow] = Field(..., description="Per-row colors")
    averageColorDifference: float = Field(..., description="Mean row difference")
    smallestRowDifference: int = Field(..., description="Smallest row difference")
    difficultyExample: DifficultyExampleModel = Field(..., description="Hardest row colors")
    presentationMode: Optional[str] = Field(default=None, description="Endless mode rendering (scrolling/bouncing)")


class LevelStat(BaseModel):
    """Result of one played level."""
    level: int
    timeSeconds: int
    strikes: int
    averageColorDifference: float
    smallestDifference: int
    failed: bool = False


class GameStats(BaseModel):
    """End-of-game statistics."""
    levelStats: List[LevelStat] = Field(default=[], description="Per-level results")
    smallestDifference: Optional[int] = Field(default=None, description="Hardest challenge faced")
    smallestDifferenceExample: Optional[DifficultyExampleModel] = Field(default=None)
    totalTime: int = Field(default=0, description="Total game time in seconds")
    totalStrikes: int = Field(default=0, description="Strikes over all levels")
    levelsCompleted: int = Field(default=0, description="Levels finished without failing")
    gameCompleted: bool = Field(default=False, description="True if every level was cleared")


class GameStartResponse(LevelResponse):
    """Response schema for starting a game."""
    sessionId: str = Field(..., description="Opaque session identifier (also set as cookie)")
    level: int = Field(..., ge=1, description="Current level")
    totalLevels: int = Field(..., description="Number of levels in a game")
    maxStrikes: int = Field(..., description="Strikes allowed per level")
    strikesUsed: int = Field(default=0, description="Strikes used on the current level")
    isAuthenticated: bool = Field(default=False, description="Whether the game is account-linked")


class GameStateResponse(LevelResponse):
    """Current state of an active game."""
    level: int
    phase: str
    strikesUsed: int
    solvedRows: List[int] = Field(default=[])
    levelStats: List[LevelStat] = Field(default=[])
    smallestDifference: Optional[int] = None
    smallestDifferenceExample: Optional[DifficultyExampleModel] = None
    isAuthenticated: bool = False


class SelectTileRequest(BaseModel):
    """Request schema for selecting a tile."""
    row: int = Field(..., ge=0, description="Row index")
    tile: int = Field(..., ge=0, description="Tile index within the row")


class SelectTileResponse(BaseModel):
    """Response schema for a tile selection."""
    outcome: str = Field(..., description="solved, miss or ignored")
    phase: str = Field(..., description="in_level, won or lost")
    level: int = Field(..., description="Level after applying the selection")
    strikesUsed: int = Field(..., description="Strikes used on the current level")
    solvedRows: List[int] = Field(default=[], description="Solved rows on the current level")
    levelCompleted: bool = Field(default=False, description="True if the selection finished a level")
    nextLevel: Optional[LevelResponse] = Field(default=None, description="Next level when one started")
    gameStats: Optional[GameStats] = Field(default=None, description="Final statistics when the game ended")
    statsSaved: bool = Field(default=False, description="True if the finished game was persisted")


class QuitResponse(BaseModel):
    """Response schema for quitting a game."""
    message: str
    gameStats: GameStats
    statsSaved: bool = False


class CurvePoint(BaseModel):
    """Board shape and budget at one level."""
    level: int
    rows: int
    tilesPerRow: int
    difficultyBudget: int
    saturationEligible: bool


class CurveResponse(BaseModel):
    """Response schema for a difficulty curve."""
    profile: Dict[str, Any]
    levels: List[CurvePoint]


class AggregateStatsResponse(BaseModel):
    """Aggregate statistics for one user."""
    overall: Dict[str, Any]
    best: Dict[str, Any]
    byLevel: List[Dict[str, Any]] = Field(default=[])
    recent: List[Dict[str, Any]] = Field(default=[])


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
