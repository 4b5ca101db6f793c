"""Level preview and difficulty curve API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...models.schemas import (
    LevelResponse,
    CurveResponse,
    CurvePoint,
    ErrorResponse,
)
from ...config import get_settings
from ...models.difficulty_profiles import get_profile, list_profiles
from ...models.level import InvalidLevelError, DifficultyProfile
from ...core.generator import LevelGenerator
from ..deps import get_level_generator

router = APIRouter(prefix="/api/levels", tags=["levels"])


def _resolve_profile(name: Optional[str], generator: LevelGenerator) -> DifficultyProfile:
    if name is None:
        return generator.profile
    try:
        return get_profile(name)
    except KeyError as e:
        raise HTTPException(status_code=400, detail=str(e.args[0]))


@router.get("/profiles")
async def get_profiles():
    """List the available difficulty profiles."""
    return {"profiles": list_profiles()}


@router.get(
    "/curve",
    response_model=CurveResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_curve(
    profile: Optional[str] = Query(default=None, description="Difficulty profile name"),
    max_level: Optional[int] = Query(
        default=None, ge=1, le=50, description="Last level to include (defaults to the game length)"
    ),
    generator: LevelGenerator = Depends(get_level_generator),
) -> CurveResponse:
    """
    Return the board shape and difficulty budget for levels 1..max_level.

    These values depend only on the level number and profile.
    """
    p = _resolve_profile(profile, generator)
    if max_level is None:
        max_level = get_settings().max_level
    levels = [
        CurvePoint(
            level=level,
            rows=generator.rows_for_level(level, p),
            tilesPerRow=generator.tiles_for_level(level, p),
            difficultyBudget=generator.difficulty_budget(level, p),
            saturationEligible=generator.saturation_eligible(level, p),
        )
        for level in range(1, max_level + 1)
    ]
    return CurveResponse(profile=p.to_dict(), levels=levels)


@router.get(
    "/{level}",
    response_model=LevelResponse,
    responses={400: {"model": ErrorResponse}},
)
async def preview_level(
    level: int,
    profile: Optional[str] = Query(default=None, description="Difficulty profile name"),
    generator: LevelGenerator = Depends(get_level_generator),
) -> LevelResponse:
    """
    Generate a level outside of a game session.

    Each call produces fresh colors with the same difficulty shape.
    """
    p = _resolve_profile(profile, generator)
    try:
        spec = generator.generate(level, p)
    except InvalidLevelError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return LevelResponse(**spec.to_dict())
