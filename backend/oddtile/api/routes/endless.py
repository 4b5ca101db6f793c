"""Endless mode API routes."""
from fastapi import APIRouter, Depends

from ...models.schemas import LevelResponse
from ...core.generator import LevelGenerator
from ..deps import get_level_generator

router = APIRouter(prefix="/api/endless", tags=["endless"])


@router.get("/level", response_model=LevelResponse)
async def endless_level(
    generator: LevelGenerator = Depends(get_level_generator),
) -> LevelResponse:
    """
    Generate one endless-mode level.

    Endless levels sit in a fixed hard band and carry a presentation mode
    (scrolling or bouncing) for the client renderer. Progress in endless
    mode is tracked client-side and not stored.
    """
    spec = generator.generate_endless()
    return LevelResponse(**spec.to_dict())
