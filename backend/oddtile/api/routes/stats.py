"""Aggregate statistics API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import AggregateStatsResponse, ErrorResponse
from ...storage import StatsRepository, StatsRepositoryError
from ..deps import get_stats, get_user_id

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get(
    "/aggregate",
    response_model=AggregateStatsResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def aggregate_stats(
    user_id: Optional[str] = Depends(get_user_id),
    repository: StatsRepository = Depends(get_stats),
) -> AggregateStatsResponse:
    """
    Return lifetime statistics for the signed-in user.

    Includes overall totals, best won games, per-level performance and the
    ten most recent games.
    """
    if user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        stats = repository.aggregate_for_user(user_id)
    except StatsRepositoryError as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch statistics: {str(e)}")

    return AggregateStatsResponse(
        overall=stats["overall"],
        best=stats["best"],
        byLevel=stats["by_level"],
        recent=stats["recent"],
    )
