"""Game session API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from ...models.schemas import (
    GameStartResponse,
    GameStateResponse,
    SelectTileRequest,
    SelectTileResponse,
    QuitResponse,
    ErrorResponse,
)
from ...config import get_settings
from ...core.game import InvalidMoveError
from ...core.game_service import GameService, SessionNotFoundError
from ..deps import SESSION_COOKIE, get_game, get_session_id, get_user_id

router = APIRouter(prefix="/api/game", tags=["game"])


@router.post("/start", response_model=GameStartResponse)
async def start_game(
    response: Response,
    user_id: Optional[str] = Depends(get_user_id),
    service: GameService = Depends(get_game),
) -> GameStartResponse:
    """
    Start a new game at level 1.

    Works for guests and signed-in users; only signed-in games are saved
    to aggregate statistics. The session id is returned and set as a cookie.
    """
    settings = get_settings()
    session = service.start(user_id=user_id)

    response.set_cookie(
        SESSION_COOKIE,
        session.session_id,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return GameStartResponse(
        sessionId=session.session_id,
        level=session.level,
        totalLevels=service.engine.max_level,
        maxStrikes=service.engine.max_strikes,
        strikesUsed=session.strikes_used,
        isAuthenticated=session.user_id is not None,
        **session.level_spec.to_dict(),
    )


@router.get(
    "/state",
    response_model=GameStateResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_game_state(
    session_id: Optional[str] = Depends(get_session_id),
    service: GameService = Depends(get_game),
) -> GameStateResponse:
    """Return the current level and progress of the active game."""
    try:
        session = service.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return GameStateResponse(**session.to_dict())


@router.post(
    "/select",
    response_model=SelectTileResponse,
    responses={400: {"model": ErrorResponse}},
)
async def select_tile(
    request: SelectTileRequest,
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    service: GameService = Depends(get_game),
) -> SelectTileResponse:
    """
    Select a tile.

    The odd tile solves its row; solving every row moves to the next level
    (or wins on the last one). Any other tile is a strike; reaching the
    strike limit loses the game. The session cookie is cleared once the
    game ends.
    """
    try:
        result = service.select(session_id, request.row, request.tile)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidMoveError as e:
        raise HTTPException(status_code=400, detail=f"Invalid move: {str(e)}")

    session = result.session
    game_stats = None
    stats_saved = False
    if result.summary is not None:
        game_stats = result.summary.to_dict()
        stats_saved = result.persisted
        response.delete_cookie(SESSION_COOKIE)

    return SelectTileResponse(
        outcome=result.outcome.value,
        phase=session.phase.value,
        level=session.level,
        strikesUsed=session.strikes_used,
        solvedRows=sorted(session.solved_rows),
        levelCompleted=result.level_completed,
        nextLevel=result.next_level.to_dict() if result.next_level else None,
        gameStats=game_stats,
        statsSaved=stats_saved,
    )


@router.post(
    "/quit",
    response_model=QuitResponse,
    responses={400: {"model": ErrorResponse}},
)
async def quit_game(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    service: GameService = Depends(get_game),
) -> QuitResponse:
    """End the active game early and return its statistics."""
    try:
        finished = service.quit(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response.delete_cookie(SESSION_COOKIE)
    return QuitResponse(
        message="Game results saved" if finished.persisted else "Game ended",
        gameStats=finished.summary.to_dict(),
        statsSaved=finished.persisted,
    )
