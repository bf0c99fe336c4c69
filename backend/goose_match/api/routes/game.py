"""Game session API routes."""
from dataclasses import replace
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...models.level import InvalidConfiguration, LevelConfig
from ...models.schemas import (
    GameResponse,
    LevelOverrides,
    ErrorResponse,
    SnapshotSchema,
    StartRequest,
    TapRequest,
    TapResponse,
)
from ...core.engine import GameEngine
from ...core.sessions import GameSessionStore
from ..deps import get_game, get_sessions

router = APIRouter(prefix="/api/games", tags=["games"])


def _apply_overrides(base: LevelConfig, overrides: Optional[LevelOverrides]) -> LevelConfig:
    if overrides is None:
        return base
    return replace(base, **overrides.model_dump(exclude_none=True))


@router.post(
    "",
    response_model=GameResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_game(
    request: Optional[StartRequest] = None,
    sessions: GameSessionStore = Depends(get_sessions),
) -> GameResponse:
    """
    Create a game session and start its first level.

    Args:
        request: Optional level parameter overrides.
        sessions: GameSessionStore dependency.

    Returns:
        GameResponse with the new session id and initial snapshot.
    """
    overrides = request.config if request else None
    try:
        session_id = sessions.create(_apply_overrides(sessions.default_config, overrides))
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=f"Invalid level configuration: {str(e)}")

    snapshot = sessions.get(session_id).snapshot()
    return GameResponse(session_id=session_id, snapshot=SnapshotSchema(**snapshot.to_dict()))


@router.get(
    "/{session_id}",
    response_model=GameResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_game_state(
    session_id: str,
    engine: GameEngine = Depends(get_game),
) -> GameResponse:
    """Return the current snapshot of a game."""
    return GameResponse(session_id=session_id, snapshot=SnapshotSchema(**engine.snapshot().to_dict()))


@router.post(
    "/{session_id}/start",
    response_model=GameResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def restart_game(
    session_id: str,
    request: Optional[StartRequest] = None,
    engine: GameEngine = Depends(get_game),
) -> GameResponse:
    """
    Start a new level in an existing session, discarding the current one.

    Args:
        session_id: Game session id.
        request: Optional level parameter overrides.
        engine: GameEngine dependency.

    Returns:
        GameResponse with the fresh snapshot.
    """
    overrides = request.config if request else None
    try:
        snapshot = engine.start_level(_apply_overrides(engine.config, overrides))
    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=f"Invalid level configuration: {str(e)}")

    return GameResponse(session_id=session_id, snapshot=SnapshotSchema(**snapshot.to_dict()))


@router.post(
    "/{session_id}/tap",
    response_model=TapResponse,
    responses={404: {"model": ErrorResponse}},
)
async def tap_tile(
    request: TapRequest,
    wait: bool = False,
    engine: GameEngine = Depends(get_game),
) -> TapResponse:
    """
    Tap a tile on the pile.

    Rejected taps are not errors; the response just reports accepted=false.

    Args:
        request: TapRequest with the tile id.
        wait: Wait for the resolve pass (including the match delay) before replying.
        engine: GameEngine dependency.

    Returns:
        TapResponse with the acceptance flag and snapshot.
    """
    accepted = engine.tap(request.tile_id)
    snapshot = await engine.settle() if wait else engine.snapshot()
    return TapResponse(accepted=accepted, snapshot=SnapshotSchema(**snapshot.to_dict()))


@router.delete(
    "/{session_id}",
    responses={404: {"model": ErrorResponse}},
)
async def delete_game(
    session_id: str,
    sessions: GameSessionStore = Depends(get_sessions),
):
    """Drop a game session."""
    if not sessions.remove(session_id):
        raise HTTPException(status_code=404, detail=f"Game session {session_id} not found")
    return {"deleted": session_id}
