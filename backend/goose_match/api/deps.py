"""API dependencies."""
from fastapi import Depends, HTTPException

from ..core.engine import GameEngine
from ..core.sessions import get_session_store, GameSessionStore


def get_sessions() -> GameSessionStore:
    """Dependency for the game session store."""
    return get_session_store()


def get_game(
    session_id: str,
    sessions: GameSessionStore = Depends(get_sessions),
) -> GameEngine:
    """Dependency resolving a session id to its engine."""
    engine = sessions.get(session_id)
    if engine is None:
        raise HTTPException(status_code=404, detail=f"Game session {session_id} not found")
    return engine
