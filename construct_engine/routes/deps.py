"""Shared endpoint dependencies."""

from fastapi import HTTPException, Request

from construct_engine.session import GameSession


def get_session(session_id: str, request: Request) -> GameSession:
    """Resolve a session from the app registry or 404."""
    session = request.app.state.sessions.get(session_id)
    if session is None:
        raise HTTPException(404, "Session not found")
    return session
