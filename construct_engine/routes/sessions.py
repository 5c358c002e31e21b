"""Session lifecycle and pacing endpoints."""

import uuid

from fastapi import APIRouter, Depends, Request

from construct_engine import storage
from construct_engine.llm import gateway_from_config
from construct_engine.models import SessionConfig
from construct_engine.session import GameSession

from .deps import get_session
from .models import CreateSession

router = APIRouter()


@router.post("/sessions")
async def create_session(body: CreateSession, request: Request):
    """Start a session: opening quest, pacing plan, persisted session record."""
    config = storage.get_config()
    session_config = body.config or SessionConfig(
        theme=config["default_theme"],
        difficulty=config["default_difficulty"],
        session_time=config["default_session_minutes"],
    )
    session = GameSession(
        session_id=uuid.uuid4().hex,
        character=body.character,
        config=session_config,
        gateway=gateway_from_config(config),
        catalog=request.app.state.catalog,
    )
    await session.start()
    request.app.state.sessions[session.session_id] = session
    return session.summary()


@router.get("/sessions/{session_id}")
async def get_session_summary(session: GameSession = Depends(get_session)):
    """Get a session's character, config, active quests and current guidance."""
    return session.summary()


@router.delete("/sessions/{session_id}")
async def end_session(request: Request, session: GameSession = Depends(get_session)):
    """End a session and clear its persisted record."""
    session.end()
    del request.app.state.sessions[session.session_id]
    return {"ok": True}


@router.get("/sessions/{session_id}/pacing")
async def get_guidance(session: GameSession = Depends(get_session)):
    """Current phase guidance (does not advance the phase)."""
    return session.guidance()


@router.post("/sessions/{session_id}/pacing/advance")
async def advance_pacing(session: GameSession = Depends(get_session)):
    """Poll the scheduler; returns a transition event when the phase changed."""
    return session.poll()


@router.get("/sessions/{session_id}/pacing/stats")
async def pacing_stats(session: GameSession = Depends(get_session)):
    """Elapsed time, progress percent and phase history."""
    return session.pacing_stats()
