"""FastMCP server exposing the running session to a narrative agent.

Tools:
  - quest_status()                  — active quests, history, statistics
  - record_quest_progress(...)      — report a completed objective
  - pacing_guidance()               — current phase guidance
  - poll_pacing()                   — advance the scheduler, report transitions

The session is set via set_session() in tests, or started from the stored
settings when run as __main__.

Usage:
    uv run python -m construct_engine.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from construct_engine.models import ProgressDetails
from construct_engine.quests import ObjectiveOutOfRangeError, QuestNotFoundError
from construct_engine.session import GameSession

mcp = FastMCP("construct-session")

_session: GameSession | None = None


def set_session(session: GameSession | None) -> None:
    """Replace the active session (used in tests)."""
    global _session
    _session = session


def get_session() -> GameSession:
    if _session is None:
        raise RuntimeError("No active session")
    return _session


@mcp.tool()
def quest_status() -> dict:
    """Return active quests with progress, the quest history and statistics."""
    return get_session().ledger.status().model_dump()


@mcp.tool()
async def record_quest_progress(
    quest_id: str, objective_index: int, description: str = "", xp_gained: int = 0
) -> dict:
    """Record a completed objective. Returns the progress or completion result."""
    details = ProgressDetails(description=description, xp_gained=xp_gained)
    try:
        result = await get_session().record_progress(quest_id, objective_index, details)
    except (QuestNotFoundError, ObjectiveOutOfRangeError) as e:
        return {"error": str(e)}
    return result.model_dump()


@mcp.tool()
def pacing_guidance() -> dict:
    """Return the current narrative phase, intensity, suggestions and time left."""
    return get_session().guidance().model_dump()


@mcp.tool()
def poll_pacing() -> dict:
    """Advance to the phase matching the clock; reports a transition if one happened."""
    return get_session().poll().model_dump()


if __name__ == "__main__":
    import asyncio
    import os
    import uuid
    from pathlib import Path

    from construct_engine import storage
    from construct_engine.llm import gateway_from_config
    from construct_engine.models import Character, SessionConfig
    from construct_engine.quests import load_catalog

    storage.init_storage(Path(os.getenv("DATA_DIR", "data")))
    config = storage.get_config()
    session = GameSession(
        session_id=uuid.uuid4().hex,
        character=Character(),
        config=SessionConfig(
            theme=config["default_theme"],
            difficulty=config["default_difficulty"],
            session_time=config["default_session_minutes"],
        ),
        gateway=gateway_from_config(config),
        catalog=load_catalog(storage.presets_dir() / "quests.json"),
    )
    asyncio.run(session.start())
    set_session(session)
    mcp.run()
