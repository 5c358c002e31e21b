"""Persisted session records (session state + timer state per session).

A session record is {start_time, duration_minutes, is_active, config}. The
timer record belongs to whichever countdown the client runs; this module only
clears it. Both records are removed together as one logical reset.
"""

import time
from typing import Any

from .core import load, remove, save

DEFAULT_DURATION_MINUTES = 30


def _session_key(session_id: str) -> str:
    return f"session-state-{session_id}"


def _timer_key(session_id: str) -> str:
    return f"timer-state-{session_id}"


def initialize_session_state(
    session_id: str, config: dict[str, Any], start_time: float | None = None
) -> dict[str, Any]:
    """Write a fresh, not yet active session record and drop any stale timer."""
    state = {
        "start_time": time.time() if start_time is None else start_time,
        "duration_minutes": config.get("session_time") or DEFAULT_DURATION_MINUTES,
        "is_active": False,
        "config": config,
    }
    save(_session_key(session_id), state)
    remove(_timer_key(session_id))
    return state


def get_session_state(session_id: str) -> dict[str, Any] | None:
    return load(_session_key(session_id))


def activate_session_state(session_id: str) -> dict[str, Any] | None:
    """Mark a session record active. Returns None if it does not exist."""
    state = get_session_state(session_id)
    if state is None:
        return None
    state["is_active"] = True
    save(_session_key(session_id), state)
    return state


def has_active_session(session_id: str) -> bool:
    state = get_session_state(session_id)
    return bool(state) and bool(state.get("is_active"))


def save_timer_state(session_id: str, timer: dict[str, Any]) -> None:
    save(_timer_key(session_id), timer)


def get_timer_state(session_id: str) -> dict[str, Any] | None:
    return load(_timer_key(session_id))


def clear_all_session_state(session_id: str) -> None:
    """Remove the session and timer records."""
    remove(_session_key(session_id))
    remove(_timer_key(session_id))


def end_session(session_id: str) -> None:
    clear_all_session_state(session_id)
