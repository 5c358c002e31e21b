"""Tests for persisted session and timer records."""

from construct_engine import storage

CONFIG = {"theme": "Star Wars", "difficulty": "Hard", "session_time": 45}


def test_initialize_session_state():
    state = storage.initialize_session_state("s1", CONFIG, start_time=123.0)
    assert state == {
        "start_time": 123.0,
        "duration_minutes": 45,
        "is_active": False,
        "config": CONFIG,
    }
    assert storage.get_session_state("s1") == state


def test_initialize_defaults_duration():
    state = storage.initialize_session_state("s1", {"theme": "Classic D&D"})
    assert state["duration_minutes"] == storage.DEFAULT_DURATION_MINUTES
    assert state["start_time"] > 0


def test_initialize_clears_stale_timer():
    storage.save_timer_state("s1", {"remaining": 10})
    storage.initialize_session_state("s1", CONFIG)
    assert storage.get_timer_state("s1") is None


def test_activate_session_state():
    storage.initialize_session_state("s1", CONFIG)
    assert not storage.has_active_session("s1")

    state = storage.activate_session_state("s1")

    assert state["is_active"] is True
    assert storage.has_active_session("s1")


def test_activate_missing_session():
    assert storage.activate_session_state("ghost") is None
    assert not storage.has_active_session("ghost")


def test_sessions_are_independent():
    storage.initialize_session_state("s1", CONFIG)
    storage.initialize_session_state("s2", CONFIG)
    storage.activate_session_state("s1")
    assert storage.has_active_session("s1")
    assert not storage.has_active_session("s2")


def test_clear_all_session_state():
    storage.initialize_session_state("s1", CONFIG)
    storage.save_timer_state("s1", {"remaining": 10})

    storage.clear_all_session_state("s1")

    assert storage.get_session_state("s1") is None
    assert storage.get_timer_state("s1") is None


def test_end_session():
    storage.initialize_session_state("s1", CONFIG)
    storage.activate_session_state("s1")
    storage.end_session("s1")
    assert not storage.has_active_session("s1")
    assert storage.get_session_state("s1") is None


def test_clear_missing_session_is_noop():
    storage.clear_all_session_state("ghost")
    assert storage.get_session_state("ghost") is None
