"""Tests for the HTTP API, driven through FastAPI's TestClient."""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from construct_engine import storage
from construct_engine.app import create_app

HERO = {"name": "Ari", "level": 5, "race": "Human", "class": "Fighter"}
CONFIG = {"theme": "Classic D&D", "difficulty": "Medium", "session_time": 30}


@pytest.fixture
def client(tmp_path) -> TestClient:
    return TestClient(create_app(tmp_path))


@pytest.fixture
def session(client) -> dict:
    resp = client.post("/api/sessions", json={"character": HERO, "config": CONFIG})
    assert resp.status_code == 200
    return resp.json()


def _quest_url(session: dict, quest_id: str, action: str) -> str:
    return f"/api/sessions/{session['session_id']}/quests/{quest_id}/{action}"


class TestSettings:
    def test_health(self, client) -> None:
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_settings_defaults(self, client) -> None:
        data = client.get("/api/settings").json()
        assert data["default_theme"] == "Classic D&D"
        assert data["llm_connection"]["provider_url"] == ""

    def test_patch_settings(self, client) -> None:
        data = client.patch("/api/settings", json={"default_session_minutes": 90}).json()
        assert data["default_session_minutes"] == 90
        assert client.get("/api/settings").json()["default_session_minutes"] == 90


class TestSessions:
    def test_create_session(self, session) -> None:
        assert session["session_id"]
        assert session["character"]["class"] == "Fighter"
        assert len(session["active_quests"]) == 1
        assert session["record"]["is_active"] is True
        assert session["guidance"]["phase"] == "hook"

    def test_offline_backend_falls_back_to_template_text(self, session) -> None:
        quest = session["active_quests"][0]
        assert quest["enhanced_description"] == quest["description"]
        assert quest["personal_elements"] == []

    def test_create_session_uses_stored_defaults(self, client) -> None:
        client.patch("/api/settings", json={"default_theme": "Star Wars", "default_session_minutes": 45})
        data = client.post("/api/sessions", json={"character": HERO}).json()
        assert data["config"]["theme"] == "Star Wars"
        assert data["config"]["session_time"] == 45
        assert data["guidance"]["phase"] == "introduction"

    def test_get_session(self, client, session) -> None:
        data = client.get(f"/api/sessions/{session['session_id']}").json()
        assert data["session_id"] == session["session_id"]

    def test_unknown_session(self, client) -> None:
        resp = client.get("/api/sessions/nope/quests")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Session not found"

    def test_end_session(self, client, session) -> None:
        sid = session["session_id"]
        assert client.delete(f"/api/sessions/{sid}").json() == {"ok": True}
        assert client.get(f"/api/sessions/{sid}").status_code == 404
        assert storage.get_session_state(sid) is None


class TestQuests:
    def test_status(self, client, session) -> None:
        data = client.get(f"/api/sessions/{session['session_id']}/quests").json()
        assert len(data["active_quests"]) == 1
        assert data["active_quests"][0]["progress"] == 0
        assert data["next_quest_available"] is True
        assert data["statistics"]["total_quests"] == 1

    def test_progress_then_completion(self, client, session) -> None:
        quest = session["active_quests"][0]
        last = None
        for i in range(len(quest["objectives"])):
            resp = client.post(_quest_url(session, quest["id"], "progress"), json={"objective_index": i})
            assert resp.status_code == 200
            last = resp.json()

        assert last["completed"] is True
        assert last["next_quest_accepted"] is True
        stats = client.get(f"/api/sessions/{session['session_id']}/quests/statistics").json()
        assert stats["completed_quests"] == 1
        assert stats["active_quests"] == 1

    def test_first_progress_is_partial(self, client, session) -> None:
        quest = session["active_quests"][0]
        data = client.post(
            _quest_url(session, quest["id"], "progress"),
            json={"objective_index": 0, "description": "Found a clue"},
        ).json()
        assert data["completed"] is False
        assert data["message"] == "Progress updated: Found a clue"

    def test_objective_out_of_range(self, client, session) -> None:
        quest = session["active_quests"][0]
        resp = client.post(_quest_url(session, quest["id"], "progress"), json={"objective_index": 99})
        assert resp.status_code == 400

    def test_unknown_quest(self, client, session) -> None:
        resp = client.post(_quest_url(session, "missing", "progress"), json={"objective_index": 0})
        assert resp.status_code == 404
        assert client.post(_quest_url(session, "missing", "complete")).status_code == 404

    def test_complete_incomplete_quest(self, client, session) -> None:
        quest = session["active_quests"][0]
        resp = client.post(_quest_url(session, quest["id"], "complete"))
        assert resp.status_code == 409

    def test_accept_until_full(self, client, session) -> None:
        url = f"/api/sessions/{session['session_id']}/quests/accept"
        template = session["active_quests"][0]
        for suffix in ("a", "b"):
            quest = {**template, "id": f"{template['id']}-{suffix}"}
            assert client.post(url, json={"quest": quest}).status_code == 200

        overflow = {**template, "id": f"{template['id']}-c"}
        assert client.post(url, json={"quest": overflow}).status_code == 409

    def test_accept_active_quest_again(self, client, session) -> None:
        url = f"/api/sessions/{session['session_id']}/quests/accept"
        resp = client.post(url, json={"quest": session["active_quests"][0]})
        assert resp.status_code == 409
        status = client.get(f"/api/sessions/{session['session_id']}/quests").json()
        assert len(status["active_quests"]) == 1

    def test_accept_rejects_stale_quest(self, client, session) -> None:
        url = f"/api/sessions/{session['session_id']}/quests/accept"
        template = session["active_quests"][0]
        finished = {**template, "id": "finished", "status": "completed"}
        started = {**template, "id": "started", "progress": [{"objective_index": 0, "timestamp": 1.0}]}
        assert client.post(url, json={"quest": finished}).status_code == 400
        assert client.post(url, json={"quest": started}).status_code == 400

    def test_recommendations(self, client, session) -> None:
        data = client.get(
            f"/api/sessions/{session['session_id']}/quests/recommendations", params={"limit": 2}
        ).json()
        assert 0 < len(data) <= 2


class TestPacing:
    def test_guidance(self, client, session) -> None:
        data = client.get(f"/api/sessions/{session['session_id']}/pacing").json()
        assert data["phase"] == "hook"
        assert data["intensity"] == "medium"

    def test_advance_without_transition(self, client, session) -> None:
        data = client.post(f"/api/sessions/{session['session_id']}/pacing/advance").json()
        assert data["transitioned"] is False

    def test_stats(self, client, session) -> None:
        data = client.get(f"/api/sessions/{session['session_id']}/pacing/stats").json()
        assert data["total_time"] == 1800
        assert data["current_phase"] == "hook"
        assert data["phase_history"] == []


class TestCheckConnection:
    def test_reachable(self, client) -> None:
        resp = MagicMock()
        resp.raise_for_status = MagicMock()
        mock_get = AsyncMock(return_value=resp)
        with patch("httpx.AsyncClient.get", mock_get):
            data = client.post("/api/check-connection", json={"provider_url": "http://localhost:5001/"}).json()
        assert data == {"ok": True}
        assert mock_get.call_args[0][0] == "http://localhost:5001/api/v1/model"

    def test_unreachable(self, client) -> None:
        mock_get = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient.get", mock_get):
            data = client.post("/api/check-connection", json={"provider_url": "http://localhost:5001"}).json()
        assert data == {"ok": False}
