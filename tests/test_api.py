"""Tests for the FastAPI REST endpoints."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import CalculatorConfig
from decimal_math import DivisionMode
from store import SessionStore


@pytest.fixture
def client():
    return TestClient(create_app(store=SessionStore()))


@pytest.fixture
def exact_client():
    config = CalculatorConfig(division_mode=DivisionMode.EXACT)
    return TestClient(create_app(store=SessionStore(config), config=config))


def _new_session(client) -> str:
    resp = client.post("/sessions")
    assert resp.status_code == 201
    return resp.json()["id"]


def _press(client, session_id: str, *actions: str) -> dict:
    data = {}
    for action in actions:
        resp = client.post(f"/sessions/{session_id}/press", json={"action": action})
        assert resp.status_code == 200, resp.text
        data = resp.json()
    return data


# ---------------------------------------------------------------------------
# POST /sessions, GET /sessions
# ---------------------------------------------------------------------------

class TestSessionLifecycle:

    def test_create_returns_initial_display(self, client):
        resp = client.post("/sessions")
        assert resp.status_code == 201
        data = resp.json()
        assert data["display"] == "0"
        assert data["phase"] == "idle"
        assert data["first_operand"] is None
        assert data["operator"] is None
        assert data["error"] is False
        assert "created_at" in data
        assert "updated_at" in data

    def test_get_session(self, client):
        session_id = _new_session(client)
        resp = client.get(f"/sessions/{session_id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == session_id

    def test_get_missing_404(self, client):
        resp = client.get("/sessions/nope")
        assert resp.status_code == 404
        assert "nope" in resp.json()["detail"]

    def test_list(self, client):
        for _ in range(3):
            _new_session(client)
        resp = client.get("/sessions", params={"limit": 2})
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 3
        assert len(data["items"]) == 2

    def test_list_invalid_limit_422(self, client):
        resp = client.get("/sessions", params={"limit": 0})
        assert resp.status_code == 422

    def test_delete(self, client):
        session_id = _new_session(client)
        resp = client.delete(f"/sessions/{session_id}")
        assert resp.status_code == 200
        assert resp.json()["id"] == session_id
        assert client.get(f"/sessions/{session_id}").status_code == 404

    def test_delete_missing_404(self, client):
        assert client.delete("/sessions/nope").status_code == 404


# ---------------------------------------------------------------------------
# POST /sessions/{id}/press, POST /sessions/{id}/sequence
# ---------------------------------------------------------------------------

class TestPressEndpoint:

    def test_add_scenario(self, client):
        session_id = _new_session(client)
        data = _press(client, session_id, "1", "decimal", "1")
        assert data["display"] == "1.1"
        data = _press(client, session_id, "add", "2", "decimal", "2")
        assert data["display"] == "2.2"
        assert data["phase"] == "accumulating_second_operand"
        data = _press(client, session_id, "calculate")
        assert data["display"] == "3.3"
        assert data["first_operand"] == 3.3
        assert data["phase"] == "result"

    def test_divide_by_zero_scenario(self, client):
        session_id = _new_session(client)
        data = _press(client, session_id, "5", "divide", "0", "calculate")
        assert data["display"] == "Error"
        assert data["error"] is True
        assert data["first_operand"] is None
        assert data["operator"] is None

    def test_recovers_after_error(self, client):
        session_id = _new_session(client)
        _press(client, session_id, "5", "divide", "0", "calculate")
        data = _press(client, session_id, "2", "multiply", "4", "calculate")
        assert data["display"] == "8"
        assert data["error"] is False

    def test_unknown_action_422(self, client):
        session_id = _new_session(client)
        resp = client.post(f"/sessions/{session_id}/press", json={"action": "equals"})
        assert resp.status_code == 422

    def test_missing_session_404(self, client):
        resp = client.post("/sessions/nope/press", json={"action": "1"})
        assert resp.status_code == 404

    def test_sequence(self, client):
        session_id = _new_session(client)
        resp = client.post(
            f"/sessions/{session_id}/sequence",
            json={"actions": ["0", "decimal", "1", "add", "0", "decimal", "2", "calculate"]},
        )
        assert resp.status_code == 200
        assert resp.json()["display"] == "0.3"

    def test_sequence_bad_action_leaves_state(self, client):
        session_id = _new_session(client)
        _press(client, session_id, "9")
        resp = client.post(
            f"/sessions/{session_id}/sequence", json={"actions": ["1", "nope"]}
        )
        assert resp.status_code == 422
        assert client.get(f"/sessions/{session_id}").json()["display"] == "9"

    def test_sequence_missing_session_404(self, client):
        resp = client.post("/sessions/nope/sequence", json={"actions": ["1"]})
        assert resp.status_code == 404

    def test_exact_mode_session(self, exact_client):
        session_id = _new_session(exact_client)
        data = _press(exact_client, session_id, "1", "divide", "3", "calculate")
        assert data["first_operand"] == 1 / 3


# ---------------------------------------------------------------------------
# POST /arithmetic/{operation}
# ---------------------------------------------------------------------------

class TestArithmeticEndpoint:

    @pytest.mark.parametrize("operation, a, b, result, display", [
        ("add", 0.1, 0.2, 0.3, "0.3"),
        ("subtract", 1, 0.9, 0.1, "0.1"),
        ("multiply", 1.1, 1.1, 1.21, "1.21"),
        ("divide", 0.69, 0.3, 2.3, "2.3"),
        ("add", 2, 3, 5, "5"),
    ])
    def test_operations(self, client, operation, a, b, result, display):
        resp = client.post(f"/arithmetic/{operation}", json={"a": a, "b": b})
        assert resp.status_code == 200
        data = resp.json()
        assert data["operation"] == operation
        assert data["result"] == result
        assert data["display"] == display

    def test_divide_by_zero_422(self, client):
        resp = client.post("/arithmetic/divide", json={"a": 5, "b": 0})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Error"

    def test_overflow_422(self, client):
        resp = client.post("/arithmetic/multiply", json={"a": 1e200, "b": 1e200})
        assert resp.status_code == 422

    def test_unknown_operation_404(self, client):
        resp = client.post("/arithmetic/modulo", json={"a": 5, "b": 2})
        assert resp.status_code == 404

    def test_missing_operand_422(self, client):
        resp = client.post("/arithmetic/add", json={"a": 5})
        assert resp.status_code == 422

    def test_non_numeric_operand_422(self, client):
        resp = client.post("/arithmetic/add", json={"a": "five", "b": 2})
        assert resp.status_code == 422

    def test_exact_division(self, exact_client):
        resp = exact_client.post("/arithmetic/divide", json={"a": 1, "b": 3})
        assert resp.status_code == 200
        assert resp.json()["result"] == 1 / 3
