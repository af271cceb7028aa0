"""HTTP surface for marks: create, list, validation and store failures."""
from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from markboard.core.exceptions import StoreUnavailable
from markboard.utils import utcnow


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


def test_create_mark_end_to_end(client: TestClient):
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "connected"}

        r = client.post("/api/marks", json={"lat": 50.45, "lng": 30.52, "color": "green"})
        assert r.status_code == 201
        created = r.json()

        event = ws.receive_json()

    assert created["id"]
    assert created["color"] == "green"
    assert created["note"] is None
    assert created["street"] == "Location"
    assert _parse(created["expiresAt"]) - _parse(created["createdAt"]) == timedelta(seconds=1800)

    assert event["type"] == "mark.created"
    assert event["data"] == created

    r = client.get("/api/marks")
    assert r.status_code == 200
    assert created["id"] in [m["id"] for m in r.json()]


def test_whitespace_note_comes_back_null(client: TestClient):
    r = client.post(
        "/api/marks", json={"lat": 1.5, "lng": 2.5, "color": "split", "note": "   "}
    )
    assert r.status_code == 201
    assert r.json()["note"] is None


def test_note_is_trimmed(client: TestClient):
    r = client.post(
        "/api/marks", json={"lat": 1.5, "lng": 2.5, "color": "blue", "note": "  slippery  "}
    )
    assert r.status_code == 201
    assert r.json()["note"] == "slippery"


def test_malformed_input_is_rejected(client: TestClient, broadcaster, monkeypatch):
    monkeypatch.setattr(client.app.state.lifecycle, "broadcaster", broadcaster)

    r = client.post("/api/marks", json={"lat": "x", "color": "purple"})

    assert r.status_code == 400
    assert r.json()["error"]
    assert client.get("/api/marks").json() == []
    assert broadcaster.events == []


def test_non_json_body_is_rejected(client: TestClient):
    r = client.post("/api/marks", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_store_failure_returns_500(client: TestClient, monkeypatch):
    def unavailable(mark):
        raise StoreUnavailable("connection refused")

    monkeypatch.setattr(client.app.state.mark_store, "insert", unavailable)

    r = client.post("/api/marks", json={"lat": 1.0, "lng": 2.0, "color": "blue"})

    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error"}


def test_list_hides_expired_marks(client: TestClient, mark_store, make_mark):
    now = utcnow()
    live = mark_store.insert(make_mark(now))
    mark_store.insert(make_mark(now - timedelta(hours=1)))

    r = client.get("/api/marks")

    assert r.status_code == 200
    assert [m["id"] for m in r.json()] == [live.id]
