"""HTTP surface for Web Push: public key, subscribe and unsubscribe."""
import pytest
from fastapi.testclient import TestClient

from markboard.core.config import Settings

SUBSCRIPTION = {
    "endpoint": "https://fcm.googleapis.com/fcm/send/abc123",
    "keys": {"p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQ", "auth": "tBHItJI5svbpez7KI4CCXg"},
}


@pytest.fixture
def push_disabled(client: TestClient, monkeypatch):
    disabled = Settings(DATABASE_URL="sqlite://", VAPID_PUBLIC_KEY=None, VAPID_PRIVATE_KEY=None)
    monkeypatch.setattr(client.app.state.dispatcher, "settings", disabled)
    return client


def test_public_key(client: TestClient):
    r = client.get("/api/push/public-key")
    assert r.status_code == 200
    assert r.json() == {"publicKey": "test-public-key"}


def test_public_key_when_push_disabled(push_disabled: TestClient):
    r = push_disabled.get("/api/push/public-key")
    assert r.status_code == 503
    assert r.json()["error"]


def test_subscribe(client: TestClient, subscription_store):
    r = client.post("/api/push/subscribe", json=SUBSCRIPTION)

    assert r.status_code == 201
    assert r.json() == {"ok": True}
    (stored,) = subscription_store.list()
    assert stored.endpoint == SUBSCRIPTION["endpoint"]
    assert stored.keys == SUBSCRIPTION["keys"]


def test_subscribe_twice_keeps_one_row(client: TestClient, subscription_store):
    assert client.post("/api/push/subscribe", json=SUBSCRIPTION).status_code == 201
    assert client.post("/api/push/subscribe", json=SUBSCRIPTION).status_code == 201

    assert len(subscription_store.list()) == 1


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"endpoint": "https://push.example.com"},
        {"endpoint": "https://push.example.com", "keys": {"p256dh": "abc"}},
        {"endpoint": "", "keys": {"p256dh": "abc", "auth": "def"}},
    ],
)
def test_subscribe_rejects_invalid_input(client: TestClient, subscription_store, body):
    r = client.post("/api/push/subscribe", json=body)

    assert r.status_code == 400
    assert r.json()["error"]
    assert subscription_store.list() == []


def test_subscribe_when_push_disabled(push_disabled: TestClient, subscription_store):
    r = push_disabled.post("/api/push/subscribe", json=SUBSCRIPTION)

    assert r.status_code == 503
    assert subscription_store.list() == []


def test_unsubscribe_is_idempotent(client: TestClient, subscription_store):
    client.post("/api/push/subscribe", json=SUBSCRIPTION)

    for _ in range(2):
        r = client.delete("/api/push/subscribe", params={"endpoint": SUBSCRIPTION["endpoint"]})
        assert r.status_code == 200
        assert r.json() == {"ok": True}

    assert subscription_store.list() == []
