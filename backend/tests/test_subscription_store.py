"""SubscriptionStore: upsert by endpoint and idempotent deletion."""

from markboard.utils import as_utc, utcnow

ENDPOINT = "https://push.example.com/v1/abcd"
KEYS = {"p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQtUbVlUls0VJXg7A8u-Ts1XbjhazAkj7I99e8QcYP7DkM", "auth": "tBHItJI5svbpez7KI4CCXg"}


def test_subscribing_twice_keeps_one_row(subscription_store):
    first = subscription_store.insert(ENDPOINT, KEYS)
    second = subscription_store.insert(ENDPOINT, {"p256dh": "new-key", "auth": "new-auth"})

    rows = [s for s in subscription_store.list() if s.endpoint == ENDPOINT]
    assert len(rows) == 1
    assert second.id == first.id
    # Keys are refreshed from the latest subscribe call
    assert rows[0].keys == {"p256dh": "new-key", "auth": "new-auth"}


def test_keys_round_trip_as_structured_blob(subscription_store):
    subscription_store.insert(ENDPOINT, KEYS)

    (stored,) = subscription_store.list()
    assert stored.keys == KEYS
    assert stored.created_at is not None


def test_delete_by_endpoint_is_idempotent(subscription_store):
    subscription_store.insert(ENDPOINT, KEYS)
    subscription_store.insert("https://push.example.com/v1/other", KEYS)

    assert subscription_store.delete_by_endpoint(ENDPOINT) == 1
    assert subscription_store.delete_by_endpoint(ENDPOINT) == 0
    assert subscription_store.delete_by_endpoint("https://unknown.example.com") == 0

    remaining = [s.endpoint for s in subscription_store.list()]
    assert remaining == ["https://push.example.com/v1/other"]


def test_created_at_is_recorded_in_utc(subscription_store):
    before = utcnow()
    subscription_store.insert(ENDPOINT, KEYS)

    (stored,) = subscription_store.list()
    assert as_utc(stored.created_at) >= before
