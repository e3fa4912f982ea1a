"""Newsletter subscribe/unsubscribe."""

from __future__ import annotations

from fastapi.testclient import TestClient


def test_subscribe_normalises_email(client: TestClient):
    response = client.post("/newsletter/subscribe", json={"email": "Citalac@Example.COM", "name": "Čitalac"})

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "citalac@example.com"
    assert body["status"] == "active"


def test_subscribing_twice_conflicts(client: TestClient):
    client.post("/newsletter/subscribe", json={"email": "dupli@example.com"})

    response = client.post("/newsletter/subscribe", json={"email": "DUPLI@example.com"})

    assert response.status_code == 409


def test_unsubscribe(client: TestClient, auth_headers):
    client.post("/newsletter/subscribe", json={"email": "odlazi@example.com"})

    response = client.post("/newsletter/unsubscribe", json={"email": "odlazi@example.com"})
    assert response.status_code == 204

    rows = client.get("/newsletter/subscriptions", headers=auth_headers).json()
    assert [(r["email"], r["status"]) for r in rows] == [("odlazi@example.com", "unsubscribed")]
    assert rows[0]["unsubscribed_at"] is not None


def test_unsubscribe_unknown_address_is_silent(client: TestClient):
    response = client.post("/newsletter/unsubscribe", json={"email": "niko@example.com"})
    assert response.status_code == 204


def test_subscriber_list_requires_auth(client: TestClient, auth_headers):
    client.post("/newsletter/subscribe", json={"email": "a@example.com"})
    client.post("/newsletter/subscribe", json={"email": "b@example.com"})
    client.post("/newsletter/unsubscribe", json={"email": "b@example.com"})

    assert client.get("/newsletter/subscriptions").status_code == 401
    active = client.get("/newsletter/subscriptions", params={"status": "active"}, headers=auth_headers)
    assert [r["email"] for r in active.json()] == ["a@example.com"]
