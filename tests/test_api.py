import fakeredis
from fastapi.testclient import TestClient

from featuregate.dependencies import get_gate
from featuregate.gate import FeatureGate
from featuregate.main import app


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_activate_group_and_evaluate(client):
    response = client.post("/features/chat/groups", json={"group": "fivesonly"}, headers={"X-Actor": "ops"})
    assert response.status_code == 200
    assert response.json() == {"name": "chat", "groups": ["fivesonly"], "users": [], "percentage": None}

    data = client.get("/evaluate/chat", params={"user_id": 5}).json()
    assert data == {"key": "chat", "active": True, "reason": "group:fivesonly"}
    assert client.get("/evaluate/chat", params={"user_id": 6}).json()["active"] is False


def test_anonymous_evaluation(client):
    client.post("/features/chat/groups", json={"group": "all"})
    data = client.get("/evaluate/chat").json()
    assert data == {"key": "chat", "active": True, "reason": "group:all"}


def test_users_and_percentage(client):
    client.post("/features/comment/users", json={"user_id": 42})
    client.post("/features/comment/users", json={"user_id": 7})
    state = client.delete("/features/comment/users/7").json()
    assert state["users"] == [42]

    state = client.put("/features/comment/percentage", json={"percentage": 20}).json()
    assert state["percentage"] == 20
    assert client.get("/evaluate/comment", params={"user_id": 119}).json()["reason"] == "percentage-20%"

    state = client.delete("/features/comment/percentage").json()
    assert state["percentage"] is None
    assert client.get("/evaluate/comment", params={"user_id": 119}).json()["active"] is False


def test_deactivate_group(client):
    client.post("/features/chat/groups", json={"group": "all"})
    state = client.delete("/features/chat/groups/all").json()
    assert state["groups"] == []


def test_list_and_deactivate_all(client):
    client.post("/features/chat/groups", json={"group": "all"})
    client.put("/features/admin/percentage", json={"percentage": 0})
    data = client.get("/features").json()
    assert data == {"registered": ["admin", "chat", "comment", "moderate"], "active": ["admin", "chat"]}

    response = client.delete("/features/chat")
    assert response.status_code == 204
    assert client.get("/features").json()["active"] == ["admin"]
    assert client.get("/features/chat").json() == {"name": "chat", "groups": [], "users": [], "percentage": None}


def test_invalid_feature_is_404(client):
    response = client.post("/features/invalid/groups", json={"group": "all"})
    assert response.status_code == 404
    assert response.json()["feature"] == "invalid"
    assert client.delete("/features/invalid").status_code == 404
    assert client.get("/features").json()["active"] == []


def test_percentage_out_of_range_is_422(client):
    assert client.put("/features/chat/percentage", json={"percentage": 101}).status_code == 422
    assert client.put("/features/chat/percentage", json={"percentage": -1}).status_code == 422
    assert client.post("/features/chat/users", json={"user_id": -1}).status_code == 422


def test_store_failure_is_503():
    server = fakeredis.FakeServer()
    gate = FeatureGate(fakeredis.FakeRedis(server=server, decode_responses=True))
    server.connected = False
    app.dependency_overrides[get_gate] = lambda: gate
    try:
        client = TestClient(app)
        assert client.get("/evaluate/chat", params={"user_id": 1}).status_code == 503
        assert client.post("/features/chat/groups", json={"group": "all"}).status_code == 503
        assert client.get("/healthz").status_code == 503
    finally:
        app.dependency_overrides.clear()


def test_metrics_exposed(client):
    client.get("/evaluate/chat", params={"user_id": 1})
    body = client.get("/metrics").text
    assert "feature_evaluations_total" in body
    assert 'feature_evaluations_total{feature="chat",result="false"}' in body


def test_unknown_names_share_one_metric_series(client):
    client.get("/evaluate/made-up-1", params={"user_id": 1})
    client.get("/evaluate/made-up-2", params={"user_id": 1})
    body = client.get("/metrics").text
    assert 'feature="made-up-1"' not in body
    assert 'feature_evaluations_total{feature="other",result="false"}' in body


def test_malformed_user_id_does_not_break_state(client, restricted_gate):
    restricted_gate.redis.sadd("feature:chat:users", "bob", "3")
    response = client.get("/features/chat")
    assert response.status_code == 200
    assert response.json()["users"] == [3]
