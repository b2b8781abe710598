import fakeredis
import pytest
from fastapi.testclient import TestClient

from featuregate.dependencies import get_gate
from featuregate.gate import FeatureGate
from featuregate.main import app
from featuregate.models import User

VALID_FEATURES = ["chat", "comment", "moderate", "admin"]


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def gate(redis_client):
    return FeatureGate(redis_client)


@pytest.fixture
def restricted_gate(redis_client):
    return FeatureGate(redis_client, VALID_FEATURES)


@pytest.fixture
def fivesonly():
    return lambda user: user is not None and user.id == 5


@pytest.fixture
def client(restricted_gate, fivesonly):
    restricted_gate.define_group("fivesonly", fivesonly)
    app.dependency_overrides[get_gate] = lambda: restricted_gate
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def count_active():
    def count(gate, feature, ids=range(1, 101)):
        return len([i for i in ids if gate.active(feature, User(i))])
    return count
