import mongomock
import pytest

from application import create_app
from database import MongoStore
from errors import Unauthenticated


class FakeVerifier:
    """Treats the bearer token as '<email>' unless it is 'bad'."""

    def __init__(self):
        self.calls = []

    def verify(self, token):
        self.calls.append(token)
        if token == "bad" or "@" not in token:
            raise Unauthenticated()
        return token


@pytest.fixture
def store():
    return MongoStore("mongodb://test", "ecotrack_test", client=mongomock.MongoClient())


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def app(store, verifier):
    app = create_app({"TESTING": True}, store=store, verifier=verifier)
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def auth_header(email):
    return {"Authorization": f"Bearer {email}"}


@pytest.fixture
def sample_challenge():
    return {"title": "Plastic-Free Week", "category": "waste", "duration": 7}


@pytest.fixture
def make_challenge(client, sample_challenge):
    def _make(email="a@x.com", **overrides):
        body = {**sample_challenge, **overrides}
        resp = client.post("/api/challenges", json=body, headers=auth_header(email))
        assert resp.status_code == 201
        return resp.get_json()["challengeId"]
    return _make
