import pytest
import requests

from englishpath import create_app, db
from englishpath.services import EXTENSION_KEY
from englishpath.tts import MediaError

GOOD_FEEDBACK = {
    "candidates": [
        {"content": {"parts": [{"text": "Great job! Try: 'I enjoy reading because...'"}]}}
    ]
}


class FakeResponse:
    def __init__(self, body=None, status=200, bad_json=False):
        self.body = body
        self.status_code = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if self.bad_json:
            raise requests.JSONDecodeError("Expecting value", "<html>", 0)
        return self.body


class FakeHttp:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, response=None, exc=None):
        self.response = response if response is not None else FakeResponse(GOOD_FEEDBACK)
        self.exc = exc
        self.calls = []
        self.closed = False

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        self.closed = True


class FakeSpeech:
    def __init__(self, fail=False):
        self.fail = fail
        self.spoken = []

    def synthesize(self, text):
        if self.fail:
            raise MediaError("speech playback is unavailable right now")
        self.spoken.append(text)
        return b"ID3" + text.encode("utf-8")

    def close(self):
        pass


TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test-secret",
    "JWT_SECRET": "test-secret",
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "APP_NAMESPACE": "test-app",
    "INITIAL_AUTH_TOKEN": None,
    "GEMINI_API_URL": "https://feedback.invalid/v1beta/models/test:generateContent",
    "GEMINI_API_KEY": "test-key",
    "SSE_HEARTBEAT_SECONDS": 0.05,
    "LOG_LEVEL": "DEBUG",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    services = app.extensions[EXTENSION_KEY]
    services.feedback.http = FakeHttp()
    services.speech = FakeSpeech()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    services.close()


@pytest.fixture
def services(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def client(app):
    return app.test_client()


def sign_in(client, token=None):
    body = {"token": token} if token else {}
    resp = client.post("/api/signin", json=body)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def signed_in(client):
    """(token, uid) for an anonymous user who already has a profile."""
    data = sign_in(client)
    token = data["token"]
    resp = client.post("/api/profile", json={"display_name": "Test Learner"}, headers=bearer(token))
    assert resp.status_code == 201
    return token, data["uid"]
