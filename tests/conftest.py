import datetime as dt
import random

import pytest

import app as app_module
import config
from ratings import build_rating_table

FIXED_NOW = dt.datetime(2026, 10, 19, 12, 0, tzinfo=dt.timezone.utc)


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, payload=None, text="", headers=None, chunks=()):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.headers = headers or {}
        self._chunks = list(chunks)
        self.closed = False

    def json(self):
        return self._payload

    def iter_content(self, chunk_size=1):
        yield from self._chunks

    def close(self):
        self.closed = True


@pytest.fixture
def no_token(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_TOKEN", "")


@pytest.fixture
def with_token(monkeypatch):
    monkeypatch.setattr(config, "GITHUB_TOKEN", "test-token")


@pytest.fixture
def rating_table():
    return build_rating_table({
        "10.0": [{"name": "GOAT"}],
        "4.6": [{"name": "Midfielder"}],
        "5.0": [],
    })


@pytest.fixture
def client(monkeypatch, rating_table):
    flask_app = app_module.app
    monkeypatch.setitem(flask_app.config, "RATING_TABLE", rating_table)
    monkeypatch.setitem(flask_app.config, "RATING_RNG", random.Random(42))
    monkeypatch.setitem(flask_app.config, "CLOCK", lambda: FIXED_NOW)
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as c:
        yield c
