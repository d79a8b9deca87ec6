# tests/conftest.py
import pytest
from datetime import datetime, timedelta, timezone

from classvote import create_app, db
from classvote.config import TestingConfig


class Clock:
    """Controllable replacement for the services' _now()"""
    def __init__(self, start):
        self._now = start

    def advance(self, **kwargs):
        self._now += timedelta(**kwargs)

    def now(self):
        return self._now


@pytest.fixture
def app(tmp_path):
    class Config(TestingConfig):
        AUDIT_LOG_DIR = str(tmp_path / "logs")

    app = create_app(Config)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def services(app):
    return app.extensions['classvote']


@pytest.fixture
def store(services):
    return services['store']


@pytest.fixture
def tokens(services):
    return services['tokens']


@pytest.fixture
def registration(services):
    return services['registration']


@pytest.fixture
def issuer(services):
    return services['issuer']


@pytest.fixture
def ballot_box(services):
    return services['ballot_box']


@pytest.fixture
def clock(tokens, monkeypatch):
    clock = Clock(datetime(2025, 10, 23, 12, 0, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(tokens, "_now", clock.now)
    return clock


@pytest.fixture
def class_10a(registration):
    """Alice, Bob and Carol registered in 10A; returns their voter keys by name."""
    return {
        "Alice": registration.register_direct("alice@x.edu", "Alice", "10A"),
        "Bob": registration.register_direct("bob@x.edu", "Bob", "10A"),
        "Carol": registration.register_direct("carol@x.edu", "Carol", "10A"),
    }
