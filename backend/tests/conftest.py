import io
import itertools

import pytest

from hubdesk import create_app
from hubdesk.extensions import db as _db
from hubdesk.models.identity import Identity
from hubdesk.models.profile import Profile
from hubdesk.modules.profiles.service import ensure_profile
from hubdesk.policy import Caller
from hubdesk.security import issue_token


@pytest.fixture
def app(tmp_path):
    app = create_app(
        "testing",
        {
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'hubdesk.db'}",
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
            "LOG_DIR": str(tmp_path / "logs"),
        },
    )
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


_seq = itertools.count(1)


@pytest.fixture
def make_profile(app):
    """Create identity + profile rows; returns the Profile."""

    def _make(name: str, role: str = "student", hub: str | None = None) -> Profile:
        identity = Identity(email=f"user{next(_seq)}@hubdesk.test", password_hash="not-used")
        _db.session.add(identity)
        _db.session.commit()
        return ensure_profile(identity.id, name, role, hub)

    return _make


@pytest.fixture
def caller_for():
    def _caller(profile: Profile) -> Caller:
        return Caller.from_profile(profile)

    return _caller


@pytest.fixture
def auth_headers(app):
    def _headers(profile: Profile) -> dict:
        return {"Authorization": f"Bearer {issue_token(profile.id)}"}

    return _headers


@pytest.fixture
def draft():
    def _draft(**overrides) -> dict:
        data = {
            "title": "Wi-Fi down in lab",
            "description": "The wireless network in lab 2 drops every few minutes.",
            "category": "network",
            "hub": "Kochi Hub",
            "room": "Lab 2",
            "priority": "high",
        }
        data.update(overrides)
        return data

    return _draft


class FakeUpload:
    """Minimal stand-in for werkzeug's FileStorage."""

    def __init__(self, filename: str, data: bytes, mimetype: str = "application/octet-stream"):
        self.filename = filename
        self.mimetype = mimetype
        self._stream = io.BytesIO(data)

    def read(self) -> bytes:
        return self._stream.read()


@pytest.fixture
def fake_upload():
    return FakeUpload
