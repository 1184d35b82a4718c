"""Pytest fixtures for the Portfolio CMS API.

MongoDB is replaced by mongomock; translation, image storage and email are
replaced through app.dependency_overrides with recording fakes.
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TRANSLATION_ENABLED", "false")

from typing import Dict, List, Tuple

import mongomock
import pytest
from fastapi.testclient import TestClient

from assets import StoredAsset, get_asset_store
from database import get_db
from limiter import limiter
from mailer import get_mailer
from main import app
from repositories import AdminRepository
from security import seed_admin
from translator import get_translator

ADMIN_EMAIL = "admin@portfolio.dev"
ADMIN_PASSWORD = "admin123"


class FakeTranslator:
    """Marks translated text so tests can tell it from the source."""

    def __init__(self):
        self.calls: List[str] = []

    def translate(self, text: str) -> str:
        self.calls.append(text)
        return f"[ar] {text}"


class RecordingAssetStore:
    """Records uploads and deletions in call order."""

    def __init__(self):
        self.events: List[Tuple[str, str]] = []
        self.fail_uploads = False
        self._counter = 0

    def upload(self, data: bytes, folder: str) -> StoredAsset:
        if self.fail_uploads:
            raise RuntimeError("image host unavailable")
        self._counter += 1
        asset_id = f"{folder}/img{self._counter}"
        self.events.append(("upload", asset_id))
        return StoredAsset(url=f"https://img.test/{asset_id}.png", asset_id=asset_id)

    def delete(self, asset_id: str) -> None:
        self.events.append(("delete", asset_id))

    @property
    def deleted(self) -> List[str]:
        return [asset_id for op, asset_id in self.events if op == "delete"]


class RecordingMailer:
    def __init__(self):
        self.sent: List[Dict[str, str]] = []

    def send_password_reset(self, to: str, reset_url: str) -> None:
        self.sent.append({"to": to, "url": reset_url})


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()["portfolio_test"]


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def asset_store() -> RecordingAssetStore:
    return RecordingAssetStore()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def client(mongo_db, translator, asset_store, mailer):
    """TestClient wired to in-memory fakes; server errors come back as 500s."""
    limiter.enabled = False
    app.dependency_overrides[get_db] = lambda: mongo_db
    app.dependency_overrides[get_translator] = lambda: translator
    app.dependency_overrides[get_asset_store] = lambda: asset_store
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client, mongo_db) -> Dict[str, str]:
    """Seed the default admin, log in, return bearer headers."""
    seed_admin(AdminRepository(mongo_db))
    response = client.post(
        "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
