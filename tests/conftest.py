"""Shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from app.ai.enrichment import EnrichmentClient, get_enrichment_client
from app.articles.repository import ArticleRepository
from app.auth.service import AuthService
from app.core.database import get_db
from app.main import app

from fakes import FakeDatabase


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def repo(fake_db):
    return ArticleRepository(fake_db)


@pytest.fixture
def offline_enrichment():
    """No API key: every call takes the local fallback."""
    return EnrichmentClient(api_key="")


@pytest.fixture
def api(fake_db, offline_enrichment):
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_enrichment_client] = lambda: offline_enrichment
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user_id: str, name: str = "Ada", email: str = "ada@example.com") -> dict:
    token = AuthService.create_access_token(user_id, email, name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def ada_headers():
    return auth_headers("user-ada", "Ada", "ada@example.com")


@pytest.fixture
def bob_headers():
    return auth_headers("user-bob", "Bob", "bob@example.com")
