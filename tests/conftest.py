"""Pytest configuration and shared fixtures"""

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.app.core.container import Container
from backend.app.main import create_app
from backend.app.repositories.document_store import InMemoryDocumentStore
from backend.app.services.auth_service import AuthService
from backend.app.services.identity_gateway import GitHubProvider
from tests.helpers import FakeGitHub


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def provider(fake_github) -> GitHubProvider:
    return GitHubProvider(client=httpx.AsyncClient(transport=httpx.MockTransport(fake_github)))


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def tokens() -> AuthService:
    return AuthService(secret_key="test-secret-key")


@pytest.fixture
def container(store, provider, tokens) -> Container:
    return Container(store, provider=provider, tokens=tokens)


@pytest.fixture
def client(container):
    """Test client running startup and shutdown around each test"""
    with TestClient(create_app(container)) as test_client:
        yield test_client
