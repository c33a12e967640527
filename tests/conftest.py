"""
Shared pytest fixtures for all tests.
"""

import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from scravo.api.main import create_app
from tests.fixtures.database import FakeDatabase
from tests.fixtures.handlers import HandlerSpy, build_handler_groups


# ============================================================
# Settings Fixtures
# ============================================================


@pytest.fixture
def uploads_dir(tmp_path):
    """Empty uploads root inside a temp directory."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(uploads_dir):
    """Build Settings without reading .env; production unless overridden."""

    def _make(**overrides) -> Settings:
        values = {
            "node_env": "production",
            "uploads_dir": str(uploads_dir),
            "cors_origins": "http://localhost:5173,https://revalue-frontend.vercel.app",
            "frontend_url": None,
            "cors_origin_regex": None,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


# ============================================================
# Collaborator Fixtures
# ============================================================


@pytest.fixture
def handler_spy() -> HandlerSpy:
    """Spy shared by the stand-in handler groups."""
    return HandlerSpy()


@pytest.fixture
def handler_groups(handler_spy) -> dict:
    """Auth, listings and transactions routers."""
    return build_handler_groups(handler_spy)


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


# ============================================================
# Client Fixtures
# ============================================================


@pytest.fixture
def make_client(make_settings, handler_groups, fake_database):
    """
    Build a started TestClient.

    Usage:
        def test_something(make_client):
            client = make_client(node_env="development")
            response = client.get("/")
    """
    clients = []

    def _make(groups=None, database=None, **overrides) -> TestClient:
        app = create_app(
            make_settings(**overrides),
            handler_groups=handler_groups if groups is None else groups,
            database=database or fake_database,
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    """Production-mode client with all handler groups mounted."""
    return make_client()
