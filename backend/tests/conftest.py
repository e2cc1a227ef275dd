"""Pytest configuration and fixtures for formwizard tests.

Every test gets a fresh in-memory SQLite database, the app's ``get_db``
dependency pointed at it, and the field layout reset to the default.
"""

import os

os.environ.setdefault("FORMWIZARD_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from formwizard.client.api import FormWizardClient
from formwizard.client.drafts import LocalDraftStore
from formwizard.database import Base, get_db
from formwizard.main import app
from formwizard.models import FormConfigRow, FormSubmission  # noqa: F401
from formwizard.services.config_store import field_config_store


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def _reset_config_store():
    """Each test starts from the default layout."""
    field_config_store.reset()
    yield
    field_config_store.reset()


@pytest_asyncio.fixture
async def asgi_transport(session_factory):
    """ASGI transport into the app, with get_db bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield httpx.ASGITransport(app=app, raise_app_exceptions=False)
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(asgi_transport) -> AsyncGenerator[AsyncClient, None]:
    """Raw HTTP client for endpoint tests."""
    async with AsyncClient(transport=asgi_transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def api(asgi_transport) -> AsyncGenerator[FormWizardClient, None]:
    """FormWizardClient wired to the app (what the wizard and admin use)."""
    async with FormWizardClient("http://test", transport=asgi_transport) as api:
        yield api


@pytest.fixture
def drafts(tmp_path) -> LocalDraftStore:
    return LocalDraftStore(tmp_path / "draft.json")


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest.fixture
def default_layout() -> dict:
    return {
        "fields": {
            "address": {"enabled": True, "panel": 2},
            "birthdate": {"enabled": True, "panel": 2},
            "aboutYou": {"enabled": True, "panel": 3},
        }
    }


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")
    config.addinivalue_line("markers", "client: Client-side controller tests")
