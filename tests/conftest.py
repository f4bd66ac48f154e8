# Test configuration
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

from mathapi.audit.store import InMemoryAuditStore  # noqa: E402
from mathapi.config import Settings  # noqa: E402
from mathapi.database import build_engine, build_session_factory, create_tables  # noqa: E402
from mathapi.main import create_app  # noqa: E402
from mathapi.metrics.collector import MetricsCollector  # noqa: E402


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        JWT_SECRET_KEY="test-secret",
        AUDIT_BACKEND="memory",
        CREDENTIAL_BACKEND="static",
        STATIC_USERNAME="admin",
        STATIC_PASSWORD="password",
        AUDIT_WRITE_TIMEOUT_SECONDS=0.5,
    )


@pytest.fixture
def audit_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def app(settings, audit_store, metrics):
    return create_app(settings, audit_store=audit_store, metrics=metrics)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers(client) -> dict[str, str]:
    response = client.post("/login", json={"username": "admin", "password": "password"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory bound to a throwaway sqlite database with all tables."""
    engine = build_engine(Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"))
    await create_tables(engine)
    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()
