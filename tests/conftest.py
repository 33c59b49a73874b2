"""
Shared test fixtures for the MinePanel backend test suite.

Async throughout (aiosqlite + AsyncSession); the game-server plugin is
replaced by an httpx.MockTransport so no network calls are made.
"""

import os
import sys
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["JWT_SECRET"] = "test-access-secret"
os.environ["REFRESH_SECRET"] = "test-refresh-secret"
os.environ["PLUGIN_SHARED_SECRET"] = "test-plugin-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from minepanel.api.v1.deps import get_db, get_plugin_client
from minepanel.core.roles import Role
from minepanel.core.security import TokenIssuer, get_password_hash
from minepanel.db.base import Base
from minepanel.main import app
from minepanel.models.user import User
from minepanel.schemas.token import Identity
from minepanel.services.plugin_proxy import PluginClient

# A separate test engine shared by the app (via dependency override) and tests
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

TEST_PASSWORD = "password123"


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return app.state.token_issuer


# ── Users & credentials ─────────────────────────────────────────────
@pytest.fixture
def create_user(db_session: AsyncSession) -> Callable[..., Any]:
    async def _create(username: str, role: Role, password: str = TEST_PASSWORD) -> User:
        user = User(
            username=username,
            hashed_password=get_password_hash(password),
            role=role.value,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def auth_headers(token_issuer: TokenIssuer) -> Callable[[User], dict[str, str]]:
    """Build an Authorization header carrying a fresh access token for *user*."""

    def _headers(user: User) -> dict[str, str]:
        identity = Identity(id=user.id, username=user.username, role=user.role)
        return {"Authorization": f"Bearer {token_issuer.create_access_token(identity)}"}

    return _headers


@pytest.fixture
async def admin_user(create_user) -> User:
    return await create_user("admin", Role.ADMIN)


@pytest.fixture
async def mod_user(create_user) -> User:
    return await create_user("moderator", Role.MOD)


@pytest.fixture
async def viewer_user(create_user) -> User:
    return await create_user("viewer", Role.VIEWER)


# ── Plugin ──────────────────────────────────────────────────────────
class FakePlugin:
    """Records forwarded requests and answers with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: Any = {"ok": True}
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
async def plugin() -> AsyncGenerator[FakePlugin, None]:
    fake = FakePlugin()
    client = PluginClient(
        base_url="http://plugin.test",
        shared_secret="test-plugin-secret",
        timeout=1.0,
        transport=httpx.MockTransport(fake.handler),
    )
    app.dependency_overrides[get_plugin_client] = lambda: client
    yield fake
    app.dependency_overrides.pop(get_plugin_client, None)
    await client.aclose()
