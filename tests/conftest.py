"""Shared test fixtures — async SQLite in-memory DB + test client."""

import os
import uuid
from collections.abc import AsyncGenerator, Callable

# Settings are read at import time; configure before importing the app
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-tenancy")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

# Import all models so metadata is populated
import tenancy.models  # noqa: E402, F401
from tenancy.core.database import get_session  # noqa: E402
from tenancy.core.security import Principal, create_jwt  # noqa: E402
from tenancy.main import app  # noqa: E402


@pytest.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_principal() -> Callable[..., tuple[Principal, dict[str, str]]]:
    """Factory: a fresh principal plus bearer headers carrying its JWT."""

    def _make(
        email: str | None = "owner@example.com",
        principal_id: uuid.UUID | None = None,
    ) -> tuple[Principal, dict[str, str]]:
        principal = Principal(id=principal_id or uuid.uuid4(), email=email)
        token = create_jwt(str(principal.id), email=email)
        return principal, {"Authorization": f"Bearer {token}"}

    return _make
