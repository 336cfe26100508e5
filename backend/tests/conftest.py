import os

# Configure an in-memory database and a fixed signing key before importing app modules.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BASE_URL", "http://testserver")
os.environ.setdefault("DEBUG", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sismonev.auth.permissions import default_permissions
from sismonev.core.database import Base, get_db
from sismonev.core.models import User, UserRole
from sismonev.core.security import get_password_hash
from sismonev.main import app
from tests.helpers import PASSWORD


# bcrypt is slow on purpose; hash once per session
_PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory schema per test."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client against the app with get_db bound to the test database."""

    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Factory inserting a user; returns the detached instance."""

    async def _make(
        username: str,
        role: UserRole = UserRole.ORG_ADMIN,
        organization_id: str | None = None,
        permissions=None,
        is_active: bool = True,
    ) -> User:
        async with session_factory() as session:
            user = User(
                username=username,
                email=f"{username}@example.go.id",
                full_name=username.replace("_", " ").title(),
                hashed_password=_PASSWORD_HASH,
                role=role,
                organization_id=organization_id,
                organization_name=organization_id and f"Org {organization_id}",
                permissions=permissions if permissions is not None else default_permissions(role),
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest_asyncio.fixture
async def users(make_user):
    """One user per role plus two organization admins from different ministries."""
    return {
        "super_admin": await make_user("root", UserRole.SUPER_ADMIN),
        "admin": await make_user("reviewer", UserRole.ADMIN),
        "kemenkes": await make_user("kemenkes_admin", UserRole.ORG_ADMIN, "KEMENKES"),
        "kemenag": await make_user("kemenag_admin", UserRole.ORG_ADMIN, "KEMENAG"),
    }


