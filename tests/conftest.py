"""
Pytest configuration and shared fixtures.

Store-backed tests run against a fresh in-memory SQLite database per test.
"""

import os

# Must be set before tasktracker.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import tasktracker.models  # noqa: F401  (registers tables)
from tasktracker.core.permissions import Roles
from tasktracker.db.base import Base
from tasktracker.repositories.user_repository import UserRepository
from tasktracker.services.auth_service import identity_for


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: uses the in-memory test database")


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


async def make_user(db, display_name, roles, email=None):
    """Create a user directly; the hash is a placeholder, not a bcrypt value."""
    user = await UserRepository(db).create(
        email=email or f"{display_name.lower()}@example.com",
        display_name=display_name,
        hashed_password="not-a-bcrypt-hash",
        roles=roles,
    )
    await db.commit()
    return user


@pytest_asyncio.fixture
async def admin_user(db):
    return await make_user(db, "Admin", [Roles.ADMIN])


@pytest_asyncio.fixture
async def u1_user(db):
    return await make_user(db, "Alice", [Roles.USER])


@pytest_asyncio.fixture
async def u2_user(db):
    return await make_user(db, "Bob", [Roles.USER])


@pytest_asyncio.fixture
async def u3_user(db):
    return await make_user(db, "Carol", [Roles.USER])


@pytest.fixture
def admin(admin_user):
    return identity_for(admin_user)


@pytest.fixture
def u1(u1_user):
    return identity_for(u1_user)


@pytest.fixture
def u2(u2_user):
    return identity_for(u2_user)


@pytest.fixture
def u3(u3_user):
    return identity_for(u3_user)
