"""
Test configuration and fixtures for TaskHub tests.
"""
import os
import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable, Awaitable
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from taskhub.main import app
from taskhub.db.base import Base, get_db
from taskhub.core.identity import ActingUser
from taskhub.core.security import get_password_hash, create_access_token
from taskhub.models.user import User
from taskhub.models.project import Project
from taskhub.schemas.project import ProjectCreate
from taskhub.services.projects import create_project


# Use a file-based SQLite DB to avoid :memory: multiple-connection issues
# with SQLAlchemy + aiosqlite (each new connection would see an empty DB).
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    # Clean up test database file
    try:
        os.remove("./test.db")
    except OSError:
        pass


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory for extra users: ``await make_user("bob@example.com")``."""
    async def _make_user(email: str, name: str = None, display_name: str = None) -> User:
        user = User(
            email=email,
            name=name or email.split("@")[0].title(),
            display_name=display_name,
            password_hash=get_password_hash("TestPass123"),
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


def headers_for(user: User) -> dict:
    """Authorization headers for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}


def acting(user: User) -> ActingUser:
    return ActingUser.from_user(user)


@pytest.fixture
def make_headers() -> Callable[[User], dict]:
    return headers_for


@pytest.fixture
def as_actor() -> Callable[[User], ActingUser]:
    return acting


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    """Create a test user."""
    return await make_user("testuser@example.com", name="Test User", display_name="Tester")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Create authorization headers."""
    return headers_for(test_user)


@pytest_asyncio.fixture
async def test_project(db_session: AsyncSession, test_user: User) -> Project:
    """Create a project owned by the test user."""
    project = await create_project(
        db_session,
        ProjectCreate(name="Test Project", description="A project for testing"),
        acting(test_user),
    )
    await db_session.commit()
    return project
