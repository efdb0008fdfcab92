"""
Idea Hub Backend — Test Configuration (conftest.py)
====================================================

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for tests that must not touch a DB
    ├── db_manager: DatabaseManager on a fresh SQLite file, tables created
    │   ├── db_session: one unit-of-work session (committed on exit)
    │   ├── make_user / make_idea: factories that persist rows
    │   └── app → client: FastAPI app wired to db_manager + HTTPX client
    └── auth_headers: builds a Bearer header for a user
"""

import os

# Must be set before ideahub.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["ENVIRONMENT"] = "local"

from typing import Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

import ideahub.models  # noqa: E402,F401
from ideahub.database import DatabaseManager  # noqa: E402
from ideahub.models.idea import Idea, IdeaTag  # noqa: E402
from ideahub.models.user import User  # noqa: E402
from ideahub.security import CallerIdentity, create_access_token  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for an AsyncSession.

    Usage:
        mock_db_session.execute.assert_not_awaited()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_manager(tmp_path):
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'ideahub_test.db'}")
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest_asyncio.fixture
async def db_session(db_manager):
    async with db_manager.session() as session:
        yield session


@pytest.fixture
def make_user(db_manager):
    """Factory: `await make_user("alice")` persists and returns a User."""

    async def _make(username: str, email: Optional[str] = None, **fields) -> User:
        async with db_manager.session() as session:
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                full_name=fields.pop("full_name", username.title()),
                **fields,
            )
            session.add(user)
        return user

    return _make


@pytest.fixture
def make_idea(db_manager):
    """Factory: `await make_idea(author, title="x", tags=["ai"], stars=3)`."""

    async def _make(author: User, title: str = "An idea", tags=(), **fields) -> Idea:
        async with db_manager.session() as session:
            idea = Idea(
                title=title,
                description=fields.pop("description", f"About {title}"),
                category=fields.pop("category", "technology"),
                author_id=author.id,
                tag_rows=[IdeaTag(name=t) for t in tags],
                **fields,
            )
            session.add(idea)
        return idea

    return _make


@pytest.fixture
def as_caller():
    """Turns a User into the CallerIdentity a valid token would resolve to."""

    def _caller(user: User) -> CallerIdentity:
        return CallerIdentity(user_id=user.id, email=user.email, username=user.username)

    return _caller


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token(user.id, user.email, user.username)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def app(db_manager):
    from ideahub.main import create_app

    application = create_app()
    # ASGITransport does not run the lifespan
    application.state.db = db_manager
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
