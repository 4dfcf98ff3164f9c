"""
Pytest fixtures for recent usernames tests.
"""

import uuid
from typing import AsyncGenerator, AsyncIterator, Dict, Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.database import create_engine_for, create_session_maker, init_db
from src.engines.recent_usernames.service import RecentUsernamesService
from src.kernel.identity.account_service import Account
from src.kernel.models.user import User
from src.kernel.state.channel import StateChannel
from src.kernel.state.user_state_store import InMemoryUserStateStore


class FakeAccountDirectory:
    """Account directory holding accounts and the active account in memory."""

    def __init__(self, accounts: Optional[Dict[uuid.UUID, Account]] = None):
        self.accounts = dict(accounts or {})
        self.active: Optional[Account] = None
        self._changes: StateChannel = StateChannel()

    async def accounts_by_id(self) -> Dict[uuid.UUID, Account]:
        return dict(self.accounts)

    async def active_account_changes(self) -> AsyncIterator[Optional[Account]]:
        queue = self._changes.subscribe()
        try:
            yield self.active
            while True:
                yield await queue.get()
        finally:
            self._changes.unsubscribe(queue)

    def set_active(self, account: Optional[Account]) -> None:
        self.active = account
        self._changes.publish(account)


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def state_store() -> InMemoryUserStateStore:
    return InMemoryUserStateStore()


@pytest.fixture
def credential_service() -> AsyncMock:
    """Identity source with no credentials unless a test sets some."""
    service = AsyncMock()
    service.list_credentials.return_value = []
    return service


@pytest.fixture
def account_directory() -> FakeAccountDirectory:
    return FakeAccountDirectory()


@pytest.fixture
def service(
    state_store: InMemoryUserStateStore,
    credential_service: AsyncMock,
    account_directory: FakeAccountDirectory,
) -> RecentUsernamesService:
    return RecentUsernamesService(state_store, credential_service, account_directory)


# Database fixtures (file-based SQLite so every connection sees the same data)

@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a test database engine."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        id=uuid.uuid4(),
        email="testuser@example.com",
        name="Test User",
        email_verified=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user
