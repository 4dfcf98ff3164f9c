"""
Account directory - account profiles and the active account.
"""

import uuid
from typing import AsyncIterator, Dict, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.kernel.models.user import User
from src.kernel.state.channel import StateChannel
from src.kernel.state.key_definition import ClearEvent
from src.kernel.state.user_state_store import UserStateStore
from src.logging_config import get_logger

logger = get_logger(__name__)


class Account(BaseModel):
    """Account profile as seen by the rest of the application."""

    id: uuid.UUID
    email: str
    name: Optional[str] = None
    email_verified: bool = False

    class Config:
        from_attributes = True


class AccountService:
    """
    Service for account lookups and the process-wide active account.

    The active account lives in memory only. Changing it notifies every
    active_account_changes() iterator.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        state_store: Optional[UserStateStore] = None,
    ):
        self._session_maker = session_maker
        self._state_store = state_store
        self._active: Optional[Account] = None
        self._changes: StateChannel[Optional[Account]] = StateChannel()

    @property
    def active_account(self) -> Optional[Account]:
        return self._active

    async def active_account_changes(self) -> AsyncIterator[Optional[Account]]:
        """Yield the active account now and after every change."""
        queue = self._changes.subscribe()
        try:
            yield self._active
            while True:
                yield await queue.get()
        finally:
            self._changes.unsubscribe(queue)

    async def accounts_by_id(self) -> Dict[uuid.UUID, Account]:
        """Get every active account keyed by user id."""
        async with self._session_maker() as session:
            result = await session.execute(
                select(User).where(User.is_active == True)  # noqa: E712
            )
            return {
                user.id: Account.model_validate(user)
                for user in result.scalars().all()
            }

    async def get_account(self, user_id: uuid.UUID) -> Optional[Account]:
        """Get a single account by user id."""
        async with self._session_maker() as session:
            user = await session.get(User, user_id)
            if user is None or not user.is_active:
                return None
            return Account.model_validate(user)

    def set_active_account(self, account: Optional[Account]) -> None:
        """Replace the active account and notify watchers."""
        self._active = account
        self._changes.publish(account)

    async def switch_account(self, user_id: uuid.UUID) -> Account:
        """
        Make the given user the active account.

        Raises:
            ValueError: If no active account exists for the id
        """
        account = await self.get_account(user_id)
        if account is None:
            raise ValueError(f"Unknown account: {user_id}")
        self.set_active_account(account)
        logger.info("Switched active account", extra={"user_id": str(user_id)})
        return account

    async def logout(self) -> None:
        """
        Log out the active account.

        State slots declared clear_on=logout are wiped for that user.
        """
        account = self._active
        if account is None:
            return
        self.set_active_account(None)
        if self._state_store is not None:
            await self._state_store.clear_on(account.id, ClearEvent.LOGOUT)
        logger.info("Logged out", extra={"user_id": str(account.id)})
