"""
Recent Usernames Service - MRU usernames for login form autocomplete.

Every public operation is best-effort: collaborator failures are logged and
turned into an empty result or a no-op, never raised to the caller.
Suggestions are a convenience; the credential form must keep working when
this subsystem cannot.
"""

import asyncio
import uuid
from typing import Any, AsyncIterator, List, Optional

from src.engines.recent_usernames.recency import (
    MAX_USERNAMES,
    filter_suggestions,
    fold_usernames,
    normalize_username,
    push_username,
)
from src.engines.recent_usernames.state import RECENT_USERNAMES_KEY
from src.kernel.state.user_state_store import UserStateStore
from src.logging_config import get_logger

logger = get_logger(__name__)


class RecentUsernamesService:
    """
    Manages each user's list of recently used usernames.

    Collaborators:
        state_store: UserStateStore holding the persisted list
        credential_service: anything with
            ``async list_credentials(user_id)`` returning objects that carry
            an optional ``identity_email``
        account_service: anything with ``active_account_changes()`` and
            ``async accounts_by_id()``, whose accounts carry ``id`` and ``email``

    Usage:
        service = RecentUsernamesService(store, credentials, accounts)
        await service.add_username(user_id, "alice@example.com")
        await service.get_recent(user_id, limit=3)
    """

    DEFAULT_LIMIT = 3
    SUGGESTION_LIMIT = 4

    def __init__(
        self,
        state_store: UserStateStore,
        credential_service: Any,
        account_service: Any,
    ):
        self.state_store = state_store
        self.credential_service = credential_service
        self.account_service = account_service

    async def add_username(self, user_id: uuid.UUID, username: Optional[str]) -> None:
        """Record a username as the most recently used one."""
        trimmed = normalize_username(username)
        if trimmed is None:
            return

        try:
            await self.state_store.update(
                user_id,
                RECENT_USERNAMES_KEY,
                lambda current: push_username(current, trimmed),
            )
        except Exception:
            logger.warning(
                "Failed to add recent username",
                exc_info=True,
                extra={"user_id": str(user_id)},
            )

    async def get_recent(
        self,
        user_id: uuid.UUID,
        limit: int = DEFAULT_LIMIT,
    ) -> List[str]:
        """
        Get the most recent usernames for a user.

        Seeds the list first if it has never been written. An explicitly
        cleared list stays empty.

        Args:
            user_id: The user ID
            limit: Maximum number of usernames to return

        Returns:
            Up to ``limit`` usernames, most recent first; empty on failure
        """
        limit = max(limit, 0)
        try:
            usernames = await self.state_store.get(user_id, RECENT_USERNAMES_KEY)
            if usernames is None:
                usernames = await self._seed(user_id)
            return list(usernames or [])[:limit]
        except Exception:
            logger.warning(
                "Failed to read recent usernames",
                exc_info=True,
                extra={"user_id": str(user_id)},
            )
            return []

    async def suggest(
        self,
        user_id: uuid.UUID,
        query: str = "",
        limit: int = SUGGESTION_LIMIT,
    ) -> List[str]:
        """Recent usernames matching what the user has typed so far."""
        usernames = await self.get_recent(user_id, MAX_USERNAMES)
        return filter_suggestions(usernames, query or "", limit)

    async def clear(self, user_id: uuid.UUID) -> None:
        """Clear all history for a user. The list stays empty until written."""
        try:
            await self.state_store.update(user_id, RECENT_USERNAMES_KEY, lambda _: [])
        except Exception:
            logger.warning(
                "Failed to clear recent usernames",
                exc_info=True,
                extra={"user_id": str(user_id)},
            )

    async def recent_usernames(self) -> AsyncIterator[List[str]]:
        """
        Follow the active account's recent usernames.

        Yields the list whenever the active account changes or the followed
        user's list is written. Yields [] while nobody is active or after a
        read fails. This view never seeds; only get_recent() does.
        """
        updates: asyncio.Queue = asyncio.Queue()
        follower: Optional[asyncio.Task] = None

        async def follow_user(user_id: uuid.UUID) -> None:
            try:
                async for usernames in self.state_store.watch(user_id, RECENT_USERNAMES_KEY):
                    updates.put_nowait(list(usernames or []))
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.warning(
                    "Recent usernames stream failed",
                    exc_info=True,
                    extra={"user_id": str(user_id)},
                )
                updates.put_nowait([])

        async def follow_accounts() -> None:
            nonlocal follower
            try:
                async for account in self.account_service.active_account_changes():
                    if follower is not None:
                        follower.cancel()
                        follower = None
                    account_id = getattr(account, "id", None)
                    if account_id is None:
                        updates.put_nowait([])
                    else:
                        follower = asyncio.create_task(follow_user(account_id))
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.warning("Active account stream failed", exc_info=True)
                updates.put_nowait([])

        accounts_task = asyncio.create_task(follow_accounts())
        try:
            while True:
                yield await updates.get()
        finally:
            tasks = [t for t in (accounts_task, follower) if t is not None]
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _seed(self, user_id: uuid.UUID) -> Optional[List[str]]:
        """
        Populate a never-written list.

        Identity emails from the user's credentials come first; the account
        email is the fallback. Nothing is written when neither has a value,
        so the next read tries again.
        """
        credentials = await self.credential_service.list_credentials(user_id)
        seeded = fold_usernames(
            getattr(credential, "identity_email", None) for credential in credentials
        )

        if not seeded:
            accounts = await self.account_service.accounts_by_id()
            account = accounts.get(user_id)
            email = normalize_username(getattr(account, "email", None))
            if email is not None:
                seeded = [email]

        if not seeded:
            return None

        # Only fill an absent slot; a list written meanwhile wins
        stored = await self.state_store.update(
            user_id,
            RECENT_USERNAMES_KEY,
            lambda current: seeded if current is None else current,
        )
        logger.info(
            "Seeded recent usernames",
            extra={"user_id": str(user_id), "count": len(seeded)},
        )
        return stored
