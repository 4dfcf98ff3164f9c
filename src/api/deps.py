"""
FastAPI dependencies for the service graph.

One store, account directory and credential service per process; routes
receive the RecentUsernamesService built on top of them.
"""

import uuid
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from src.database import async_session_maker
from src.engines.recent_usernames.service import RecentUsernamesService
from src.kernel.identity.account_service import AccountService
from src.kernel.state.user_state_store import SqlUserStateStore, UserStateStore
from src.kernel.vault.credential_service import CredentialService
from src.logging_config import bind_log_context


@lru_cache
def get_state_store() -> UserStateStore:
    """Process-wide user state store."""
    return SqlUserStateStore(async_session_maker)


@lru_cache
def get_account_service() -> AccountService:
    """Process-wide account directory."""
    return AccountService(async_session_maker, state_store=get_state_store())


@lru_cache
def get_credential_service() -> CredentialService:
    return CredentialService(async_session_maker)


def get_recent_usernames_service() -> RecentUsernamesService:
    """Dependency that wires the recent usernames service."""
    return RecentUsernamesService(
        state_store=get_state_store(),
        credential_service=get_credential_service(),
        account_service=get_account_service(),
    )


async def bind_user_log_context(user_id: uuid.UUID) -> None:
    """Tag log lines of user-scoped routes with the path user id."""
    bind_log_context(user_id=str(user_id))


RecentUsernames = Annotated[RecentUsernamesService, Depends(get_recent_usernames_service)]
