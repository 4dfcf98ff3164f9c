"""
Recent usernames endpoints - autocomplete history for the login form.

Reads and writes are best-effort: a storage failure shows up as an empty
list or a silently dropped write, never as a server error.
"""

import uuid

from fastapi import APIRouter, Query, status

from src.api.deps import RecentUsernames
from src.config import get_settings
from src.engines.recent_usernames.recency import MAX_USERNAMES
from src.schemas.recent_usernames import RecentUsernameCreate, RecentUsernamesResponse

settings = get_settings()

router = APIRouter()


@router.get("", response_model=RecentUsernamesResponse)
async def get_recent_usernames(
    user_id: uuid.UUID,
    service: RecentUsernames,
    limit: int = Query(settings.recent_usernames_default_limit, ge=0, le=MAX_USERNAMES),
):
    """Get the user's most recent usernames, seeding the history on first use."""
    usernames = await service.get_recent(user_id, limit)
    return RecentUsernamesResponse(usernames=usernames)


@router.get("/suggestions", response_model=RecentUsernamesResponse)
async def get_username_suggestions(
    user_id: uuid.UUID,
    service: RecentUsernames,
    query: str = Query("", max_length=255),
    limit: int = Query(settings.recent_usernames_suggestion_limit, ge=0, le=MAX_USERNAMES),
):
    """Get recent usernames containing the typed text."""
    usernames = await service.suggest(user_id, query, limit)
    return RecentUsernamesResponse(usernames=usernames)


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def add_recent_username(
    user_id: uuid.UUID,
    data: RecentUsernameCreate,
    service: RecentUsernames,
):
    """Record a username the user just picked or typed."""
    await service.add_username(user_id, data.username)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_recent_usernames(
    user_id: uuid.UUID,
    service: RecentUsernames,
):
    """Clear the user's history. It is not re-seeded afterwards."""
    await service.clear(user_id)
