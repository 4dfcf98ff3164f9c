"""
Recent usernames schemas.
"""

from typing import List

from pydantic import BaseModel, Field


class RecentUsernamesResponse(BaseModel):
    """Recent usernames, most recent first."""

    usernames: List[str] = Field(default_factory=list)


class RecentUsernameCreate(BaseModel):
    """Record a username as just used."""

    username: str
