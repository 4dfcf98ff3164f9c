"""
Pydantic schemas for API request/response validation.
"""

from src.schemas.common import HealthResponse
from src.schemas.recent_usernames import RecentUsernameCreate, RecentUsernamesResponse

__all__ = [
    "HealthResponse",
    "RecentUsernameCreate",
    "RecentUsernamesResponse",
]
