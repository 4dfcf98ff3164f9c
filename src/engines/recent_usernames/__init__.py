"""
Recent Usernames Engine - MRU username history for login autocomplete.

Rules:
- Most recent first, no duplicates, at most 20 entries
- A never-written list is seeded from identity emails, then the account email
- A cleared list stays empty
"""

from src.engines.recent_usernames.recency import (
    MAX_USERNAMES,
    filter_suggestions,
    fold_usernames,
    normalize_username,
    push_username,
)
from src.engines.recent_usernames.service import RecentUsernamesService
from src.engines.recent_usernames.state import RECENT_USERNAMES_KEY

__all__ = [
    "MAX_USERNAMES",
    "RECENT_USERNAMES_KEY",
    "RecentUsernamesService",
    "filter_suggestions",
    "fold_usernames",
    "normalize_username",
    "push_username",
]
