"""
Recency list rules - pure functions over an MRU list of usernames.

Index 0 is the most recently used entry. Entries are unique (exact,
case-sensitive match) and the list never holds more than MAX_USERNAMES.
"""

from typing import Iterable, List, Optional

MAX_USERNAMES = 20


def normalize_username(username: Optional[str]) -> Optional[str]:
    """Trim a username; None when nothing usable is left."""
    if not username:
        return None
    trimmed = username.strip()
    return trimmed or None


def push_username(current: Optional[List[str]], username: str) -> List[str]:
    """Move (or insert) username to the front and cap the list."""
    filtered = [u for u in (current or []) if u != username]
    return [username, *filtered][:MAX_USERNAMES]


def fold_usernames(usernames: Iterable[Optional[str]]) -> List[str]:
    """
    Build a recency list by pushing each username in order.

    Blank entries are skipped. The last username seen ends up first.
    """
    result: List[str] = []
    for username in usernames:
        normalized = normalize_username(username)
        if normalized is not None:
            result = push_username(result, normalized)
    return result


def filter_suggestions(usernames: List[str], query: str, limit: int) -> List[str]:
    """
    Narrow a recency list to what the user is typing.

    An empty query keeps the list as is. Otherwise entries containing the
    query (case-insensitive) are kept, in recency order.
    """
    limit = max(limit, 0)
    if not query:
        return usernames[:limit]
    needle = query.lower()
    return [u for u in usernames if needle in u.lower()][:limit]
