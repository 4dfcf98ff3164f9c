"""
Per-user state: key definitions, change channels and stores.
"""

from src.kernel.state.channel import StateChannel
from src.kernel.state.key_definition import ClearEvent, UserKeyDefinition
from src.kernel.state.user_state_store import (
    InMemoryUserStateStore,
    SqlUserStateStore,
    UserStateStore,
)

__all__ = [
    "StateChannel",
    "ClearEvent",
    "UserKeyDefinition",
    "UserStateStore",
    "InMemoryUserStateStore",
    "SqlUserStateStore",
]
