"""
State key definitions.

A UserKeyDefinition names one per-user state slot and describes how its
stored JSON is turned back into Python values and which lifecycle events
wipe it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple


class ClearEvent(str, Enum):
    """Lifecycle events on which a state slot is removed."""
    LOGOUT = "logout"
    LOCK = "lock"


# Every definition created in the process, keyed by storage key
_REGISTRY: Dict[str, "UserKeyDefinition"] = {}


@dataclass(frozen=True)
class UserKeyDefinition:
    """
    Definition of a per-user state slot.

    Usage:
        RECENT_USERNAMES_KEY = UserKeyDefinition.array(
            "vault_settings",
            "recentUsernames",
            deserializer=str,
            clear_on=[ClearEvent.LOGOUT],
        )
    """

    namespace: str
    key: str
    deserializer: Callable[[Any], Any]
    clear_on: Tuple[ClearEvent, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        _REGISTRY[self.storage_key] = self

    @property
    def storage_key(self) -> str:
        return f"{self.namespace}.{self.key}"

    @classmethod
    def array(
        cls,
        namespace: str,
        key: str,
        deserializer: Callable[[Any], Any],
        clear_on: Optional[List[ClearEvent]] = None,
    ) -> "UserKeyDefinition":
        """Define a slot holding a JSON array, deserializing each element."""

        def deserialize_array(raw: Any) -> Optional[list]:
            if raw is None:
                return None
            return [deserializer(item) for item in raw]

        return cls(
            namespace=namespace,
            key=key,
            deserializer=deserialize_array,
            clear_on=tuple(clear_on or ()),
        )

    def deserialize(self, raw: Any) -> Any:
        return self.deserializer(raw)


def definitions_cleared_on(event: ClearEvent) -> List[UserKeyDefinition]:
    """All registered definitions that are wiped on the given event."""
    return [d for d in _REGISTRY.values() if event in d.clear_on]
