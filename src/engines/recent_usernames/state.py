"""State slot holding a user's recent usernames."""

from src.kernel.state.key_definition import ClearEvent, UserKeyDefinition

RECENT_USERNAMES_KEY = UserKeyDefinition.array(
    "vault_settings",
    "recentUsernames",
    deserializer=str,
    clear_on=[ClearEvent.LOGOUT],
)
