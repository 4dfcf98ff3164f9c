"""
Kernel Layer

Foundational components the recent usernames engine builds on:
- Identity Core (account profiles, active account)
- Vault (stored credentials, read-only here)
- User State (per-user key-value slots with change notification)
"""

from src.kernel.models import (
    Credential,
    CredentialType,
    User,
    UserStateRecord,
)

__all__ = [
    "User",
    "Credential",
    "CredentialType",
    "UserStateRecord",
]
