"""
Kernel Data Models

Core SQLAlchemy models: account profiles, stored credentials and the
per-user key-value state that backs recent usernames.
"""

from src.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from src.kernel.models.user import User
from src.kernel.models.credential import Credential, CredentialType
from src.kernel.models.user_state import UserStateRecord

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # User
    "User",
    # Vault
    "Credential",
    "CredentialType",
    # State
    "UserStateRecord",
]
