"""
Credential lookups for a user's vault.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.kernel.models.credential import Credential, CredentialType


class CredentialView(BaseModel):
    """Read-only view of a stored credential."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    credential_type: CredentialType
    login_username: Optional[str] = None
    identity_email: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CredentialService:
    """Read access to stored credentials."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def list_credentials(self, user_id: uuid.UUID) -> List[CredentialView]:
        """Get all credentials owned by a user, oldest first."""
        async with self._session_maker() as session:
            result = await session.execute(
                select(Credential)
                .where(Credential.user_id == user_id)
                .order_by(Credential.created_at, Credential.id)
            )
            return [CredentialView.model_validate(c) for c in result.scalars().all()]
