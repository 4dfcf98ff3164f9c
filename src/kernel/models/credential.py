"""
Credential model - a stored vault item.

Only the username-bearing fields are modelled; secrets live with the
vault's own encryption layer and never reach this table.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.kernel.models.base import Base, generate_uuid, utcnow

if TYPE_CHECKING:
    from src.kernel.models.user import User


class CredentialType(str, Enum):
    """Kinds of vault items."""
    LOGIN = "login"
    IDENTITY = "identity"
    CARD = "card"
    SECURE_NOTE = "secure_note"


class Credential(Base):
    """A vault item owned by a user."""

    __tablename__ = "credentials"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    credential_type: Mapped[CredentialType] = mapped_column(
        String(50),
        default=CredentialType.LOGIN,
        nullable=False,
    )
    login_username: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    identity_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="credentials",
    )

    __table_args__ = (
        Index("ix_credentials_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Credential {self.name} ({self.credential_type})>"
