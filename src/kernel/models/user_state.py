"""
Per-user key-value state.

One row per (user, state key). A missing row means the slot was never
written; a row holding an empty JSON array is a present-but-empty value.
"""

import uuid
from typing import Any

from sqlalchemy import JSON, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, TimestampMixin, generate_uuid


class UserStateRecord(Base, TimestampMixin):
    """A persisted state slot for one user."""

    __tablename__ = "user_state"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    state_key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    value: Mapped[Any] = mapped_column(
        JSON,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "state_key", name="uq_user_state_user_key"),
    )

    def __repr__(self) -> str:
        return f"<UserStateRecord {self.user_id}:{self.state_key}>"
