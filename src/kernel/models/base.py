"""
Declarative base, shared column helpers and the timestamp mixin.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()


def utcnow() -> datetime:
    """Timezone-aware now, set client-side so SQLite keeps sub-second precision."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base; uuid.UUID columns map to the portable Uuid type."""

    type_annotation_map = {uuid.UUID: Uuid()}


class TimestampMixin:
    """created_at / updated_at, stamped by the ORM with database defaults as backup."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )
