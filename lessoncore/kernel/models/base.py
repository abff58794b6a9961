"""
Declarative base and shared column helpers.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def generate_uuid() -> uuid.UUID:
    return uuid.uuid4()


def utcnow() -> datetime:
    """Timezone-aware current time for Python-side column defaults."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models. UUIDs and datetimes map to portable types."""

    type_annotation_map = {
        uuid.UUID: Uuid(),
        datetime: DateTime(timezone=True),
    }


class AuthoredMixin:
    """
    Audit columns for content edited through the admin API.

    Both timestamps are stamped in Python. ``updated_at`` only moves when an
    author saves a change (see ContentStore), never on progress writes.
    """

    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow)
