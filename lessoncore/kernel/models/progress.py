"""
Progress models - per-user progress rows and checkpoint instances.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import DateTime, Float, Index, Integer, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lessoncore.kernel.models.base import Base, generate_uuid, utcnow


class TargetType(str, Enum):
    """What a progress row tracks."""
    LESSON = "lesson"
    MODULE = "module"
    REALM = "realm"
    LESSON_CHECKPOINT = "lesson_checkpoint"


class ProgressStatus(str, Enum):
    """Progress row status."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class CheckpointStatus(str, Enum):
    """Lifecycle of a checkpoint instance."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ABORTED = "aborted"


class UserProgress(Base):
    """
    Progress of one user on one target.

    One row per (user, target type, target id); retried submissions update
    the row instead of inserting a new one.
    """

    __tablename__ = "user_progress"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    target_type: Mapped[str] = mapped_column(String(50), nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(nullable=False)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=ProgressStatus.IN_PROGRESS.value,
    )
    mastery_percent: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    # "metadata" is reserved on declarative classes
    attempt_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "target_type", "target_id", name="uq_user_progress_target"),
        Index("ix_user_progress_user_type_attempt", "user_id", "target_type", "last_attempt_at"),
    )


class UserCheckpoint(Base):
    """A spawned checkpoint with its question snapshot."""

    __tablename__ = "user_checkpoints"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    module_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    lesson_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)

    questions: Mapped[List[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    current_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    answers: Mapped[List[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=CheckpointStatus.ACTIVE.value,
    )

    time_limit_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    __table_args__ = (
        Index("ix_user_checkpoints_user_created", "user_id", "created_at"),
    )
