"""
Curriculum models - realms, modules, lessons and their checkpoint pools.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import Boolean, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lessoncore.kernel.models.base import AuthoredMixin, Base, generate_uuid


class Realm(Base, AuthoredMixin):
    """Top-level grouping of modules."""

    __tablename__ = "realms"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    modules: Mapped[List["Module"]] = relationship(back_populates="realm")


class Module(Base, AuthoredMixin):
    """An ordered sequence of lessons inside a realm."""

    __tablename__ = "modules"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    realm_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("realms.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    realm: Mapped[Optional["Realm"]] = relationship(back_populates="modules")
    lessons: Mapped[List["Lesson"]] = relationship(back_populates="module")


class Lesson(Base, AuthoredMixin):
    """
    A drag-and-drop lesson.

    ``interactivity_json`` holds the layout (placeholders, draggables) and
    ``grading_json`` the rule set the scoring engine evaluates.
    """

    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    module_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("modules.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    interactivity_json: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    grading_json: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    required_mastery_percent: Mapped[float] = mapped_column(Float, nullable=False, default=98.0)

    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)
    last_published_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    module: Mapped[Optional["Module"]] = relationship(back_populates="lessons")


class LessonCheckpoint(Base, AuthoredMixin):
    """Question pool that checkpoints spawned from a lesson draw from."""

    __tablename__ = "lesson_checkpoints"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    lesson_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    module_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    question_pool: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
