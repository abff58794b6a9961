"""
Kernel Data Models

SQLAlchemy models for curriculum content and learner progress.
"""

from lessoncore.kernel.models.base import AuthoredMixin, Base, generate_uuid, utcnow
from lessoncore.kernel.models.curriculum import Realm, Module, Lesson, LessonCheckpoint
from lessoncore.kernel.models.progress import (
    CheckpointStatus,
    ProgressStatus,
    TargetType,
    UserCheckpoint,
    UserProgress,
)

__all__ = [
    # Base
    "Base",
    "AuthoredMixin",
    "generate_uuid",
    "utcnow",
    # Curriculum
    "Realm",
    "Module",
    "Lesson",
    "LessonCheckpoint",
    # Progress
    "CheckpointStatus",
    "ProgressStatus",
    "TargetType",
    "UserCheckpoint",
    "UserProgress",
]
