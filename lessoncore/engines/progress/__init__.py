"""
Progress engine - persisted learner progress and the unlock cascade.
"""

from lessoncore.engines.progress.curriculum_store import CurriculumStore
from lessoncore.engines.progress.progress_tracker import ProgressTracker
from lessoncore.engines.progress.unlock_resolver import (
    NextTarget,
    UnlockResolver,
    UnlockResult,
    Unlocks,
)

__all__ = [
    "CurriculumStore",
    "ProgressTracker",
    "NextTarget",
    "UnlockResolver",
    "UnlockResult",
    "Unlocks",
]
