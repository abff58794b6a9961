"""
Unlock Resolver - advances a learner after a passed lesson.
"""

import uuid
from typing import Literal, Optional

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from lessoncore.engines.progress.curriculum_store import CurriculumStore
from lessoncore.engines.progress.progress_tracker import ProgressTracker
from lessoncore.kernel.models.curriculum import Lesson
from lessoncore.kernel.models.progress import TargetType
from lessoncore.logging_config import get_logger

logger = get_logger(__name__)


class NextTarget(BaseModel):
    """Where the learner should go next."""

    type: Literal["lesson", "module"]
    id: uuid.UUID


class Unlocks(BaseModel):
    """Targets unlocked by this pass."""

    lesson_id: Optional[uuid.UUID] = None
    module_id: Optional[uuid.UUID] = None


class UnlockResult(BaseModel):
    next_target: Optional[NextTarget] = None
    unlocks: Unlocks = Field(default_factory=Unlocks)


class UnlockResolver:
    """
    Cascading next-item finder:

    1. Next published lesson in the same module, if any
    2. Otherwise the module is completed, and the next published module in
       the realm is unlocked together with its first lesson
    """

    def __init__(self, session: AsyncSession):
        self.curriculum = CurriculumStore(session)
        self.progress = ProgressTracker(session)

    async def process_lesson_pass(self, user_id: uuid.UUID, lesson: Lesson) -> UnlockResult:
        result = UnlockResult()
        if lesson.module_id is None:
            return result

        next_lesson = await self.curriculum.next_lesson(lesson.module_id, lesson.order_index)
        if next_lesson is not None:
            await self.progress.ensure_unlocked(user_id, TargetType.LESSON, next_lesson.id)
            result.next_target = NextTarget(type="lesson", id=next_lesson.id)
            result.unlocks.lesson_id = next_lesson.id
            return result

        await self.progress.mark_completed(user_id, TargetType.MODULE, lesson.module_id)
        logger.info(
            "Module completed",
            extra={"user_id": str(user_id), "module_id": str(lesson.module_id)},
        )

        module = lesson.module
        if module is None or module.realm_id is None:
            return result

        next_module = await self.curriculum.next_module(module.realm_id, module.order_index)
        if next_module is None:
            return result

        await self.progress.ensure_unlocked(user_id, TargetType.MODULE, next_module.id)
        result.unlocks.module_id = next_module.id

        first_lesson = await self.curriculum.first_lesson(next_module.id)
        if first_lesson is not None:
            await self.progress.ensure_unlocked(user_id, TargetType.LESSON, first_lesson.id)
            result.next_target = NextTarget(type="lesson", id=first_lesson.id)
            result.unlocks.lesson_id = first_lesson.id
        else:
            result.next_target = NextTarget(type="module", id=next_module.id)

        return result
