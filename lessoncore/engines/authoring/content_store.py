"""
Content Store - admin writes to lessons and checkpoint question pools.
"""

import uuid
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lessoncore.engines.errors import storage_errors
from lessoncore.kernel.models.base import utcnow
from lessoncore.kernel.models.curriculum import Lesson, LessonCheckpoint, Module
from lessoncore.schemas.admin import (
    CheckpointPoolCreate,
    CheckpointPoolUpdate,
    LessonCreate,
    LessonUpdate,
)


class ContentStore:
    """
    CRUD over authored content, drafts included.

    Lesson JSON is stored in its alias form (``slotIndex``,
    ``normalizeWeights``...), the same shape the scoring path parses.
    Callers validate interactivity against grading before saving.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def module_exists(self, module_id: uuid.UUID) -> bool:
        with storage_errors("Loading module"):
            return await self.session.get(Module, module_id) is not None

    async def list_lessons(self, module_id: Optional[uuid.UUID] = None) -> List[Lesson]:
        q = select(Lesson).order_by(Lesson.order_index, Lesson.created_at)
        if module_id is not None:
            q = q.where(Lesson.module_id == module_id)
        with storage_errors("Listing lessons"):
            result = await self.session.execute(q)
        return list(result.scalars().all())

    async def get_lesson(self, lesson_id: uuid.UUID) -> Optional[Lesson]:
        with storage_errors("Loading lesson"):
            return await self.session.get(Lesson, lesson_id)

    async def create_lesson(self, data: LessonCreate, author_id: uuid.UUID) -> Lesson:
        now = utcnow()
        lesson = Lesson(
            module_id=data.module_id,
            title=data.title,
            description=data.description,
            order_index=data.order_index,
            published=data.published,
            interactivity_json=data.interactivity_json.model_dump(mode="json", by_alias=True),
            grading_json=data.grading_json.model_dump(mode="json", by_alias=True),
            required_mastery_percent=data.required_mastery_percent,
            created_by=author_id,
            updated_by=author_id,
            last_published_at=now if data.published else None,
            created_at=now,
            updated_at=now,
        )
        with storage_errors("Creating lesson"):
            self.session.add(lesson)
            await self.session.flush()
        return lesson

    async def update_lesson(self, lesson: Lesson, data: LessonUpdate, author_id: uuid.UUID) -> Lesson:
        """Apply the fields present in ``data`` and stamp the edit."""
        now = utcnow()
        if data.module_id is not None:
            lesson.module_id = data.module_id
        if data.title is not None:
            lesson.title = data.title
        if data.description is not None:
            lesson.description = data.description
        if data.order_index is not None:
            lesson.order_index = data.order_index
        if data.interactivity_json is not None:
            lesson.interactivity_json = data.interactivity_json.model_dump(mode="json", by_alias=True)
        if data.grading_json is not None:
            lesson.grading_json = data.grading_json.model_dump(mode="json", by_alias=True)
        if data.required_mastery_percent is not None:
            lesson.required_mastery_percent = data.required_mastery_percent
        if data.published is not None:
            if data.published:
                lesson.last_published_at = now
            lesson.published = data.published

        lesson.updated_by = author_id
        lesson.updated_at = now
        with storage_errors("Updating lesson"):
            await self.session.flush()
        return lesson

    async def list_pools(self, lesson_id: Optional[uuid.UUID] = None) -> List[LessonCheckpoint]:
        q = select(LessonCheckpoint).order_by(LessonCheckpoint.created_at.desc())
        if lesson_id is not None:
            q = q.where(LessonCheckpoint.lesson_id == lesson_id)
        with storage_errors("Listing question pools"):
            result = await self.session.execute(q)
        return list(result.scalars().all())

    async def get_pool(self, pool_id: uuid.UUID) -> Optional[LessonCheckpoint]:
        with storage_errors("Loading question pool"):
            return await self.session.get(LessonCheckpoint, pool_id)

    async def create_pool(self, data: CheckpointPoolCreate) -> LessonCheckpoint:
        now = utcnow()
        pool = LessonCheckpoint(
            lesson_id=data.lesson_id,
            module_id=data.module_id,
            question_pool=data.question_pool.model_dump(mode="json", by_alias=True),
            published=data.published,
            created_at=now,
            updated_at=now,
        )
        with storage_errors("Creating question pool"):
            self.session.add(pool)
            await self.session.flush()
        return pool

    async def update_pool(self, pool: LessonCheckpoint, data: CheckpointPoolUpdate) -> LessonCheckpoint:
        if data.lesson_id is not None:
            pool.lesson_id = data.lesson_id
        if data.module_id is not None:
            pool.module_id = data.module_id
        if data.question_pool is not None:
            pool.question_pool = data.question_pool.model_dump(mode="json", by_alias=True)
        if data.published is not None:
            pool.published = data.published

        pool.updated_at = utcnow()
        with storage_errors("Updating question pool"):
            await self.session.flush()
        return pool

    async def delete(self, item: Union[Lesson, LessonCheckpoint]) -> None:
        """Remove a lesson (its pools cascade in the database) or a pool."""
        with storage_errors("Deleting content"):
            await self.session.delete(item)
            await self.session.flush()
