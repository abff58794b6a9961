"""
Curriculum Store - read access to published lessons and modules.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lessoncore.engines.errors import storage_errors
from lessoncore.kernel.models.curriculum import Lesson, Module


class CurriculumStore:
    """Ordered navigation over published curriculum content."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_lesson(self, lesson_id: uuid.UUID, published_only: bool = True) -> Optional[Lesson]:
        q = select(Lesson).options(selectinload(Lesson.module)).where(Lesson.id == lesson_id)
        if published_only:
            q = q.where(Lesson.published.is_(True))
        with storage_errors("Loading lesson"):
            result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def next_lesson(self, module_id: uuid.UUID, after_order: int) -> Optional[Lesson]:
        """First published lesson of the module ordered after ``after_order``."""
        q = (
            select(Lesson)
            .where(
                Lesson.module_id == module_id,
                Lesson.published.is_(True),
                Lesson.order_index > after_order,
            )
            .order_by(Lesson.order_index)
            .limit(1)
        )
        with storage_errors("Loading next lesson"):
            result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def first_lesson(self, module_id: uuid.UUID) -> Optional[Lesson]:
        return await self.next_lesson(module_id, after_order=-1)

    async def next_module(self, realm_id: uuid.UUID, after_order: int) -> Optional[Module]:
        """First published module of the realm ordered after ``after_order``."""
        q = (
            select(Module)
            .where(
                Module.realm_id == realm_id,
                Module.published.is_(True),
                Module.order_index > after_order,
            )
            .order_by(Module.order_index)
            .limit(1)
        )
        with storage_errors("Loading next module"):
            result = await self.session.execute(q)
        return result.scalar_one_or_none()
