"""
Checkpoint Store - question pools and checkpoint instances (DB-backed).
"""

import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lessoncore.engines.checkpoint.question_selector import parse_pool
from lessoncore.engines.errors import CheckpointStateError, storage_errors
from lessoncore.kernel.models.curriculum import LessonCheckpoint
from lessoncore.kernel.models.progress import CheckpointStatus, UserCheckpoint
from lessoncore.schemas.checkpoint import CheckpointAnswer, CheckpointQuestion


class CheckpointStore:
    """Persistence for checkpoint pools and spawned instances."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def last_checkpoint_at(self, user_id: uuid.UUID) -> Optional[datetime]:
        """Creation time of the user's most recent checkpoint, if any."""
        q = (
            select(UserCheckpoint.created_at)
            .where(UserCheckpoint.user_id == user_id)
            .order_by(UserCheckpoint.created_at.desc())
            .limit(1)
        )
        with storage_errors("Loading last checkpoint"):
            result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def published_pool(self, lesson_id: uuid.UUID) -> List[CheckpointQuestion]:
        """Questions of the lesson's published pool; empty when there is none."""
        q = (
            select(LessonCheckpoint.question_pool)
            .where(
                LessonCheckpoint.lesson_id == lesson_id,
                LessonCheckpoint.published.is_(True),
            )
            .order_by(LessonCheckpoint.created_at.desc())
            .limit(1)
        )
        with storage_errors("Loading question pool"):
            result = await self.session.execute(q)
        return parse_pool(result.scalar_one_or_none())

    async def create_instance(
        self,
        *,
        user_id: uuid.UUID,
        module_id: uuid.UUID,
        lesson_id: Optional[uuid.UUID],
        questions: Sequence[CheckpointQuestion],
        time_limit_seconds: int,
        created_at: datetime,
        expires_at: datetime,
    ) -> UserCheckpoint:
        """Persist an active checkpoint with its question snapshot."""
        instance = UserCheckpoint(
            user_id=user_id,
            module_id=module_id,
            lesson_id=lesson_id,
            questions=[q.model_dump(mode="json") for q in questions],
            current_index=0,
            answers=[],
            status=CheckpointStatus.ACTIVE.value,
            time_limit_seconds=time_limit_seconds,
            created_at=created_at,
            expires_at=expires_at,
        )
        with storage_errors("Creating checkpoint"):
            self.session.add(instance)
            await self.session.flush()
        return instance

    async def get_instance(self, checkpoint_id: uuid.UUID, user_id: uuid.UUID) -> Optional[UserCheckpoint]:
        """A checkpoint owned by the user."""
        q = select(UserCheckpoint).where(
            UserCheckpoint.id == checkpoint_id,
            UserCheckpoint.user_id == user_id,
        )
        with storage_errors("Loading checkpoint"):
            result = await self.session.execute(q)
        return result.scalar_one_or_none()

    def snapshot(self, instance: UserCheckpoint) -> List[CheckpointQuestion]:
        """Questions exactly as presented when the checkpoint spawned."""
        return [CheckpointQuestion.model_validate(q) for q in instance.questions]

    async def finish(
        self,
        instance: UserCheckpoint,
        status: CheckpointStatus,
        answers: Optional[Sequence[CheckpointAnswer]] = None,
    ) -> None:
        """
        Move an active checkpoint to ``status`` in a single conditional UPDATE.

        Exactly one of several concurrent submissions wins the transition;
        the rest raise CheckpointStateError.
        """
        values = {UserCheckpoint.status: status.value}
        if answers is not None:
            values[UserCheckpoint.answers] = [a.model_dump(mode="json", by_alias=True) for a in answers]
            values[UserCheckpoint.current_index] = len(instance.questions)

        stmt = (
            update(UserCheckpoint)
            .where(
                UserCheckpoint.id == instance.id,
                UserCheckpoint.status == CheckpointStatus.ACTIVE.value,
            )
            .values(values)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("Updating checkpoint"):
            result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise CheckpointStateError("Checkpoint is no longer active")
