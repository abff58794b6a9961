"""
Progress Tracker - per-user progress rows (DB-backed).
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lessoncore.engines.errors import DataUnavailableError, storage_errors
from lessoncore.kernel.models.progress import ProgressStatus, TargetType, UserProgress
from lessoncore.logging_config import get_logger

logger = get_logger(__name__)


class ProgressTracker:
    """
    Reads and writes progress rows keyed by (user, target type, target id).

    Attempt counters are incremented inside the UPDATE statement itself, so
    two concurrent submissions for the same lesson each add exactly one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _key(self, user_id: uuid.UUID, target_type: TargetType, target_id: uuid.UUID):
        return (
            UserProgress.user_id == user_id,
            UserProgress.target_type == target_type.value,
            UserProgress.target_id == target_id,
        )

    async def get(
        self,
        user_id: uuid.UUID,
        target_type: TargetType,
        target_id: uuid.UUID,
    ) -> Optional[UserProgress]:
        """Fetch a progress row, bypassing stale identity-map state."""
        q = (
            select(UserProgress)
            .where(*self._key(user_id, target_type, target_id))
            .execution_options(populate_existing=True)
        )
        with storage_errors("Loading progress"):
            result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def record_attempt(
        self,
        user_id: uuid.UUID,
        target_type: TargetType,
        target_id: uuid.UUID,
        *,
        mastery_percent: float,
        status: ProgressStatus,
        metadata: Optional[dict[str, Any]] = None,
        attempted_at: Optional[datetime] = None,
    ) -> UserProgress:
        """
        Upsert a progress row for a new attempt and bump its attempt counter.

        Returns the row as stored after the write.
        """
        attempted_at = attempted_at or datetime.now(timezone.utc)
        values = {
            "mastery_percent": mastery_percent,
            "status": status.value,
            "last_attempt_at": attempted_at,
            "attempt_metadata": metadata,
        }
        increment = (
            update(UserProgress)
            .where(*self._key(user_id, target_type, target_id))
            .values(
                {
                    UserProgress.attempts: UserProgress.attempts + 1,
                    UserProgress.mastery_percent: mastery_percent,
                    UserProgress.status: status.value,
                    UserProgress.last_attempt_at: attempted_at,
                    UserProgress.attempt_metadata: metadata,
                }
            )
            .execution_options(synchronize_session=False)
        )

        with storage_errors("Recording progress"):
            result = await self.session.execute(increment)
            if result.rowcount == 0:
                try:
                    async with self.session.begin_nested():
                        self.session.add(
                            UserProgress(
                                user_id=user_id,
                                target_type=target_type.value,
                                target_id=target_id,
                                attempts=1,
                                **values,
                            )
                        )
                except IntegrityError:
                    # A concurrent request inserted the row first
                    logger.info(
                        "Progress insert raced, retrying as update",
                        extra={"user_id": str(user_id), "target_id": str(target_id)},
                    )
                    await self.session.execute(increment)

        row = await self.get(user_id, target_type, target_id)
        if row is None:
            raise DataUnavailableError("Progress row missing after write")
        return row

    async def ensure_unlocked(
        self,
        user_id: uuid.UUID,
        target_type: TargetType,
        target_id: uuid.UUID,
    ) -> UserProgress:
        """Create an in-progress row if none exists; existing progress is kept."""
        row = await self.get(user_id, target_type, target_id)
        if row is not None:
            return row
        row = UserProgress(
            user_id=user_id,
            target_type=target_type.value,
            target_id=target_id,
            status=ProgressStatus.IN_PROGRESS.value,
            mastery_percent=0.0,
            attempts=0,
        )
        with storage_errors("Unlocking target"):
            self.session.add(row)
            await self.session.flush()
        return row

    async def mark_completed(
        self,
        user_id: uuid.UUID,
        target_type: TargetType,
        target_id: uuid.UUID,
        completed_at: Optional[datetime] = None,
    ) -> UserProgress:
        """Mark a target (e.g. a module) completed at 100% mastery."""
        completed_at = completed_at or datetime.now(timezone.utc)
        row = await self.get(user_id, target_type, target_id)
        with storage_errors("Completing target"):
            if row is None:
                row = UserProgress(
                    user_id=user_id,
                    target_type=target_type.value,
                    target_id=target_id,
                    attempts=1,
                )
                self.session.add(row)
            row.status = ProgressStatus.COMPLETED.value
            row.mastery_percent = 100.0
            row.last_attempt_at = completed_at
            await self.session.flush()
        return row

    async def recent_lesson_mastery(self, user_id: uuid.UUID, limit: int = 5) -> List[Optional[float]]:
        """Mastery of the user's most recently attempted lessons, newest first."""
        q = (
            select(UserProgress.mastery_percent)
            .where(
                UserProgress.user_id == user_id,
                UserProgress.target_type == TargetType.LESSON.value,
                UserProgress.last_attempt_at.is_not(None),
            )
            .order_by(UserProgress.last_attempt_at.desc())
            .limit(limit)
        )
        with storage_errors("Loading recent progress"):
            result = await self.session.execute(q)
        return list(result.scalars().all())
