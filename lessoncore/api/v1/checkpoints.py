"""
Checkpoint endpoints - spawn decisions and completion grading.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from lessoncore.api.deps import AppSettings, CurrentUserId, DbSession, Scheduler
from lessoncore.engines.checkpoint import CheckpointGrader, as_utc, select_questions
from lessoncore.engines.checkpoint.checkpoint_store import CheckpointStore
from lessoncore.engines.errors import CheckpointExpiredError, CheckpointStateError
from lessoncore.engines.progress import ProgressTracker
from lessoncore.kernel.models.progress import (
    CheckpointStatus,
    ProgressStatus,
    TargetType,
    UserCheckpoint,
)
from lessoncore.logging_config import get_logger
from lessoncore.schemas.checkpoint import (
    CheckpointCompleteRequest,
    CheckpointGrade,
    CheckpointInstanceResponse,
    CheckpointSpawnRequest,
    CheckpointSpawnResponse,
    PresentedQuestion,
)

router = APIRouter()
logger = get_logger(__name__)


def _instance_to_response(instance: UserCheckpoint) -> CheckpointInstanceResponse:
    return CheckpointInstanceResponse(
        id=instance.id,
        module_id=instance.module_id,
        lesson_id=instance.lesson_id,
        questions=[
            PresentedQuestion(
                id=q["id"],
                stem=q["stem"],
                options=q["options"],
                timer_seconds=q["timer_seconds"],
            )
            for q in instance.questions
        ],
        current_index=instance.current_index,
        status=instance.status,
        created_at=instance.created_at,
        expires_at=instance.expires_at,
        time_limit_seconds=instance.time_limit_seconds,
    )


@router.post("/spawn", response_model=CheckpointSpawnResponse)
async def spawn_checkpoint(
    body: CheckpointSpawnRequest,
    user_id: CurrentUserId,
    db: DbSession,
    scheduler: Scheduler,
    settings: AppSettings,
):
    """Decide whether to interject a checkpoint and create it if so."""
    now = datetime.now(timezone.utc)
    store = CheckpointStore(db)
    recent = await ProgressTracker(db).recent_lesson_mastery(user_id, limit=scheduler.history_window)
    last_at = await store.last_checkpoint_at(user_id)

    decision = scheduler.decide_spawn(str(user_id), str(body.module_id), recent, last_at, now=now)
    if not decision.should_spawn:
        return CheckpointSpawnResponse(
            spawned=False,
            probability=decision.probability,
            reason=decision.reason,
        )

    pool = await store.published_pool(body.lesson_id)
    questions = select_questions(pool, settings.checkpoint_question_count)
    if not questions:
        return CheckpointSpawnResponse(
            spawned=False,
            probability=decision.probability,
            reason="No checkpoint questions available",
        )

    time_limit, expires_at = CheckpointGrader.time_window(
        questions, now, buffer_seconds=settings.checkpoint_time_buffer_seconds
    )
    instance = await store.create_instance(
        user_id=user_id,
        module_id=body.module_id,
        lesson_id=body.lesson_id,
        questions=questions,
        time_limit_seconds=time_limit,
        created_at=now,
        expires_at=expires_at,
    )
    logger.info(
        "Checkpoint spawned",
        extra={
            "user_id": str(user_id),
            "checkpoint_id": str(instance.id),
            "question_count": len(questions),
            "reason": decision.reason,
        },
    )

    return CheckpointSpawnResponse(
        spawned=True,
        probability=decision.probability,
        reason=decision.reason,
        checkpoint=_instance_to_response(instance),
    )


@router.post("/complete", response_model=CheckpointGrade)
async def complete_checkpoint(
    body: CheckpointCompleteRequest,
    user_id: CurrentUserId,
    db: DbSession,
    settings: AppSettings,
):
    """Grade a checkpoint against its snapshot and record the outcome."""
    store = CheckpointStore(db)
    instance = await store.get_instance(body.checkpoint_id, user_id)
    if instance is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Checkpoint not found")

    if instance.status != CheckpointStatus.ACTIVE.value:
        raise CheckpointStateError(f"Checkpoint is {instance.status}")

    now = datetime.now(timezone.utc)
    if as_utc(instance.expires_at) < now:
        await store.finish(instance, CheckpointStatus.ABORTED)
        # The abort must survive the error response
        await db.commit()
        raise CheckpointExpiredError("Checkpoint expired")

    grade = CheckpointGrader.grade(
        store.snapshot(instance),
        body.answers,
        pass_threshold=settings.mastery_pass_threshold,
    )
    await store.finish(instance, CheckpointStatus.COMPLETED, answers=body.answers)

    await ProgressTracker(db).record_attempt(
        user_id,
        TargetType.LESSON_CHECKPOINT,
        instance.id,
        mastery_percent=grade.mastery_percent,
        status=ProgressStatus.COMPLETED if grade.passed else ProgressStatus.FAILED,
        metadata={
            "checkpoint_id": str(instance.id),
            "results": [r.model_dump(mode="json") for r in grade.results],
        },
        attempted_at=now,
    )

    logger.info(
        "Checkpoint completed",
        extra={
            "user_id": str(user_id),
            "checkpoint_id": str(instance.id),
            "mastery_percent": grade.mastery_percent,
            "passed": grade.passed,
        },
    )
    return grade
