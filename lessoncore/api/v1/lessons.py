"""
Lesson endpoints - server-authoritative scoring and unlocking.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status
from pydantic import ValidationError

from lessoncore.api.deps import CurrentUserId, DbSession
from lessoncore.engines.errors import ConfigurationError
from lessoncore.engines.progress import CurriculumStore, ProgressTracker, UnlockResolver
from lessoncore.engines.scoring import ScoringEngine
from lessoncore.kernel.models.progress import ProgressStatus, TargetType
from lessoncore.logging_config import get_logger
from lessoncore.schemas.grading import GradingRuleSet
from lessoncore.schemas.progress import LessonCheckRequest, LessonCheckResponse

router = APIRouter()
logger = get_logger(__name__)

LESSON_CONFIG_ERROR = "Lesson configuration error, contact support"


@router.post("/check", response_model=LessonCheckResponse)
async def check_lesson(
    body: LessonCheckRequest,
    user_id: CurrentUserId,
    db: DbSession,
):
    """Score an arrangement, persist the attempt and unlock what comes next."""
    lesson = await CurriculumStore(db).get_lesson(body.lesson_id)
    if lesson is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")

    try:
        rule_set = GradingRuleSet.model_validate(lesson.grading_json)
        scoring = ScoringEngine.compute_score(rule_set, body.arrangement)
    except (ValidationError, ConfigurationError) as exc:
        logger.error(
            "Invalid lesson grading configuration",
            extra={"lesson_id": str(lesson.id), "error": str(exc)},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=LESSON_CONFIG_ERROR,
        )

    metadata = {
        **(body.attempt_metadata or {}),
        "arrangement": [p.model_dump(mode="json", by_alias=True) for p in body.arrangement],
        "grading_json_version": rule_set.version,
        "computed_score": scoring.mastery_percent,
        "validator_results": [r.model_dump(mode="json") for r in scoring.validator_results],
    }

    progress = await ProgressTracker(db).record_attempt(
        user_id,
        TargetType.LESSON,
        lesson.id,
        mastery_percent=scoring.mastery_percent,
        status=ProgressStatus.COMPLETED if scoring.passed else ProgressStatus.IN_PROGRESS,
        metadata=metadata,
        attempted_at=datetime.now(timezone.utc),
    )

    logger.info(
        "Lesson scored",
        extra={
            "user_id": str(user_id),
            "lesson_id": str(lesson.id),
            "mastery_percent": scoring.mastery_percent,
            "passed": scoring.passed,
            "attempts": progress.attempts,
        },
    )

    response = LessonCheckResponse(
        mastery_percent=scoring.mastery_percent,
        passed=scoring.passed,
        attempts=progress.attempts,
        validator_results=scoring.validator_results,
    )
    if scoring.passed:
        unlock = await UnlockResolver(db).process_lesson_pass(user_id, lesson)
        response.next_target = unlock.next_target
        response.unlocks = unlock.unlocks

    return response
