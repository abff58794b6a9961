"""
Admin endpoints - lesson and question pool authoring, previews.
"""

import uuid
from typing import List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import ValidationError

from lessoncore.api.deps import AdminUserId, DbSession
from lessoncore.engines.authoring import ContentStore
from lessoncore.engines.errors import ConfigurationError
from lessoncore.engines.scoring import ScoringEngine
from lessoncore.kernel.models.curriculum import Lesson
from lessoncore.logging_config import get_logger
from lessoncore.schemas.admin import (
    CheckpointPoolCreate,
    CheckpointPoolResponse,
    CheckpointPoolUpdate,
    LessonCreate,
    LessonResponse,
    LessonUpdate,
)
from lessoncore.schemas.checkpoint import validate_question_pool
from lessoncore.schemas.common import SuccessResponse
from lessoncore.schemas.grading import GradingRuleSet
from lessoncore.schemas.lesson import InteractivityDefinition, validate_grading_matches_interactivity
from lessoncore.schemas.progress import PreviewRequest, PreviewResponse

router = APIRouter()
logger = get_logger(__name__)


def _validation_failed(errors: List[str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "Validation failed", "details": errors},
    )


def _merged_content(
    lesson: Lesson, data: LessonUpdate
) -> Tuple[Optional[InteractivityDefinition], Optional[GradingRuleSet]]:
    """The layout and rule set the lesson will have once ``data`` is applied."""
    try:
        interactivity = data.interactivity_json
        if interactivity is None and lesson.interactivity_json is not None:
            interactivity = InteractivityDefinition.model_validate(lesson.interactivity_json)
        grading = data.grading_json
        if grading is None and lesson.grading_json is not None:
            grading = GradingRuleSet.model_validate(lesson.grading_json)
    except ValidationError as exc:
        raise _validation_failed([f"Stored lesson content is invalid, resend it: {exc.error_count()} error(s)"])
    return interactivity, grading


@router.post("/preview", response_model=PreviewResponse)
async def preview_lesson(body: PreviewRequest, _: AdminUserId):
    """Validate a lesson draft and score a sample arrangement without saving."""
    errors = validate_grading_matches_interactivity(body.interactivity_json, body.grading_json)
    if errors:
        raise _validation_failed(errors)

    try:
        scoring = ScoringEngine.compute_score(body.grading_json, body.arrangement)
    except ConfigurationError as exc:
        raise _validation_failed([str(exc)])
    return PreviewResponse(valid=True, scoring=scoring)


@router.get("/lessons", response_model=List[LessonResponse])
async def list_lessons(
    _: AdminUserId,
    db: DbSession,
    module_id: Optional[uuid.UUID] = Query(None, alias="moduleId", description="Only this module's lessons"),
):
    """List lessons in order, drafts included."""
    return await ContentStore(db).list_lessons(module_id)


@router.post("/lessons", response_model=LessonResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(data: LessonCreate, admin_id: AdminUserId, db: DbSession):
    """Create a lesson after checking its grading rules fit its layout."""
    errors = validate_grading_matches_interactivity(data.interactivity_json, data.grading_json)
    if errors:
        raise _validation_failed(errors)

    store = ContentStore(db)
    if not await store.module_exists(data.module_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")

    lesson = await store.create_lesson(data, admin_id)
    logger.info(
        "Lesson created",
        extra={"lesson_id": str(lesson.id), "module_id": str(data.module_id), "admin_id": str(admin_id)},
    )
    return lesson


@router.patch("/lessons/{lesson_id}", response_model=LessonResponse)
async def update_lesson(lesson_id: uuid.UUID, data: LessonUpdate, admin_id: AdminUserId, db: DbSession):
    """
    Update a lesson.

    Whenever the layout or the rules change, the resulting pair is checked
    again, so a valid stored rule set cannot be broken by editing only one
    half.
    """
    store = ContentStore(db)
    lesson = await store.get_lesson(lesson_id)
    if lesson is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")

    if data.interactivity_json is not None or data.grading_json is not None:
        interactivity, grading = _merged_content(lesson, data)
        if interactivity is not None and grading is not None:
            errors = validate_grading_matches_interactivity(interactivity, grading)
            if errors:
                raise _validation_failed(errors)

    if data.module_id is not None and not await store.module_exists(data.module_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")

    lesson = await store.update_lesson(lesson, data, admin_id)
    logger.info("Lesson updated", extra={"lesson_id": str(lesson.id), "admin_id": str(admin_id)})
    return lesson


@router.delete("/lessons/{lesson_id}", response_model=SuccessResponse)
async def delete_lesson(lesson_id: uuid.UUID, admin_id: AdminUserId, db: DbSession):
    """Delete a lesson together with its question pools."""
    store = ContentStore(db)
    lesson = await store.get_lesson(lesson_id)
    if lesson is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")

    await store.delete(lesson)
    logger.info("Lesson deleted", extra={"lesson_id": str(lesson_id), "admin_id": str(admin_id)})
    return SuccessResponse(message="Lesson deleted successfully")


@router.get("/checkpoints", response_model=List[CheckpointPoolResponse])
async def list_checkpoint_pools(
    _: AdminUserId,
    db: DbSession,
    lesson_id: Optional[uuid.UUID] = Query(None, alias="lessonId"),
):
    """List question pools, newest first."""
    return await ContentStore(db).list_pools(lesson_id)


@router.post("/checkpoints", response_model=CheckpointPoolResponse, status_code=status.HTTP_201_CREATED)
async def create_checkpoint_pool(data: CheckpointPoolCreate, admin_id: AdminUserId, db: DbSession):
    """Create a question pool for a lesson or module."""
    errors = validate_question_pool(data.question_pool)
    if errors:
        raise _validation_failed(errors)

    store = ContentStore(db)
    if data.lesson_id is not None and await store.get_lesson(data.lesson_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")
    if data.module_id is not None and not await store.module_exists(data.module_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")

    pool = await store.create_pool(data)
    logger.info(
        "Question pool created",
        extra={"pool_id": str(pool.id), "questions": len(data.question_pool.questions), "admin_id": str(admin_id)},
    )
    return pool


@router.patch("/checkpoints/{pool_id}", response_model=CheckpointPoolResponse)
async def update_checkpoint_pool(
    pool_id: uuid.UUID,
    data: CheckpointPoolUpdate,
    admin_id: AdminUserId,
    db: DbSession,
):
    if data.question_pool is not None:
        errors = validate_question_pool(data.question_pool)
        if errors:
            raise _validation_failed(errors)

    store = ContentStore(db)
    pool = await store.get_pool(pool_id)
    if pool is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question pool not found")
    if data.lesson_id is not None and await store.get_lesson(data.lesson_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found")
    if data.module_id is not None and not await store.module_exists(data.module_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")

    pool = await store.update_pool(pool, data)
    logger.info("Question pool updated", extra={"pool_id": str(pool.id), "admin_id": str(admin_id)})
    return pool


@router.delete("/checkpoints/{pool_id}", response_model=SuccessResponse)
async def delete_checkpoint_pool(pool_id: uuid.UUID, admin_id: AdminUserId, db: DbSession):
    store = ContentStore(db)
    pool = await store.get_pool(pool_id)
    if pool is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question pool not found")

    await store.delete(pool)
    logger.info("Question pool deleted", extra={"pool_id": str(pool_id), "admin_id": str(admin_id)})
    return SuccessResponse(message="Question pool deleted successfully")
