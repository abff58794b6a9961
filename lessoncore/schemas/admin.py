"""
Admin authoring schemas - lessons and checkpoint question pools.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from lessoncore.schemas.checkpoint import QuestionPool
from lessoncore.schemas.grading import GradingRuleSet
from lessoncore.schemas.lesson import InteractivityDefinition


class LessonCreate(BaseModel):
    """Lesson creation request."""

    module_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    order_index: int = Field(..., ge=0)
    interactivity_json: InteractivityDefinition
    grading_json: GradingRuleSet
    required_mastery_percent: float = Field(98.0, ge=0, le=100)
    published: bool = False


class LessonUpdate(BaseModel):
    """Lesson update request. Omitted fields keep their stored value."""

    module_id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    order_index: Optional[int] = Field(None, ge=0)
    interactivity_json: Optional[InteractivityDefinition] = None
    grading_json: Optional[GradingRuleSet] = None
    required_mastery_percent: Optional[float] = Field(None, ge=0, le=100)
    published: Optional[bool] = None


class LessonResponse(BaseModel):
    """Stored lesson as authors see it, unpublished drafts included."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    module_id: Optional[uuid.UUID]
    title: str
    description: Optional[str]
    order_index: int
    published: bool
    interactivity_json: Optional[Dict[str, Any]]
    grading_json: Optional[Dict[str, Any]]
    required_mastery_percent: float
    created_by: Optional[uuid.UUID] = None
    updated_by: Optional[uuid.UUID] = None
    last_published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class CheckpointPoolCreate(BaseModel):
    """Question pool creation request."""

    lesson_id: Optional[uuid.UUID] = None
    module_id: Optional[uuid.UUID] = None
    question_pool: QuestionPool
    published: bool = False


class CheckpointPoolUpdate(BaseModel):
    lesson_id: Optional[uuid.UUID] = None
    module_id: Optional[uuid.UUID] = None
    question_pool: Optional[QuestionPool] = None
    published: Optional[bool] = None


class CheckpointPoolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    lesson_id: Optional[uuid.UUID]
    module_id: Optional[uuid.UUID]
    question_pool: Dict[str, Any]
    published: bool
    created_at: datetime
    updated_at: datetime
