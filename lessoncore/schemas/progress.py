"""
Pydantic schemas for lesson check and authoring preview API.
"""

import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lessoncore.engines.progress.unlock_resolver import NextTarget, Unlocks
from lessoncore.schemas.grading import (
    GradingRuleSet,
    Placement,
    ScoringResult,
    ValidatorResult,
    duplicate_placeholders,
)
from lessoncore.schemas.lesson import InteractivityDefinition


def _require_unique_placeholders(arrangement: List[Placement]) -> List[Placement]:
    duplicates = duplicate_placeholders(arrangement)
    if duplicates:
        raise ValueError(f"Multiple placements for placeholder(s): {', '.join(duplicates)}")
    return arrangement


class LessonCheckRequest(BaseModel):
    """Body for POST /lessons/check."""

    model_config = ConfigDict(populate_by_name=True)

    lesson_id: uuid.UUID = Field(alias="lessonId")
    arrangement: List[Placement]
    attempt_metadata: Optional[Dict[str, Any]] = Field(default=None, alias="attemptMetadata")

    @field_validator("arrangement")
    @classmethod
    def unique_placeholders(cls, arrangement: List[Placement]) -> List[Placement]:
        return _require_unique_placeholders(arrangement)


class LessonCheckResponse(BaseModel):
    """Canonical score and unlocks for a lesson attempt."""

    mastery_percent: float
    passed: bool
    attempts: int
    next_target: Optional[NextTarget] = None
    unlocks: Unlocks = Field(default_factory=Unlocks)
    validator_results: List[ValidatorResult]


class PreviewRequest(BaseModel):
    """Body for POST /admin/preview."""

    interactivity_json: InteractivityDefinition
    grading_json: GradingRuleSet
    arrangement: List[Placement]

    @field_validator("arrangement")
    @classmethod
    def unique_placeholders(cls, arrangement: List[Placement]) -> List[Placement]:
        return _require_unique_placeholders(arrangement)


class PreviewResponse(BaseModel):
    """Non-persisted score of an authoring preview."""

    valid: bool = True
    scoring: ScoringResult
