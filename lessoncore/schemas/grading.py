"""
Grading rule sets, arrangements and scoring results.

Field aliases follow the JSON stored with each lesson (``type``,
``normalizeWeights``, ``placeholderId``...), so rule sets and submissions
parse straight from storage and request bodies.
"""

from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class ValidatorKind(str, Enum):
    """Grading rule kinds."""
    EQUALS = "equals"
    CONTAINS = "contains"
    REGEX = "regex"
    ORDER_MATCH = "order_match"
    CUSTOM = "custom"


class Validator(BaseModel):
    """A single grading rule judging one placeholder."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    kind: ValidatorKind = Field(alias="type")
    target: str  # placeholder id
    expected: List[str] = []
    weight: float = Field(ge=0, allow_inf_nan=False)


class ScoringRules(BaseModel):
    """How validator outcomes aggregate into a mastery percent."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    normalize_weights: bool = Field(alias="normalizeWeights")
    precision: int = Field(ge=0, le=10)
    pass_threshold: float = Field(ge=0, le=100)


class GradingRuleSet(BaseModel):
    """Grading configuration attached to a lesson."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    validators: List[Validator]
    scoring_rules: ScoringRules
    version: str = Field(alias="grading_json_version")

    @property
    def total_weight(self) -> float:
        return sum(v.weight for v in self.validators)


class Placement(BaseModel):
    """One draggable placed into one placeholder."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    placeholder_id: str = Field(alias="placeholderId")
    draggable_id: str = Field(alias="draggableId")
    payload: Optional[str] = None


Arrangement = List[Placement]


def duplicate_placeholders(arrangement: Arrangement) -> List[str]:
    """Placeholder ids that appear more than once, in first-seen order."""
    seen: Set[str] = set()
    duplicates: List[str] = []
    for placement in arrangement:
        pid = placement.placeholder_id
        if pid in seen and pid not in duplicates:
            duplicates.append(pid)
        seen.add(pid)
    return duplicates


class ValidatorResult(BaseModel):
    """Outcome of a single validator."""

    model_config = ConfigDict(frozen=True)

    validator_id: str
    passed: bool
    weight: float


class ScoringResult(BaseModel):
    """Canonical score for one arrangement."""

    model_config = ConfigDict(frozen=True)

    mastery_percent: float
    passed: bool
    total_weight: float
    validator_results: List[ValidatorResult]
