"""
Interactivity definitions for drag-and-drop lessons and authoring checks
between a lesson's layout and its grading rules.
"""

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from lessoncore.schemas.grading import GradingRuleSet


class Placeholder(BaseModel):
    """A named slot a draggable can be dropped into."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    slot_index: int = Field(alias="slotIndex")
    indent_level: int = Field(default=0, alias="indentLevel")
    accept_types: Optional[List[str]] = Field(default=None, alias="acceptTypes")


class Draggable(BaseModel):
    """An item with a stable id and a semantic payload."""

    id: str
    label: str
    payload: str


class InteractivityDefinition(BaseModel):
    """Layout of a drag-and-drop lesson."""

    type: Literal["drag_drop"] = "drag_drop"
    title: str
    explanation: str = ""
    placeholders: List[Placeholder]
    draggables: List[Draggable]
    tips: List[str] = []


def validate_grading_matches_interactivity(
    interactivity: InteractivityDefinition,
    rule_set: GradingRuleSet,
) -> List[str]:
    """
    Check that a rule set can be used with a lesson layout.

    Returns a list of human-readable errors; empty when the pair is valid.
    """
    errors: List[str] = []
    placeholder_ids = {p.id for p in interactivity.placeholders}

    for validator in rule_set.validators:
        if validator.target not in placeholder_ids:
            errors.append(
                f"Validator {validator.id} targets non-existent placeholder: {validator.target}"
            )

    total_weight = rule_set.total_weight
    if total_weight == 0:
        errors.append("Total validator weight cannot be zero")
    elif not math.isfinite(total_weight):
        errors.append("Total validator weight is not finite")

    return errors
