"""
Validator evaluation - decides pass/fail for a single grading rule.
"""

import re
from typing import Callable, Dict, Optional

from lessoncore.schemas.grading import Arrangement, Placement, Validator, ValidatorKind


def find_placement(arrangement: Arrangement, placeholder_id: str) -> Optional[Placement]:
    """First placement in the arrangement for a placeholder, if any."""
    for placement in arrangement:
        if placement.placeholder_id == placeholder_id:
            return placement
    return None


def _equals(validator: Validator, placement: Placement) -> bool:
    # Authors may grade by draggable identity or by literal payload
    if placement.draggable_id in validator.expected:
        return True
    return placement.payload is not None and placement.payload in validator.expected


def _contains(validator: Validator, placement: Placement) -> bool:
    if not placement.payload:
        return False
    payload = placement.payload.lower()
    return any(exp.lower() in payload for exp in validator.expected)


def _regex(validator: Validator, placement: Placement) -> bool:
    if not placement.payload or not validator.expected:
        return False
    try:
        pattern = re.compile(validator.expected[0])
    except re.error:
        return False
    return pattern.search(placement.payload) is not None


def _order_match(validator: Validator, placement: Placement) -> bool:
    # Not implemented yet: sequence checks always pass until the product
    # defines what "correct order" means for a single placeholder.
    return True


def _custom(validator: Validator, placement: Placement) -> bool:
    # Extension point; unimplemented custom rules never grant credit.
    return False


EVALUATORS: Dict[ValidatorKind, Callable[[Validator, Placement], bool]] = {
    ValidatorKind.EQUALS: _equals,
    ValidatorKind.CONTAINS: _contains,
    ValidatorKind.REGEX: _regex,
    ValidatorKind.ORDER_MATCH: _order_match,
    ValidatorKind.CUSTOM: _custom,
}


def evaluate_validator(validator: Validator, arrangement: Arrangement) -> bool:
    """
    Evaluate one validator against an arrangement.

    Unanswered placeholders never pass. An invalid regex pattern fails the
    validator instead of raising.
    """
    placement = find_placement(arrangement, validator.target)
    if placement is None:
        return False
    return EVALUATORS[validator.kind](validator, placement)
