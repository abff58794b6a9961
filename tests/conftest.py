"""
Pytest fixtures for lesson engine tests.
"""

from typing import Any, Dict, List

import pytest

from lessoncore.schemas.checkpoint import CheckpointQuestion
from lessoncore.schemas.grading import GradingRuleSet


def build_rule_set(
    validators: List[Dict[str, Any]],
    *,
    normalize: bool = True,
    precision: int = 2,
    pass_threshold: float = 98.0,
) -> GradingRuleSet:
    """Rule set in the JSON shape stored with lessons."""
    return GradingRuleSet.model_validate(
        {
            "validators": validators,
            "scoring_rules": {
                "normalizeWeights": normalize,
                "precision": precision,
                "pass_threshold": pass_threshold,
            },
            "grading_json_version": "1.0",
        }
    )


def build_question(question_id: str, answer: str = "a", timer: int = 20, **extra) -> CheckpointQuestion:
    return CheckpointQuestion.model_validate(
        {
            "id": question_id,
            "type": "mcq",
            "stem": f"Question {question_id}?",
            "options": [{"id": "a", "text": "Alpha"}, {"id": "b", "text": "Beta"}],
            "answer": answer,
            "timerSeconds": timer,
            **extra,
        }
    )


@pytest.fixture
def make_rule_set():
    return build_rule_set


@pytest.fixture
def make_question():
    return build_question


@pytest.fixture
def single_equals_rule_set() -> GradingRuleSet:
    """One equals validator on p1 expecting draggable d1."""
    return build_rule_set(
        [{"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 1.0}]
    )


@pytest.fixture
def question_pool() -> List[CheckpointQuestion]:
    return [build_question(f"q{i}") for i in range(1, 6)]
