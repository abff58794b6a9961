"""
Scoring Engine - deterministic grading of drag-and-drop arrangements.

Validator kinds:
- equals: draggable id or payload matches an expected value
- contains: payload contains an expected substring (case-insensitive)
- regex: payload matches expected[0]; invalid patterns fail closed
- order_match: not implemented, always passes
- custom: extension point, always fails
"""

from lessoncore.engines.scoring.scoring_engine import (
    ScoringEngine,
    compute_score,
    round_half_up,
)
from lessoncore.engines.scoring.validators import evaluate_validator, find_placement

__all__ = [
    "ScoringEngine",
    "compute_score",
    "round_half_up",
    "evaluate_validator",
    "find_placement",
]
