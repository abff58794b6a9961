"""
Scoring Engine - server-authoritative mastery percent for an arrangement.
"""

import math
from decimal import Decimal, ROUND_HALF_UP, localcontext

from lessoncore.engines.errors import ConfigurationError
from lessoncore.engines.scoring.validators import evaluate_validator
from lessoncore.schemas.grading import (
    Arrangement,
    GradingRuleSet,
    ScoringResult,
    ValidatorResult,
)


def round_half_up(value: float, precision: int) -> float:
    """
    Round to ``precision`` decimals, halves away from zero.

    Works on the shortest decimal representation of the float, so 12.345
    rounds to 12.35 even though its binary value sits just below the half.
    The context precision grows with the magnitude so large scores never
    overflow the default 28 digits.
    """
    exact = Decimal(repr(value))
    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + precision + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


class ScoringEngine:
    """
    Converts an arrangement into a canonical mastery percent.

    This is the only source of truth for lesson mastery: identical inputs
    always produce an identical result, and nothing computed client-side is
    trusted.
    """

    @classmethod
    def compute_score(cls, rule_set: GradingRuleSet, arrangement: Arrangement) -> ScoringResult:
        """
        Evaluate every validator and aggregate the outcome.

        Raises:
            ConfigurationError: the validators' weights sum to zero or past
                the float range
        """
        validator_results = [
            ValidatorResult(
                validator_id=validator.id,
                passed=evaluate_validator(validator, arrangement),
                weight=validator.weight,
            )
            for validator in rule_set.validators
        ]

        total_weight = sum(v.weight for v in rule_set.validators)
        if total_weight == 0:
            raise ConfigurationError("Total validator weight cannot be zero")
        if not math.isfinite(total_weight):
            raise ConfigurationError("Total validator weight is not finite")

        earned_weight = sum(r.weight for r in validator_results if r.passed)

        rules = rule_set.scoring_rules
        if rules.normalize_weights:
            raw_score = (earned_weight / total_weight) * 100
        else:
            # Weights are taken as fractions of 1.0; no clamping above 100
            raw_score = earned_weight * 100

        if not math.isfinite(raw_score):
            raise ConfigurationError("Validator weights overflow the score range")

        mastery_percent = round_half_up(raw_score, rules.precision)

        return ScoringResult(
            mastery_percent=mastery_percent,
            passed=mastery_percent >= rules.pass_threshold,
            total_weight=total_weight,
            validator_results=validator_results,
        )


def compute_score(rule_set: GradingRuleSet, arrangement: Arrangement) -> ScoringResult:
    """Shortcut for ``ScoringEngine.compute_score``."""
    return ScoringEngine.compute_score(rule_set, arrangement)
