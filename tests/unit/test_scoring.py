"""Unit tests for validator evaluation and the scoring engine."""

import pytest
from pydantic import ValidationError

from lessoncore.engines.errors import ConfigurationError
from lessoncore.engines.scoring import (
    ScoringEngine,
    compute_score,
    evaluate_validator,
    find_placement,
    round_half_up,
)
from lessoncore.engines.scoring.validators import EVALUATORS
from lessoncore.schemas.grading import Placement, Validator, ValidatorKind


def _placement(placeholder_id, draggable_id, payload=None):
    return Placement(placeholder_id=placeholder_id, draggable_id=draggable_id, payload=payload)


def _validator(kind, expected, target="p1", weight=1.0):
    return Validator(id="v", kind=kind, target=target, expected=expected, weight=weight)


class TestValidators:
    """Tests for each validator kind."""

    def test_every_kind_has_an_evaluator(self):
        assert set(EVALUATORS) == set(ValidatorKind)

    def test_equals_matches_draggable_id(self):
        v = _validator(ValidatorKind.EQUALS, ["d1"])
        assert evaluate_validator(v, [_placement("p1", "d1")]) is True
        assert evaluate_validator(v, [_placement("p1", "d2")]) is False

    def test_equals_matches_literal_payload(self):
        v = _validator(ValidatorKind.EQUALS, ["print('hi')"])
        assert evaluate_validator(v, [_placement("p1", "d9", "print('hi')")]) is True

    def test_equals_is_case_sensitive(self):
        v = _validator(ValidatorKind.EQUALS, ["Print"])
        assert evaluate_validator(v, [_placement("p1", "d9", "print")]) is False

    def test_contains_is_case_insensitive(self):
        v = _validator(ValidatorKind.CONTAINS, ["HELLO"])
        assert evaluate_validator(v, [_placement("p1", "d1", "say hello world")]) is True

    def test_contains_without_payload_fails(self):
        v = _validator(ValidatorKind.CONTAINS, ["hello"])
        assert evaluate_validator(v, [_placement("p1", "hello")]) is False

    def test_regex_searches_anywhere(self):
        v = _validator(ValidatorKind.REGEX, [r"for \w+ in"])
        assert evaluate_validator(v, [_placement("p1", "d1", "  for x in range(3):")]) is True

    def test_regex_invalid_pattern_fails_closed(self):
        v = _validator(ValidatorKind.REGEX, ["["])
        assert evaluate_validator(v, [_placement("p1", "d1", "[")]) is False

    def test_regex_uses_first_pattern_only(self):
        v = _validator(ValidatorKind.REGEX, ["^abc$", "xyz"])
        assert evaluate_validator(v, [_placement("p1", "d1", "xyz")]) is False

    def test_order_match_passes_when_answered(self):
        v = _validator(ValidatorKind.ORDER_MATCH, ["anything"])
        assert evaluate_validator(v, [_placement("p1", "d1")]) is True

    def test_custom_never_passes(self):
        v = _validator(ValidatorKind.CUSTOM, ["d1"])
        assert evaluate_validator(v, [_placement("p1", "d1", "d1")]) is False

    @pytest.mark.parametrize("kind", list(ValidatorKind))
    def test_unanswered_placeholder_fails(self, kind):
        v = _validator(kind, ["d1"])
        assert evaluate_validator(v, [_placement("other", "d1", "d1")]) is False

    def test_first_placement_wins(self):
        arrangement = [_placement("p1", "d1"), _placement("p1", "d2")]
        assert find_placement(arrangement, "p1").draggable_id == "d1"


class TestScoringEngine:
    """Tests for score aggregation."""

    def test_correct_arrangement_scores_100(self, single_equals_rule_set):
        result = ScoringEngine.compute_score(single_equals_rule_set, [_placement("p1", "d1")])
        assert result.mastery_percent == 100.0
        assert result.passed is True
        assert result.total_weight == 1.0

    def test_wrong_arrangement_scores_0(self, single_equals_rule_set):
        result = ScoringEngine.compute_score(single_equals_rule_set, [_placement("p1", "d2")])
        assert result.mastery_percent == 0.0
        assert result.passed is False

    def test_empty_arrangement_scores_0(self, single_equals_rule_set):
        result = ScoringEngine.compute_score(single_equals_rule_set, [])
        assert result.mastery_percent == 0.0
        assert [r.passed for r in result.validator_results] == [False]

    def test_normalized_partial_credit(self, make_rule_set):
        rule_set = make_rule_set([
            {"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 0.3},
            {"id": "v2", "type": "equals", "target": "p2", "expected": ["d2"], "weight": 0.7},
        ])
        result = compute_score(rule_set, [_placement("p1", "d1"), _placement("p2", "wrong")])
        assert result.mastery_percent == 30.0
        assert result.passed is False

    def test_zero_total_weight_raises(self, make_rule_set):
        rule_set = make_rule_set(
            [{"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 0}]
        )
        with pytest.raises(ConfigurationError):
            compute_score(rule_set, [_placement("p1", "d1")])

    def test_unnormalized_score_can_exceed_100(self, make_rule_set):
        rule_set = make_rule_set(
            [
                {"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 0.8},
                {"id": "v2", "type": "equals", "target": "p2", "expected": ["d2"], "weight": 0.7},
            ],
            normalize=False,
        )
        result = compute_score(rule_set, [_placement("p1", "d1"), _placement("p2", "d2")])
        assert result.mastery_percent == 150.0

    def test_results_follow_validator_order(self, make_rule_set):
        rule_set = make_rule_set([
            {"id": "b", "type": "custom", "target": "p1", "weight": 1},
            {"id": "a", "type": "order_match", "target": "p1", "weight": 2},
        ])
        result = compute_score(rule_set, [_placement("p1", "d1")])
        assert [r.validator_id for r in result.validator_results] == ["b", "a"]
        assert sum(r.weight for r in result.validator_results) == result.total_weight

    def test_pass_threshold_is_inclusive(self, make_rule_set):
        rule_set = make_rule_set(
            [
                {"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 1},
                {"id": "v2", "type": "equals", "target": "p2", "expected": ["d2"], "weight": 1},
            ],
            pass_threshold=50.0,
        )
        result = compute_score(rule_set, [_placement("p1", "d1")])
        assert result.mastery_percent == 50.0
        assert result.passed is True

    def test_identical_inputs_give_identical_results(self, make_rule_set):
        rule_set = make_rule_set([
            {"id": "v1", "type": "contains", "target": "p1", "expected": ["x"], "weight": 1},
            {"id": "v2", "type": "regex", "target": "p2", "expected": ["^y"], "weight": 2},
        ])
        arrangement = [_placement("p1", "d1", "xx"), _placement("p2", "d2", "zy")]
        assert compute_score(rule_set, arrangement) == compute_score(rule_set, arrangement)

    def test_precision_rounds_half_up(self, make_rule_set):
        rule_set = make_rule_set(
            [
                {"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 1},
                {"id": "v2", "type": "equals", "target": "p2", "expected": ["d2"], "weight": 2},
            ],
            precision=1,
        )
        result = compute_score(rule_set, [_placement("p1", "d1")])
        assert result.mastery_percent == 33.3

    def test_huge_unnormalized_weight_rounds_without_overflow(self, make_rule_set):
        rule_set = make_rule_set(
            [{"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 1e18}],
            normalize=False,
            precision=10,
        )
        result = compute_score(rule_set, [_placement("p1", "d1")])
        assert result.mastery_percent == 1e20
        assert result.passed is True

    def test_infinite_weight_is_rejected_by_the_schema(self, make_rule_set):
        with pytest.raises(ValidationError):
            make_rule_set(
                [{"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": float("inf")}]
            )

    def test_overflowing_total_weight_raises(self, make_rule_set):
        rule_set = make_rule_set([
            {"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 1e308},
            {"id": "v2", "type": "equals", "target": "p2", "expected": ["d2"], "weight": 1e308},
        ])
        with pytest.raises(ConfigurationError, match="not finite"):
            compute_score(rule_set, [_placement("p1", "d1")])

    def test_overflowing_unnormalized_score_raises(self, make_rule_set):
        rule_set = make_rule_set(
            [{"id": "v1", "type": "equals", "target": "p1", "expected": ["d1"], "weight": 1e307}],
            normalize=False,
        )
        with pytest.raises(ConfigurationError, match="overflow"):
            compute_score(rule_set, [_placement("p1", "d1")])

    def test_invalid_regex_only_loses_its_own_weight(self, make_rule_set):
        rule_set = make_rule_set([
            {"id": "broken", "type": "regex", "target": "p1", "expected": ["["], "weight": 1},
            {"id": "ok", "type": "equals", "target": "p2", "expected": ["d2"], "weight": 1},
        ])
        result = compute_score(rule_set, [_placement("p1", "d1", "["), _placement("p2", "d2")])
        assert result.mastery_percent == 50.0
        assert [(r.validator_id, r.passed) for r in result.validator_results] == [
            ("broken", False),
            ("ok", True),
        ]


class TestRounding:
    """Tests for half-up rounding."""

    def test_half_rounds_up(self):
        assert round_half_up(2.5, 0) == 3.0
        assert round_half_up(0.125, 2) == 0.13

    def test_decimal_representation_is_used(self):
        assert round_half_up(12.345, 2) == 12.35

    def test_below_half_rounds_down(self):
        assert round_half_up(66.6649, 2) == 66.66

    def test_large_values_keep_every_digit(self):
        assert round_half_up(1e20, 10) == 1e20
        assert round_half_up(123456789012345678.0, 10) == 123456789012345678.0
