"""Unit tests for the checkpoint spawn scheduler."""

from datetime import datetime, timedelta, timezone

import pytest

from lessoncore.config import Settings
from lessoncore.engines.checkpoint import CheckpointScheduler, deterministic_random, hour_bucket
from lessoncore.engines.checkpoint import scheduler as scheduler_module

NOW = datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)
PASSING = [100.0] * 5
STRUGGLING = [0.0, 50.0, 97.9, 100.0, 100.0]  # 3 of 5 below 98


class TestDeterministicRandom:
    """Tests for the seeded draw."""

    def test_same_seed_same_value(self):
        assert deterministic_random("u-m-1") == deterministic_random("u-m-1")

    def test_value_in_unit_interval(self):
        for i in range(50):
            assert 0.0 <= deterministic_random(f"seed-{i}") < 1.0

    def test_largest_prefix_stays_below_one(self, monkeypatch):
        class _MaxDigest:
            def hexdigest(self):
                return "f" * 64

        monkeypatch.setattr(scheduler_module.hashlib, "sha256", lambda data: _MaxDigest())
        assert deterministic_random("any") == 0xFFFFFFFF / 0x100000000
        assert deterministic_random("any") < 1.0

    def test_different_seeds_differ(self):
        assert deterministic_random("u-m-1") != deterministic_random("u-m-2")

    def test_hour_bucket(self):
        assert hour_bucket(datetime(1970, 1, 1, 1, 59, tzinfo=timezone.utc)) == 1
        assert hour_bucket(datetime(1970, 1, 1, 2, 0, tzinfo=timezone.utc)) == 2


class TestCheckpointScheduler:
    """Tests for probability adjustments and determinism."""

    def test_base_probability(self):
        decision = CheckpointScheduler().decide_spawn("u1", "m1", PASSING, None, now=NOW)
        assert decision.probability == pytest.approx(0.12)
        assert decision.reason == "Base probability"

    def test_same_hour_same_decision(self):
        scheduler = CheckpointScheduler()
        first = scheduler.decide_spawn("u1", "m1", PASSING, None, now=NOW.replace(minute=1))
        second = scheduler.decide_spawn("u1", "m1", PASSING, None, now=NOW.replace(minute=59))
        assert first == second

    def test_draw_matches_hour_seed(self):
        scheduler = CheckpointScheduler(base_probability=0.5)
        decision = scheduler.decide_spawn("u1", "m1", PASSING, None, now=NOW)
        draw = deterministic_random(f"u1-m1-{hour_bucket(NOW)}")
        assert decision.should_spawn is (draw < 0.5)

    def test_struggling_learner_boost(self):
        decision = CheckpointScheduler().decide_spawn("u1", "m1", STRUGGLING, None, now=NOW)
        assert decision.probability == pytest.approx(0.27)
        assert decision.reason == "High failure rate detected"

    def test_failure_rate_at_limit_gets_no_boost(self):
        history = [0.0, 0.0, 100.0, 100.0, 100.0]  # exactly 0.4
        decision = CheckpointScheduler().decide_spawn("u1", "m1", history, None, now=NOW)
        assert decision.probability == pytest.approx(0.12)

    def test_missing_mastery_counts_as_failure(self):
        decision = CheckpointScheduler().decide_spawn("u1", "m1", [None] * 3, None, now=NOW)
        assert decision.reason == "High failure rate detected"

    def test_empty_history_gets_no_boost(self):
        decision = CheckpointScheduler().decide_spawn("u1", "m1", [], None, now=NOW)
        assert decision.probability == pytest.approx(0.12)

    def test_only_history_window_counts(self):
        history = PASSING + [0.0] * 10
        decision = CheckpointScheduler().decide_spawn("u1", "m1", history, None, now=NOW)
        assert decision.reason == "Base probability"

    def test_recent_checkpoint_cooldown(self):
        last = NOW - timedelta(minutes=10)
        decision = CheckpointScheduler().decide_spawn("u1", "m1", PASSING, last, now=NOW)
        assert decision.probability == pytest.approx(0.04)
        assert decision.reason == "Recent checkpoint cooldown"

    def test_cooldown_overrides_boost_reason(self):
        last = NOW - timedelta(minutes=10)
        decision = CheckpointScheduler().decide_spawn("u1", "m1", STRUGGLING, last, now=NOW)
        assert decision.probability == pytest.approx(0.19)
        assert decision.reason == "Recent checkpoint cooldown"

    def test_old_checkpoint_has_no_cooldown(self):
        last = NOW - timedelta(hours=3)
        decision = CheckpointScheduler().decide_spawn("u1", "m1", PASSING, last, now=NOW)
        assert decision.reason == "Base probability"

    def test_probability_clamped_to_one(self):
        scheduler = CheckpointScheduler(base_probability=0.95, struggle_boost=0.3)
        decision = scheduler.decide_spawn("u1", "m1", STRUGGLING, None, now=NOW)
        assert decision.probability == 1.0
        assert decision.should_spawn is True

    def test_probability_clamped_to_zero(self):
        scheduler = CheckpointScheduler(base_probability=0.05, cooldown_penalty=0.2)
        decision = scheduler.decide_spawn("u1", "m1", PASSING, NOW, now=NOW)
        assert decision.probability == 0.0
        assert decision.should_spawn is False

    def test_naive_timestamps_are_utc(self):
        scheduler = CheckpointScheduler()
        naive_now = NOW.replace(tzinfo=None)
        naive_last = naive_now - timedelta(minutes=10)
        aware = scheduler.decide_spawn("u1", "m1", PASSING, NOW - timedelta(minutes=10), now=NOW)
        naive = scheduler.decide_spawn("u1", "m1", PASSING, naive_last, now=naive_now)
        assert naive == aware

    def test_from_settings(self):
        settings = Settings(checkpoint_base_probability=0.3, checkpoint_cooldown_hours=1.0)
        scheduler = CheckpointScheduler.from_settings(settings)
        assert scheduler.base_probability == 0.3
        assert scheduler.cooldown == timedelta(hours=1)

    def test_certain_probability_always_spawns(self):
        scheduler = CheckpointScheduler(base_probability=1.0)
        for i in range(50):
            decision = scheduler.decide_spawn(f"u{i}", "m1", PASSING, None, now=NOW)
            assert decision.should_spawn is True
