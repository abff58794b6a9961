"""
Checkpoint Scheduler - decides when to interject a timed checkpoint.

The decision is reproducible: the random draw is derived from
(user, module, hour bucket), so retries within the same clock hour always
agree, while each new hour yields a fresh draw without storing a seed.
"""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from lessoncore.config import Settings
from lessoncore.logging_config import get_logger
from lessoncore.schemas.checkpoint import CheckpointDecision

logger = get_logger(__name__)

_HOUR_MS = 60 * 60 * 1000
_DRAW_HEX_CHARS = 8
_DRAW_SPAN = 0x100000000  # 16 ** _DRAW_HEX_CHARS


def deterministic_random(seed: str) -> float:
    """Map a seed string to a pseudo-uniform float in [0, 1) via SHA-256."""
    digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()
    return int(digest[:_DRAW_HEX_CHARS], 16) / _DRAW_SPAN


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def hour_bucket(now: datetime) -> int:
    """Whole hours since the Unix epoch."""
    return int(now.timestamp() * 1000) // _HOUR_MS


class CheckpointScheduler:
    """
    Spawn probability = base, plus a boost for struggling learners, minus a
    cooldown penalty right after a previous checkpoint, clamped to [0, 1].
    """

    BASE_PROBABILITY = 0.12
    STRUGGLE_BOOST = 0.15
    STRUGGLE_FAILURE_RATE = 0.4
    HISTORY_WINDOW = 5
    PASS_THRESHOLD = 98.0
    COOLDOWN_PENALTY = 0.08
    COOLDOWN = timedelta(hours=2)

    def __init__(
        self,
        *,
        base_probability: float = BASE_PROBABILITY,
        struggle_boost: float = STRUGGLE_BOOST,
        struggle_failure_rate: float = STRUGGLE_FAILURE_RATE,
        history_window: int = HISTORY_WINDOW,
        pass_threshold: float = PASS_THRESHOLD,
        cooldown_penalty: float = COOLDOWN_PENALTY,
        cooldown: timedelta = COOLDOWN,
    ):
        self.base_probability = base_probability
        self.struggle_boost = struggle_boost
        self.struggle_failure_rate = struggle_failure_rate
        self.history_window = history_window
        self.pass_threshold = pass_threshold
        self.cooldown_penalty = cooldown_penalty
        self.cooldown = cooldown

    @classmethod
    def from_settings(cls, settings: Settings) -> "CheckpointScheduler":
        return cls(
            base_probability=settings.checkpoint_base_probability,
            struggle_boost=settings.checkpoint_struggle_boost,
            struggle_failure_rate=settings.checkpoint_struggle_failure_rate,
            history_window=settings.checkpoint_history_window,
            pass_threshold=settings.mastery_pass_threshold,
            cooldown_penalty=settings.checkpoint_cooldown_penalty,
            cooldown=timedelta(hours=settings.checkpoint_cooldown_hours),
        )

    def failure_rate(self, recent_mastery: Sequence[Optional[float]]) -> float:
        """Fraction of the most recent attempts below the pass threshold."""
        window = list(recent_mastery)[: self.history_window]
        if not window:
            return 0.0
        failures = sum(1 for m in window if (m or 0.0) < self.pass_threshold)
        return failures / len(window)

    def decide_spawn(
        self,
        user_id: str,
        module_id: str,
        recent_mastery: Sequence[Optional[float]],
        last_checkpoint_at: Optional[datetime],
        now: Optional[datetime] = None,
    ) -> CheckpointDecision:
        """
        Decide whether to spawn a checkpoint for this user and module.

        Args:
            user_id: Learner
            module_id: Module the learner is working through
            recent_mastery: Mastery percents of recent lesson attempts, most
                recent first (None counts as 0)
            last_checkpoint_at: Creation time of the learner's latest checkpoint
            now: Reference time; defaults to the current UTC time

        Returns:
            CheckpointDecision with the clamped probability used for the draw
        """
        now = as_utc(now or datetime.now(timezone.utc))
        probability = self.base_probability
        reason = "Base probability"

        if self.failure_rate(recent_mastery) > self.struggle_failure_rate:
            probability += self.struggle_boost
            reason = "High failure rate detected"

        if last_checkpoint_at is not None:
            if now - as_utc(last_checkpoint_at) < self.cooldown:
                probability -= self.cooldown_penalty
                reason = "Recent checkpoint cooldown"

        probability = min(1.0, max(0.0, probability))

        seed = f"{user_id}-{module_id}-{hour_bucket(now)}"
        draw = deterministic_random(seed)
        should_spawn = draw < probability

        logger.debug(
            "Checkpoint spawn decision",
            extra={
                "user_id": str(user_id),
                "module_id": str(module_id),
                "probability": probability,
                "draw": draw,
                "spawn": should_spawn,
            },
        )
        return CheckpointDecision(
            should_spawn=should_spawn,
            probability=probability,
            reason=reason,
        )
