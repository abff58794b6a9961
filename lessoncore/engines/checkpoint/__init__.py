"""
Checkpoint engine - timed multiple choice checks between lessons.

- Spawn decision: deterministic per (user, module, hour bucket)
- Question selection: random sample with optional variant substitution
- Grading: against the snapshot stored on the checkpoint instance
"""

from lessoncore.engines.checkpoint.grader import CheckpointGrader
from lessoncore.engines.checkpoint.question_selector import (
    parse_pool,
    resolve_variant,
    select_questions,
)
from lessoncore.engines.checkpoint.scheduler import (
    CheckpointScheduler,
    as_utc,
    deterministic_random,
    hour_bucket,
)

__all__ = [
    "CheckpointGrader",
    "CheckpointScheduler",
    "deterministic_random",
    "as_utc",
    "hour_bucket",
    "parse_pool",
    "resolve_variant",
    "select_questions",
]
