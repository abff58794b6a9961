"""
Question selection - random, variant-resolved questions for one checkpoint.

Unlike the spawn decision, selection is intentionally not reproducible: every
instance gets its own sample and variants, which makes answers harder to
share between learners. The selected questions are snapshotted into the
checkpoint instance, so grading never depends on the pool afterwards.
"""

import random
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from lessoncore.logging_config import get_logger
from lessoncore.schemas.checkpoint import CheckpointQuestion, QuestionPool

logger = get_logger(__name__)

VARIANT_PROBABILITY = 0.5


def parse_pool(raw: Any) -> List[CheckpointQuestion]:
    """
    Parse a stored question pool, skipping malformed questions.

    Accepts either ``{"questions": [...]}`` or a bare list.
    """
    if isinstance(raw, dict):
        items = raw.get("questions") or []
    elif isinstance(raw, list):
        items = raw
    else:
        return []

    questions: List[CheckpointQuestion] = []
    for item in items:
        try:
            questions.append(CheckpointQuestion.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed checkpoint question",
                extra={"question_id": item.get("id") if isinstance(item, dict) else None,
                       "errors": exc.error_count()},
            )
    return questions


def resolve_variant(question: CheckpointQuestion, rng: random.Random) -> CheckpointQuestion:
    """
    Flip a fair coin and maybe present one of the question's variations.

    A substituted question keeps the base id and timer so attempts stay
    correlated to the same concept.
    """
    if question.variations and rng.random() < VARIANT_PROBABILITY:
        variant = question.variations[rng.randrange(len(question.variations))]
        return question.model_copy(
            update={
                "stem": variant.stem,
                "options": variant.options,
                "answer": variant.answer,
                "variations": [],
            }
        )
    return question.model_copy(update={"variations": []})


def select_questions(
    pool: Union[QuestionPool, List[CheckpointQuestion]],
    count: int,
    rng: Optional[random.Random] = None,
) -> List[CheckpointQuestion]:
    """
    Sample up to ``count`` distinct questions from the pool.

    An empty pool returns an empty list; the caller must treat that as
    "no checkpoint possible" rather than an error.
    """
    rng = rng or random.Random()  # seeded from OS entropy
    questions = pool.questions if isinstance(pool, QuestionPool) else list(pool)
    if not questions or count <= 0:
        return []

    available = list(range(len(questions)))
    selected: List[CheckpointQuestion] = []
    for _ in range(min(count, len(questions))):
        pick = rng.randrange(len(available))
        # swap-remove keeps each draw O(1)
        available[pick], available[-1] = available[-1], available[pick]
        index = available.pop()
        selected.append(resolve_variant(questions[index], rng))

    return selected
