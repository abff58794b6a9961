"""
Checkpoint Grader - time windows and scoring for checkpoint instances.
"""

from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from lessoncore.schemas.checkpoint import (
    CheckpointAnswer,
    CheckpointGrade,
    CheckpointQuestion,
    QuestionOutcome,
)


class CheckpointGrader:
    """
    Grades a checkpoint against the question snapshot taken at spawn time.

    Every question carries its own timer; the instance expires after the sum
    of the timers plus a fixed buffer.
    """

    PASS_THRESHOLD = 98.0
    TIME_BUFFER_SECONDS = 30

    @classmethod
    def time_window(
        cls,
        questions: Sequence[CheckpointQuestion],
        now: datetime,
        buffer_seconds: int = TIME_BUFFER_SECONDS,
    ) -> Tuple[int, datetime]:
        """Return (time limit in seconds, expiry time) for a new instance."""
        limit = sum(q.timer_seconds for q in questions) + buffer_seconds
        return limit, now + timedelta(seconds=limit)

    @classmethod
    def grade(
        cls,
        questions: Sequence[CheckpointQuestion],
        answers: Sequence[CheckpointAnswer],
        pass_threshold: float = PASS_THRESHOLD,
    ) -> CheckpointGrade:
        """
        Grade submitted answers. Unanswered questions count as wrong; answers
        to questions outside the snapshot are ignored.
        """
        selected = {}
        for answer in answers:
            # first answer per question wins
            selected.setdefault(answer.question_id, answer.selected_option)

        results: List[QuestionOutcome] = []
        for question in questions:
            user_answer = selected.get(question.id)
            results.append(
                QuestionOutcome(
                    question_id=question.id,
                    correct=user_answer == question.answer,
                    correct_answer=question.answer,
                    user_answer=user_answer,
                    question_stem=question.stem,
                    options=question.options,
                )
            )

        correct = sum(1 for r in results if r.correct)
        mastery = (correct / len(results)) * 100 if results else 0.0

        return CheckpointGrade(
            mastery_percent=mastery,
            passed=mastery >= pass_threshold,
            correct_count=correct,
            total_questions=len(results),
            results=results,
        )
