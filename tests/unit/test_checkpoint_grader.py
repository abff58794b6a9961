"""Unit tests for checkpoint time windows and grading."""

from datetime import datetime, timedelta, timezone

from lessoncore.engines.checkpoint import CheckpointGrader
from lessoncore.schemas.checkpoint import CheckpointAnswer


def _answer(question_id, option):
    return CheckpointAnswer(question_id=question_id, selected_option=option)


class TestTimeWindow:
    """Tests for checkpoint expiry."""

    def test_sum_of_timers_plus_buffer(self, make_question):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        questions = [make_question("q1", timer=20), make_question("q2", timer=15)]
        limit, expires_at = CheckpointGrader.time_window(questions, now)
        assert limit == 65
        assert expires_at == now + timedelta(seconds=65)

    def test_custom_buffer(self, make_question):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        limit, _ = CheckpointGrader.time_window([make_question("q1", timer=10)], now, buffer_seconds=0)
        assert limit == 10


class TestCheckpointGrader:
    """Tests for grading against the snapshot."""

    def test_all_correct_passes(self, question_pool):
        answers = [_answer(q.id, q.answer) for q in question_pool]
        grade = CheckpointGrader.grade(question_pool, answers)
        assert grade.mastery_percent == 100.0
        assert grade.passed is True
        assert grade.correct_count == grade.total_questions == len(question_pool)

    def test_one_wrong_fails_default_threshold(self, make_question):
        questions = [make_question(f"q{i}") for i in range(4)]
        answers = [_answer("q0", "b")] + [_answer(f"q{i}", "a") for i in range(1, 4)]
        grade = CheckpointGrader.grade(questions, answers)
        assert grade.mastery_percent == 75.0
        assert grade.passed is False
        assert grade.results[0].correct is False
        assert grade.results[0].correct_answer == "a"
        assert grade.results[0].user_answer == "b"

    def test_custom_threshold(self, make_question):
        questions = [make_question(f"q{i}") for i in range(4)]
        answers = [_answer(f"q{i}", "a") for i in range(3)]
        grade = CheckpointGrader.grade(questions, answers, pass_threshold=75.0)
        assert grade.passed is True

    def test_unanswered_question_is_wrong(self, make_question):
        grade = CheckpointGrader.grade([make_question("q1")], [])
        assert grade.mastery_percent == 0.0
        assert grade.results[0].user_answer is None

    def test_first_answer_per_question_wins(self, make_question):
        answers = [_answer("q1", "b"), _answer("q1", "a")]
        grade = CheckpointGrader.grade([make_question("q1")], answers)
        assert grade.correct_count == 0

    def test_unknown_questions_ignored(self, make_question):
        answers = [_answer("q1", "a"), _answer("elsewhere", "a")]
        grade = CheckpointGrader.grade([make_question("q1")], answers)
        assert grade.total_questions == 1
        assert grade.mastery_percent == 100.0

    def test_empty_snapshot(self):
        grade = CheckpointGrader.grade([], [])
        assert grade.mastery_percent == 0.0
        assert grade.passed is False
