"""
Checkpoint questions, pools, spawn decisions and grading outcomes.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionOption(BaseModel):
    """Single option for a multiple choice question."""

    id: str
    text: str


class QuestionVariation(BaseModel):
    """Alternate phrasing of a question testing the same concept."""

    stem: str
    options: List[QuestionOption]
    answer: str  # option id


class CheckpointQuestion(BaseModel):
    """A timed multiple choice question in a checkpoint pool."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: Literal["mcq"] = "mcq"
    stem: str
    options: List[QuestionOption]
    answer: str  # option id
    timer_seconds: int = Field(default=20, alias="timerSeconds", gt=0)
    variations: List[QuestionVariation] = []


class QuestionPool(BaseModel):
    """Candidate questions for a lesson's checkpoints."""

    questions: List[CheckpointQuestion] = []


def validate_question_pool(pool: QuestionPool) -> List[str]:
    """Authoring checks for a pool: unique question ids, answers that name an option."""
    errors: List[str] = []
    seen = set()
    for question in pool.questions:
        if question.id in seen:
            errors.append(f"Duplicate question id: {question.id}")
        seen.add(question.id)

        phrasings = [(question.options, question.answer)]
        phrasings.extend((v.options, v.answer) for v in question.variations)
        for options, answer in phrasings:
            if answer not in {o.id for o in options}:
                errors.append(f"Question {question.id} answer {answer} is not one of its options")
    return errors


class CheckpointDecision(BaseModel):
    """Whether to interject a checkpoint right now."""

    model_config = ConfigDict(frozen=True)

    should_spawn: bool
    probability: float = Field(ge=0, le=1)
    reason: str  # diagnostic only


class CheckpointAnswer(BaseModel):
    """A submitted answer to one checkpoint question."""

    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(alias="questionId")
    selected_option: str = Field(alias="selectedOption")
    timestamp: Optional[datetime] = None


class QuestionOutcome(BaseModel):
    """Grading outcome for one snapshot question."""

    question_id: str
    correct: bool
    correct_answer: str
    user_answer: Optional[str] = None
    question_stem: str
    options: List[QuestionOption]


class CheckpointGrade(BaseModel):
    """Aggregate outcome of a completed checkpoint."""

    mastery_percent: float
    passed: bool
    correct_count: int
    total_questions: int
    results: List[QuestionOutcome]


class CheckpointSpawnRequest(BaseModel):
    """Body for POST /checkpoints/spawn."""

    model_config = ConfigDict(populate_by_name=True)

    module_id: uuid.UUID = Field(alias="moduleId")
    lesson_id: uuid.UUID = Field(alias="lessonId")


class PresentedQuestion(BaseModel):
    """A snapshot question without its answer."""

    id: str
    type: Literal["mcq"] = "mcq"
    stem: str
    options: List[QuestionOption]
    timer_seconds: int


class CheckpointInstanceResponse(BaseModel):
    """A spawned checkpoint as presented to the learner."""

    id: uuid.UUID
    module_id: uuid.UUID
    lesson_id: Optional[uuid.UUID] = None
    questions: List[PresentedQuestion]
    current_index: int
    status: str
    created_at: datetime
    expires_at: datetime
    time_limit_seconds: int


class CheckpointSpawnResponse(BaseModel):
    """Spawn outcome; ``checkpoint`` is set only when one was created."""

    spawned: bool
    probability: Optional[float] = None
    reason: str
    checkpoint: Optional[CheckpointInstanceResponse] = None


class CheckpointCompleteRequest(BaseModel):
    """Body for POST /checkpoints/complete."""

    model_config = ConfigDict(populate_by_name=True)

    checkpoint_id: uuid.UUID = Field(alias="checkpointId")
    answers: List[CheckpointAnswer]
