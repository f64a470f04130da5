"""Aptitude round: question sampling and grading."""
from __future__ import annotations

import random
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from cms.models import AptitudeQuestion
from config.settings import settings
from marathon.progress import round_half_up

from .base import RoundContext, RoundOutcome, format_elapsed
from .feedback import generate_round_feedback


class AptitudeSubmission(BaseModel):
    questions: List[AptitudeQuestion]
    answers: Dict[str, str] = Field(default_factory=dict)  # question id -> chosen option
    elapsed_seconds: int = Field(default=0, ge=0)


def select_questions(
    bank: Sequence[AptitudeQuestion],
    context: RoundContext,
    rng: Optional[random.Random] = None,
) -> List[AptitudeQuestion]:
    """Sample the round's questions from ``bank``.

    Questions are filtered to the round topics; when nothing matches the whole
    bank is used instead.
    """

    rng = rng or random.Random()
    pool = list(bank)
    if context.topics:
        filtered = [question for question in pool if question.topic in context.topics]
        pool = filtered or pool
    rng.shuffle(pool)
    count = context.question_count or settings.APTITUDE_DEFAULT_COUNT
    return pool[:count]


def grade(questions: Sequence[AptitudeQuestion], answers: Dict[str, str]) -> int:
    """Percentage of correctly answered questions, rounded half up."""

    if not questions:
        return 0
    correct = sum(1 for question in questions if answers.get(question.id) == question.answer)
    return round_half_up(correct / len(questions) * 100)


def strip_answers(questions: Sequence[AptitudeQuestion]) -> List[Dict[str, object]]:  # Safe to send to the candidate
    return [question.model_dump(by_alias=True, exclude={"answer"}) for question in questions]


class AptitudeExecutor:
    round_type = "aptitude"
    submission_type = AptitudeSubmission

    def __init__(self, feedback: Callable[[str, Dict[str, object]], str] = generate_round_feedback) -> None:
        self._feedback = feedback

    def run(self, context: RoundContext, submission: AptitudeSubmission) -> RoundOutcome:
        questions = submission.questions
        correct = sum(1 for question in questions if submission.answers.get(question.id) == question.answer)
        score = grade(questions, submission.answers)
        topics: List[str] = []
        for question in questions:
            if question.topic not in topics:
                topics.append(question.topic)
        performance = {
            "totalQuestions": len(questions),
            "correctAnswers": correct,
            "score": score,
            "timeTaken": format_elapsed(submission.elapsed_seconds),
            "topics": topics,
        }
        return RoundOutcome(score=score, feedback=self._feedback("Aptitude Test", performance))


__all__ = ["AptitudeExecutor", "AptitudeSubmission", "grade", "select_questions", "strip_answers"]
