"""Coding round: combine the AI review with the test-case results."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from marathon.state import Score

from .base import RoundContext, RoundOutcome

PARTIAL_PASS_CAP = 50


class CodingSubmission(BaseModel):
    ai_score: Score
    feedback: str
    complexity: Optional[str] = None
    passed_tests: int = Field(ge=0)
    total_tests: int = Field(ge=0)


def final_score(ai_score: Score, passed_tests: int, total_tests: int) -> Score:
    """Penalize the AI score by test results.

    All tests passing keeps the AI score, a partial pass caps it at 50 and no
    passing test scores 0.
    """

    if passed_tests <= 0:
        return 0
    if passed_tests >= total_tests:
        return ai_score
    return min(ai_score, PARTIAL_PASS_CAP)


def format_feedback(feedback: str, complexity: Optional[str]) -> str:
    if not complexity:
        return feedback
    return f"{feedback}\n\nComplexity Analysis: {complexity}"


class CodingExecutor:
    round_type = "coding"
    submission_type = CodingSubmission

    def run(self, context: RoundContext, submission: CodingSubmission) -> RoundOutcome:
        score = final_score(submission.ai_score, submission.passed_tests, submission.total_tests)
        return RoundOutcome(score=score, feedback=format_feedback(submission.feedback, submission.complexity))


__all__ = ["CodingExecutor", "CodingSubmission", "final_score", "format_feedback"]
