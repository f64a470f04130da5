from __future__ import annotations  # Executor contract shared by every round type

from typing import Any, List, Optional, Protocol, Type

from pydantic import BaseModel, Field

from cms.models import InterviewRound, RoundType
from marathon.state import Score


class RoundContext(BaseModel):  # What an executor receives from the active round
    round_id: str
    type: RoundType
    duration_seconds: int
    cutoff: Optional[float] = None
    topics: List[str] = Field(default_factory=list)
    question_count: Optional[int] = None

    @classmethod
    def from_round(cls, round_: InterviewRound) -> "RoundContext":
        config = round_.config
        return cls(
            round_id=round_.id,
            type=round_.type,
            duration_seconds=round_.duration * 60,
            cutoff=round_.cutoff,
            topics=list(config.topics or []) if config else [],
            question_count=config.question_count if config else None,
        )


class RoundOutcome(BaseModel):  # The only thing the state machine learns about a round
    score: Score
    feedback: str


class RoundExecutor(Protocol):
    """Runs one round type and reports a score, or never reports at all."""

    round_type: RoundType
    submission_type: Type[BaseModel]

    def run(self, context: RoundContext, submission: Any) -> RoundOutcome: ...


class ReportedSubmission(BaseModel):  # Score computed entirely outside the service
    score: Score
    feedback: str


class ReportedExecutor:  # Resume, HR and GD rounds score themselves externally
    submission_type = ReportedSubmission

    def __init__(self, round_type: RoundType) -> None:
        self.round_type = round_type

    def run(self, context: RoundContext, submission: ReportedSubmission) -> RoundOutcome:
        return RoundOutcome(score=submission.score, feedback=submission.feedback)


def format_elapsed(seconds: int) -> str:
    """Format seconds as ``m:ss``."""

    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


__all__ = [
    "ReportedExecutor",
    "ReportedSubmission",
    "RoundContext",
    "RoundExecutor",
    "RoundOutcome",
    "format_elapsed",
]
