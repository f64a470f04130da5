"""Round executors reporting (score, feedback) back to the session."""
from typing import Dict

from cms.models import RoundType

from .aptitude import AptitudeExecutor, AptitudeSubmission, grade, select_questions, strip_answers
from .base import ReportedExecutor, ReportedSubmission, RoundContext, RoundExecutor, RoundOutcome
from .coding import CodingExecutor, CodingSubmission, final_score
from .feedback import bind_gateway_feedback, generate_round_feedback

EXECUTORS: Dict[RoundType, RoundExecutor] = {
    "resume": ReportedExecutor("resume"),
    "aptitude": AptitudeExecutor(),
    "coding": CodingExecutor(),
    "hr": ReportedExecutor("hr"),
    "gd": ReportedExecutor("gd"),
}


def executor_for(round_type: RoundType) -> RoundExecutor:
    return EXECUTORS[round_type]


__all__ = [
    "EXECUTORS",
    "AptitudeExecutor",
    "AptitudeSubmission",
    "CodingExecutor",
    "CodingSubmission",
    "ReportedExecutor",
    "ReportedSubmission",
    "RoundContext",
    "RoundExecutor",
    "RoundOutcome",
    "bind_gateway_feedback",
    "executor_for",
    "final_score",
    "generate_round_feedback",
    "grade",
    "select_questions",
    "strip_answers",
]
