"""Read-only views derived from a session and its workflow length."""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from .machine import WARNING_LIMIT
from .state import Score, Session


class Phase(str, Enum):
    NOT_STARTED = "not_started"
    ROUND_ACTIVE = "round_active"
    FEEDBACK_PENDING = "feedback_pending"
    FEEDBACK_VIEWED = "feedback_viewed"
    COMPLETED = "completed"
    TERMINATED = "terminated"


def round_half_up(value: float) -> int:
    """Round .5 upwards, the way the browser client rounds percentages."""

    return int(math.floor(value + 0.5))


def is_completed(session: Optional[Session], workflow_length: int) -> bool:
    """True once the round index has run off the end of the workflow."""

    return session is not None and session.current_round_index >= workflow_length


def is_last_round(session: Optional[Session], workflow_length: int) -> bool:
    return session is not None and session.current_round_index == workflow_length - 1


def phase(session: Optional[Session], workflow_length: int) -> Phase:
    """Map a session onto the screen the candidate should see.

    Termination outranks everything else, including completion.
    """

    if session is None:
        return Phase.NOT_STARTED
    if session.is_terminated:
        return Phase.TERMINATED
    if is_completed(session, workflow_length):
        return Phase.COMPLETED
    if not session.is_round_submitted:
        return Phase.ROUND_ACTIVE
    if not session.is_feedback_viewed:
        return Phase.FEEDBACK_PENDING
    return Phase.FEEDBACK_VIEWED


def average_score(session: Optional[Session]) -> Optional[int]:
    """Rounded mean of the recorded scores, ``None`` when nothing was scored."""

    if session is None or not session.scores:
        return None
    values = list(session.scores.values())
    return round_half_up(sum(values) / len(values))


def warnings_remaining(session: Optional[Session], limit: int = WARNING_LIMIT) -> int:
    if session is None:
        return limit
    return max(0, limit - session.warnings)


def round_outcome(score: Optional[Score], cutoff: Optional[float]) -> Optional[str]:
    """Informational pass/fail against a round cutoff; never enforced."""

    if score is None or cutoff is None:
        return None
    return "pass" if score >= cutoff else "fail"


__all__ = [
    "Phase",
    "average_score",
    "is_completed",
    "is_last_round",
    "phase",
    "round_half_up",
    "round_outcome",
    "warnings_remaining",
]
