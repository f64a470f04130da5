"""Pure transition functions for the marathon session.

Every transition takes the current ``Optional[Session]`` and returns the next
one without mutating its input. Calls made while no session exists return
``None`` unchanged. Nothing here raises and nothing here looks at the
workflow: completion is decided by the caller comparing
``current_round_index`` with the workflow length.
"""
from __future__ import annotations

from typing import Optional

from .state import Score, Session

WARNING_LIMIT = 3


def start_session(company_id: str) -> Session:
    """Create a fresh session at round 0; replaces any previous one."""

    return Session(company_id=company_id)


def add_warning(session: Optional[Session], limit: int = WARNING_LIMIT) -> Optional[Session]:
    """Record one integrity violation, terminating at ``limit`` warnings.

    Not idempotent: debouncing repeated proctoring signals is the caller's job.
    """

    if session is None:
        return None
    warnings = session.warnings + 1
    return session.model_copy(
        update={
            "warnings": warnings,
            "is_terminated": session.is_terminated or warnings >= limit,
        }
    )


def submit_round(session: Optional[Session], score: Score, feedback: str) -> Optional[Session]:
    """Store the executor's report for the current round.

    The score is kept as given, out-of-range values included. A second call
    for the same round overwrites the first.
    """

    if session is None:
        return None
    scores = dict(session.scores)
    scores[session.current_round_index] = score
    return session.model_copy(
        update={
            "is_round_submitted": True,
            "is_feedback_viewed": False,
            "round_feedback": feedback,
            "scores": scores,
        }
    )


def view_feedback(session: Optional[Session]) -> Optional[Session]:
    if session is None:
        return None
    return session.model_copy(update={"is_feedback_viewed": True})


def next_round(session: Optional[Session]) -> Optional[Session]:
    """Advance one round and clear the per-round flags.

    Advancing past the last round is allowed here.
    """

    if session is None:
        return None
    return session.model_copy(
        update={
            "current_round_index": session.current_round_index + 1,
            "is_round_submitted": False,
            "is_feedback_viewed": False,
            "round_feedback": None,
        }
    )


def reset_session(session: Optional[Session] = None) -> Optional[Session]:
    """Discard the session, whether the candidate quit or finished."""

    return None


__all__ = [
    "WARNING_LIMIT",
    "add_warning",
    "next_round",
    "reset_session",
    "start_session",
    "submit_round",
    "view_feedback",
]
