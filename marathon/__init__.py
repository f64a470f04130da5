"""Interview-session progression state machine."""
from .machine import (
    WARNING_LIMIT,
    add_warning,
    next_round,
    reset_session,
    start_session,
    submit_round,
    view_feedback,
)
from .progress import (
    Phase,
    average_score,
    is_completed,
    is_last_round,
    phase,
    round_half_up,
    round_outcome,
    warnings_remaining,
)
from .state import Score, Session

__all__ = [
    "WARNING_LIMIT",
    "Phase",
    "Score",
    "Session",
    "add_warning",
    "average_score",
    "is_completed",
    "is_last_round",
    "next_round",
    "phase",
    "reset_session",
    "round_half_up",
    "round_outcome",
    "start_session",
    "submit_round",
    "view_feedback",
    "warnings_remaining",
]
