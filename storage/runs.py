"""Per-owner record of what a running marathon was started against.

The workflow is copied here at start so CMS edits never reach a session that
is already under way. The aptitude questions served for the active round are
kept alongside it and are the only ones a submission is graded against.
"""
from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field, TypeAdapter

from cms.models import AptitudeQuestion, InterviewRound

from .sqlite import get_conn

_ROUNDS = TypeAdapter(List[InterviewRound])
_QUESTIONS = TypeAdapter(List[AptitudeQuestion])


class PinnedRun(BaseModel):
    owner_id: str
    company_id: str
    workflow: List[InterviewRound]
    served_round: Optional[int] = None
    served_questions: List[AptitudeQuestion] = Field(default_factory=list)

    def served_for(self, round_index: int) -> List[AptitudeQuestion]:
        return list(self.served_questions) if self.served_round == round_index else []


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def pin_run(owner_id: str, company_id: str, workflow: List[InterviewRound]) -> PinnedRun:
    """Store ``workflow`` for the owner's new run, dropping anything served before."""

    run = PinnedRun(owner_id=owner_id, company_id=company_id, workflow=workflow)
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO session_runs (owner_id, company_id, workflow, served_round, served_questions, updated_at)
               VALUES (?, ?, ?, NULL, NULL, ?)
               ON CONFLICT(owner_id) DO UPDATE SET
                 company_id = excluded.company_id,
                 workflow = excluded.workflow,
                 served_round = NULL,
                 served_questions = NULL,
                 updated_at = excluded.updated_at""",
            (owner_id, company_id, _ROUNDS.dump_json(run.workflow, by_alias=True).decode(), _now()),
        )
    return run


def load_run(owner_id: str) -> Optional[PinnedRun]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT company_id, workflow, served_round, served_questions FROM session_runs WHERE owner_id = ?",
            (owner_id,),
        ).fetchone()
    if row is None:
        return None
    company_id, workflow, served_round, served_questions = row
    return PinnedRun(
        owner_id=owner_id,
        company_id=company_id,
        workflow=_ROUNDS.validate_json(workflow),
        served_round=served_round,
        served_questions=_QUESTIONS.validate_json(served_questions) if served_questions else [],
    )


def record_served(owner_id: str, round_index: int, questions: List[AptitudeQuestion]) -> None:
    """Remember the questions handed out for ``round_index``; replaces an earlier draw."""

    payload = _QUESTIONS.dump_json(questions, by_alias=True).decode()
    with get_conn() as conn:
        conn.execute(
            "UPDATE session_runs SET served_round = ?, served_questions = ?, updated_at = ? WHERE owner_id = ?",
            (round_index, payload, _now(), owner_id),
        )


def delete_run(owner_id: str) -> bool:
    with get_conn() as conn:
        cur = conn.execute("DELETE FROM session_runs WHERE owner_id = ?", (owner_id,))
        return cur.rowcount > 0


__all__ = ["PinnedRun", "delete_run", "load_run", "pin_run", "record_served"]
