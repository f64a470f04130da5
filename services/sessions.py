"""Load-transition-save orchestration around the marathon state machine."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from cms.models import AptitudeQuestion, InterviewRound, RoundType
from cms.store import CmsStore
from config.settings import settings
from marathon import machine
from marathon.progress import is_completed, phase
from marathon.state import Score, Session
from observability.logger import log_event
from rounds import (
    AptitudeSubmission,
    ReportedSubmission,
    RoundContext,
    RoundOutcome,
    executor_for,
    select_questions,
)
from storage.proctoring import insert_proctor_warning
from storage.runs import delete_run, load_run, pin_run, record_served
from storage.scores import insert_round_score
from storage.snapshots import load_snapshot, store_snapshot


class NoActiveSession(LookupError):
    """Raised when an operation needs a session and the owner has none."""


class SessionLocked(RuntimeError):
    """Raised when the session is not in a state that allows the requested step."""


class RoundMismatch(RuntimeError):
    """Raised when a submission does not belong to the active round."""


class InvalidSubmission(ValueError):
    """Raised when a round submission references material that was never served."""


def active_round(session: Optional[Session], workflow: List[InterviewRound]) -> Optional[InterviewRound]:
    if session is None or session.current_round_index >= len(workflow):
        return None
    return workflow[session.current_round_index]


class MarathonService:
    """Applies state-machine transitions to an owner's stored snapshot.

    The transitions themselves stay permissive. This layer only moves a
    session forward the way the browser client allows: no progress once
    terminated or completed, and ``advance`` only after the round was submitted
    and its feedback viewed. Rounds are read from the workflow pinned at start.
    """

    def __init__(self, cms: CmsStore, *, warning_limit: Optional[int] = None) -> None:
        self._cms = cms
        self._warning_limit = warning_limit or settings.WARNING_LIMIT

    @property
    def cms(self) -> CmsStore:
        return self._cms

    @property
    def warning_limit(self) -> int:
        return self._warning_limit

    def current(self, owner_id: str) -> Optional[Session]:
        return load_snapshot(owner_id)

    def workflow(self, owner_id: str, session: Optional[Session]) -> List[InterviewRound]:
        """Workflow pinned when the owner's session started; empty without one."""

        if session is None:
            return []
        run = load_run(owner_id)
        if run is None or run.company_id != session.company_id:
            return []
        return list(run.workflow)

    def _require(self, owner_id: str) -> Session:
        session = load_snapshot(owner_id)
        if session is None:
            raise NoActiveSession(owner_id)
        return session

    def _require_progressable(self, owner_id: str) -> Tuple[Session, List[InterviewRound]]:
        session = self._require(owner_id)
        workflow = self.workflow(owner_id, session)
        if session.is_terminated:
            raise SessionLocked("session terminated")
        if is_completed(session, len(workflow)):
            raise SessionLocked("session completed")
        return session, workflow

    @staticmethod
    def _expect_round(session: Session, workflow: List[InterviewRound], round_type: RoundType) -> InterviewRound:
        round_ = workflow[session.current_round_index]
        if round_.type != round_type:
            raise RoundMismatch(f"active round is {round_.type}, not {round_type}")
        return round_

    def start(self, owner_id: str, company_id: str) -> Session:
        """Start (or restart) a marathon; raises ``CompanyNotFound``."""

        workflow = self._cms.workflow_for(company_id)
        session = machine.start_session(company_id)
        pin_run(owner_id, company_id, workflow)
        store_snapshot(owner_id, session)
        log_event("session_started", owner_id, company_id=company_id, rounds=len(workflow))
        return session

    def warn(self, owner_id: str, reason: str = "focus_lost") -> Optional[Session]:
        """Count a proctoring violation; a no-op when there is no session."""

        before = load_snapshot(owner_id)
        session = machine.add_warning(before, limit=self._warning_limit)
        if session is None:
            return None
        store_snapshot(owner_id, session)
        insert_proctor_warning(
            owner_id=owner_id,
            company_id=session.company_id,
            round_index=session.current_round_index,
            reason=reason,
            warning_count=session.warnings,
            terminated=session.is_terminated,
        )
        log_event(
            "warning_added",
            owner_id,
            company_id=session.company_id,
            round_index=session.current_round_index,
            warnings=session.warnings,
            outcome="terminated" if session.is_terminated else "warned",
        )
        if session.is_terminated and not before.is_terminated:
            log_event("session_terminated", owner_id, company_id=session.company_id, warnings=session.warnings)
        return session

    def submit(self, owner_id: str, score: Score, feedback: str) -> Session:
        """Record a score produced outside the service (resume, HR, GD rounds)."""

        return self.run_round(owner_id, ReportedSubmission(score=score, feedback=feedback))

    def run_round(self, owner_id: str, submission: Any) -> Session:
        """Run the active round's executor on ``submission`` and record its outcome."""

        session, workflow = self._require_progressable(owner_id)
        return self._run(owner_id, session, workflow, submission)

    def _run(self, owner_id: str, session: Session, workflow: List[InterviewRound], submission: Any) -> Session:
        round_ = workflow[session.current_round_index]
        executor = executor_for(round_.type)
        if not isinstance(submission, executor.submission_type):
            raise RoundMismatch(f"active round is {round_.type}")
        outcome = executor.run(RoundContext.from_round(round_), submission)
        return self._record(owner_id, session, round_, outcome)

    def serve_aptitude(self, owner_id: str) -> Tuple[InterviewRound, RoundContext, List[AptitudeQuestion]]:
        """Draw the active aptitude round's questions and remember them for grading."""

        session, workflow = self._require_progressable(owner_id)
        round_ = self._expect_round(session, workflow, "aptitude")
        context = RoundContext.from_round(round_)
        questions = select_questions(self._cms.aptitude_bank(), context)
        record_served(owner_id, session.current_round_index, questions)
        return round_, context, questions

    def submit_aptitude(
        self, owner_id: str, question_ids: Sequence[str], answers: Dict[str, str], elapsed_seconds: int
    ) -> Session:
        """Grade the served aptitude questions; every served question counts."""

        session, workflow = self._require_progressable(owner_id)
        self._expect_round(session, workflow, "aptitude")
        run = load_run(owner_id)
        served = run.served_for(session.current_round_index) if run else []
        if not served:
            raise RoundMismatch("aptitude questions not served")

        served_ids = {question.id for question in served}
        unknown = [qid for qid in dict.fromkeys(question_ids) if qid not in served_ids]
        if unknown:
            raise InvalidSubmission(f"questions not served: {', '.join(unknown)}")
        submission = AptitudeSubmission(
            questions=served,
            answers={qid: answer for qid, answer in answers.items() if qid in served_ids},
            elapsed_seconds=elapsed_seconds,
        )
        return self._run(owner_id, session, workflow, submission)

    def _record(self, owner_id: str, session: Session, round_: InterviewRound, outcome: RoundOutcome) -> Session:
        updated = machine.submit_round(session, outcome.score, outcome.feedback)
        store_snapshot(owner_id, updated)
        insert_round_score(
            owner_id=owner_id,
            company_id=updated.company_id,
            round_index=updated.current_round_index,
            round_type=round_.type,
            score=outcome.score,
            feedback=outcome.feedback,
        )
        log_event(
            "round_submitted",
            owner_id,
            company_id=updated.company_id,
            round_index=updated.current_round_index,
            round_type=round_.type,
            score=outcome.score,
        )
        return updated

    def view_feedback(self, owner_id: str) -> Optional[Session]:
        session = machine.view_feedback(load_snapshot(owner_id))
        if session is not None:
            store_snapshot(owner_id, session)
        return session

    def advance(self, owner_id: str) -> Session:
        session, workflow = self._require_progressable(owner_id)
        if not session.is_round_submitted:
            raise SessionLocked("round not submitted")
        if not session.is_feedback_viewed:
            raise SessionLocked("feedback not viewed")
        updated = machine.next_round(session)
        store_snapshot(owner_id, updated)
        log_event(
            "round_advanced",
            owner_id,
            company_id=updated.company_id,
            round_index=updated.current_round_index,
            phase=phase(updated, len(workflow)).value,
        )
        return updated

    def reset(self, owner_id: str) -> None:
        before = load_snapshot(owner_id)
        store_snapshot(owner_id, machine.reset_session(before))
        delete_run(owner_id)
        if before is not None:
            log_event("session_reset", owner_id, company_id=before.company_id, warnings=before.warnings)


__all__ = [
    "InvalidSubmission",
    "MarathonService",
    "NoActiveSession",
    "RoundMismatch",
    "SessionLocked",
    "active_round",
]
