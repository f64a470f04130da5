"""FastAPI routes for marathon session control."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from api.schemas import AptitudeQuestionsResp, AptitudeSubmitReq, SessionView, StartReq, SubmitReq, WarningReq
from cms.models import CompanyNotFound
from cms.store import CmsStore
from config.settings import settings
from marathon.progress import average_score, phase, warnings_remaining
from marathon.state import Session
from reports import generate_marathon_report_pdf
from rounds import CodingSubmission, strip_answers
from services.sessions import (
    InvalidSubmission,
    MarathonService,
    NoActiveSession,
    RoundMismatch,
    SessionLocked,
    active_round,
)


router = APIRouter(prefix="/api/marathon")


def get_service() -> MarathonService:
    return MarathonService(CmsStore(Path(settings.DB_PATH)))


def _view(service: MarathonService, owner_id: str, session: Optional[Session]) -> SessionView:
    workflow = service.workflow(owner_id, session)
    return SessionView(
        owner_id=owner_id,
        session=session,
        phase=phase(session, len(workflow)),
        current_round=active_round(session, workflow),
        workflow_length=len(workflow),
        average_score=average_score(session),
        warnings_remaining=warnings_remaining(session, service.warning_limit),
    )


@contextmanager
def _guarded() -> Iterator[None]:  # Service refusals as HTTP errors
    try:
        yield
    except NoActiveSession as exc:
        raise HTTPException(status_code=404, detail="session not found") from exc
    except (SessionLocked, RoundMismatch) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InvalidSubmission as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/{owner_id}", response_model=SessionView)
def get_session(owner_id: str, service: MarathonService = Depends(get_service)) -> SessionView:
    return _view(service, owner_id, service.current(owner_id))


@router.post("/{owner_id}/start", response_model=SessionView)
def start(owner_id: str, req: StartReq, service: MarathonService = Depends(get_service)) -> SessionView:
    try:
        session = service.start(owner_id, req.company_id)
    except CompanyNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _view(service, owner_id, session)


@router.post("/{owner_id}/warning", response_model=SessionView)
def warning(owner_id: str, req: WarningReq, service: MarathonService = Depends(get_service)) -> SessionView:
    return _view(service, owner_id, service.warn(owner_id, req.reason))


@router.post("/{owner_id}/submit", response_model=SessionView)
def submit(owner_id: str, req: SubmitReq, service: MarathonService = Depends(get_service)) -> SessionView:
    with _guarded():
        session = service.submit(owner_id, req.score, req.feedback)
    return _view(service, owner_id, session)


@router.post("/{owner_id}/feedback/viewed", response_model=SessionView)
def feedback_viewed(owner_id: str, service: MarathonService = Depends(get_service)) -> SessionView:
    return _view(service, owner_id, service.view_feedback(owner_id))


@router.post("/{owner_id}/next", response_model=SessionView)
def next_round(owner_id: str, service: MarathonService = Depends(get_service)) -> SessionView:
    with _guarded():
        session = service.advance(owner_id)
    return _view(service, owner_id, session)


@router.post("/{owner_id}/reset", response_model=SessionView)
def reset(owner_id: str, service: MarathonService = Depends(get_service)) -> SessionView:
    service.reset(owner_id)
    return _view(service, owner_id, None)


@router.post("/{owner_id}/rounds/aptitude/questions", response_model=AptitudeQuestionsResp)
def aptitude_questions(owner_id: str, service: MarathonService = Depends(get_service)) -> AptitudeQuestionsResp:
    with _guarded():
        round_, context, questions = service.serve_aptitude(owner_id)
    return AptitudeQuestionsResp(
        round_id=round_.id,
        duration_seconds=context.duration_seconds,
        cutoff=round_.cutoff,
        questions=strip_answers(questions),
    )


@router.post("/{owner_id}/rounds/aptitude/submit", response_model=SessionView)
def aptitude_submit(
    owner_id: str, req: AptitudeSubmitReq, service: MarathonService = Depends(get_service)
) -> SessionView:
    with _guarded():
        session = service.submit_aptitude(owner_id, req.question_ids, req.answers, req.elapsed_seconds)
    return _view(service, owner_id, session)


@router.post("/{owner_id}/rounds/coding/submit", response_model=SessionView)
def coding_submit(
    owner_id: str, req: CodingSubmission, service: MarathonService = Depends(get_service)
) -> SessionView:
    with _guarded():
        session = service.run_round(owner_id, req)
    return _view(service, owner_id, session)


@router.get("/{owner_id}/report.pdf")
def report(owner_id: str, service: MarathonService = Depends(get_service)) -> Response:
    session = service.current(owner_id)
    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    company = service.cms.get_company(session.company_id)
    if company is None:
        raise HTTPException(status_code=404, detail=f"company not found: {session.company_id}")
    played = company.model_copy(update={"workflow": service.workflow(owner_id, session)})
    pdf_bytes = generate_marathon_report_pdf(played, session)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="marathon-{owner_id}.pdf"'},
    )
