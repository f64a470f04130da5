"""Pydantic schemas for the marathon session API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from cms.models import InterviewRound
from marathon.progress import Phase
from marathon.state import Score, Session


class StartReq(BaseModel):
    company_id: str


class WarningReq(BaseModel):
    reason: str = "focus_lost"


class SubmitReq(BaseModel):
    score: Score
    feedback: str


class AptitudeSubmitReq(BaseModel):
    question_ids: List[str]
    answers: Dict[str, str] = Field(default_factory=dict)
    elapsed_seconds: int = Field(default=0, ge=0)


class AptitudeQuestionsResp(BaseModel):
    round_id: str
    duration_seconds: int
    cutoff: Optional[float] = None
    questions: List[Dict[str, object]] = Field(default_factory=list)


class SessionView(BaseModel):
    owner_id: str
    session: Optional[Session] = None
    phase: Phase
    current_round: Optional[InterviewRound] = None
    workflow_length: int = 0
    average_score: Optional[int] = None
    warnings_remaining: int
