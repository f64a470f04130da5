"""FastAPI routes for the admin CMS: companies, workflows and question banks."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from cms.models import (
    AptitudeQuestion,
    CodingQuestion,
    CodingQuestionDraft,
    Company,
    CompanyDraft,
    CompanyNotFound,
    CompanyPatch,
)
from cms.store import CmsStore
from config.settings import settings


router = APIRouter(prefix="/api/cms")


def get_cms() -> CmsStore:
    return CmsStore(Path(settings.DB_PATH))


@router.get("/companies", response_model=List[Company])
def list_companies(cms: CmsStore = Depends(get_cms)) -> List[Company]:
    return cms.list_companies()


@router.post("/companies", response_model=Company, status_code=201)
def add_company(draft: CompanyDraft, cms: CmsStore = Depends(get_cms)) -> Company:
    return cms.add_company(draft)


@router.get("/companies/{company_id}", response_model=Company)
def get_company(company_id: str, cms: CmsStore = Depends(get_cms)) -> Company:
    company = cms.get_company(company_id)
    if company is None:
        raise HTTPException(status_code=404, detail=f"company not found: {company_id}")
    return company


@router.patch("/companies/{company_id}", response_model=Company)
def update_company(company_id: str, patch: CompanyPatch, cms: CmsStore = Depends(get_cms)) -> Company:
    try:
        return cms.update_company(company_id, patch)
    except CompanyNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/companies/{company_id}", status_code=204)
def delete_company(company_id: str, cms: CmsStore = Depends(get_cms)) -> None:
    if not cms.delete_company(company_id):
        raise HTTPException(status_code=404, detail=f"company not found: {company_id}")


@router.get("/aptitude-bank", response_model=List[AptitudeQuestion])
def aptitude_bank(cms: CmsStore = Depends(get_cms)) -> List[AptitudeQuestion]:
    return cms.aptitude_bank()


@router.put("/aptitude-bank", response_model=List[AptitudeQuestion])
def replace_aptitude_bank(
    questions: List[AptitudeQuestion], cms: CmsStore = Depends(get_cms)
) -> List[AptitudeQuestion]:
    cms.set_aptitude_bank(questions)
    return cms.aptitude_bank()


@router.get("/coding-questions", response_model=List[CodingQuestion])
def list_coding_questions(
    company_id: Optional[str] = None, cms: CmsStore = Depends(get_cms)
) -> List[CodingQuestion]:
    return cms.list_coding_questions(company_id)


@router.post("/coding-questions", response_model=CodingQuestion, status_code=201)
def add_coding_question(draft: CodingQuestionDraft, cms: CmsStore = Depends(get_cms)) -> CodingQuestion:
    try:
        return cms.add_coding_question(draft)
    except CompanyNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/coding-questions/{question_id}", status_code=204)
def delete_coding_question(question_id: str, cms: CmsStore = Depends(get_cms)) -> None:
    if not cms.delete_coding_question(question_id):
        raise HTTPException(status_code=404, detail=f"coding question not found: {question_id}")
