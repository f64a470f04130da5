from __future__ import annotations  # CMS-authored workflow and question bank models

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RoundType = Literal["resume", "aptitude", "coding", "hr", "gd"]


class CmsModel(BaseModel):  # camelCase on the wire, snake_case in code
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoundConfig(CmsModel):  # Type-specific round parameters
    topics: Optional[List[str]] = None
    question_count: Optional[int] = Field(default=None, ge=1)


class InterviewRound(CmsModel):  # One stage of a company workflow
    id: str
    type: RoundType
    duration: int = Field(ge=0)  # minutes
    cutoff: Optional[float] = None  # percentage
    config: Optional[RoundConfig] = None


class CompanyDraft(CmsModel):  # Company payload before an id is assigned
    name: str
    logo: str = ""
    description: str = ""
    target_role: str = ""
    workflow: List[InterviewRound] = Field(default_factory=list)


class Company(CompanyDraft):  # Stored company entry
    id: str


class CompanyPatch(CmsModel):  # Partial company update
    name: Optional[str] = None
    logo: Optional[str] = None
    description: Optional[str] = None
    target_role: Optional[str] = None
    workflow: Optional[List[InterviewRound]] = None


class AptitudeQuestion(CmsModel):  # Global aptitude bank entry
    id: str
    qn: str = ""
    question: str
    options: List[str]
    answer: str
    topic: str


class CodingQuestionDraft(CmsModel):
    company_id: str
    title: str
    problem_statement: str
    boilerplate: str = ""


class CodingQuestion(CodingQuestionDraft):  # Company-scoped coding problem
    id: str


class CompanyNotFound(LookupError):  # Raised when a company id does not resolve
    def __init__(self, company_id: str) -> None:
        super().__init__(f"company not found: {company_id}")
        self.company_id = company_id


__all__ = [
    "AptitudeQuestion",
    "CodingQuestion",
    "CodingQuestionDraft",
    "Company",
    "CompanyDraft",
    "CompanyNotFound",
    "CompanyPatch",
    "InterviewRound",
    "RoundConfig",
    "RoundType",
]
