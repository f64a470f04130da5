"""Company workflow registry and question banks."""
from .catalog import load_catalog, seed_catalog
from .models import (
    AptitudeQuestion,
    CodingQuestion,
    CodingQuestionDraft,
    Company,
    CompanyDraft,
    CompanyNotFound,
    CompanyPatch,
    InterviewRound,
    RoundConfig,
    RoundType,
)
from .store import CmsStore

__all__ = [
    "AptitudeQuestion",
    "CmsStore",
    "CodingQuestion",
    "CodingQuestionDraft",
    "Company",
    "CompanyDraft",
    "CompanyNotFound",
    "CompanyPatch",
    "InterviewRound",
    "RoundConfig",
    "RoundType",
    "load_catalog",
    "seed_catalog",
]
