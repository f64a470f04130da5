"""YAML seed catalog for an empty CMS store."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict

import yaml

from .models import AptitudeQuestion, CodingQuestionDraft, CompanyDraft
from .store import CmsStore

logger = logging.getLogger(__name__)


def load_catalog(path: str) -> Dict[str, Any]:
    """Read the catalog file; a missing file yields an empty catalog."""

    if not os.path.exists(path):
        logger.warning("CMS catalog not found at %s", path)
        return {}
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def seed_catalog(store: CmsStore, path: str) -> bool:
    """Populate companies and banks when the store holds no companies yet.

    Returns ``True`` when seed data was written.
    """

    if store.list_companies():
        return False
    catalog = load_catalog(path)
    if not catalog:
        return False

    for entry in catalog.get("companies", []):
        data = dict(entry)
        company_id = str(data.pop("id")) if "id" in data else None
        store.add_company(CompanyDraft.model_validate(data), company_id=company_id)

    for entry in catalog.get("coding_bank", []):
        data = dict(entry)
        question_id = str(data.pop("id")) if "id" in data else None
        store.add_coding_question(CodingQuestionDraft.model_validate(data), question_id=question_id)

    if not store.aptitude_bank():
        store.set_aptitude_bank(
            AptitudeQuestion.model_validate(item) for item in catalog.get("aptitude_bank", [])
        )

    logger.info("Seeded CMS store from %s", path)
    return True


__all__ = ["load_catalog", "seed_catalog"]
