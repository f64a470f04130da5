from __future__ import annotations  # SQLite-backed CMS registry for companies and question banks

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional
from uuid import uuid4

from .models import (
    AptitudeQuestion,
    CodingQuestion,
    CodingQuestionDraft,
    Company,
    CompanyDraft,
    CompanyNotFound,
    CompanyPatch,
    InterviewRound,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class CmsStore:  # Companies, workflows and question banks
    def __init__(self, path: Path) -> None:  # Initialize store and schema
        self._path = path
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:  # Create SQLite connection
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _ensure_schema(self) -> None:  # Ensure CMS tables exist
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cms_companies (
                    company_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    logo TEXT NOT NULL,
                    description TEXT NOT NULL,
                    target_role TEXT NOT NULL,
                    workflow_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cms_aptitude_questions (
                    question_id TEXT PRIMARY KEY,
                    position INTEGER NOT NULL,
                    topic TEXT NOT NULL,
                    payload_json TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cms_coding_questions (
                    question_id TEXT PRIMARY KEY,
                    company_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    problem_statement TEXT NOT NULL,
                    boilerplate TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(company_id) REFERENCES cms_companies(company_id) ON DELETE CASCADE
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Companies
    # ------------------------------------------------------------------
    @staticmethod
    def _company_from_row(row: sqlite3.Row) -> Company:
        workflow = [InterviewRound.model_validate(item) for item in json.loads(row["workflow_json"])]
        return Company(
            id=row["company_id"],
            name=row["name"],
            logo=row["logo"],
            description=row["description"],
            target_role=row["target_role"],
            workflow=workflow,
        )

    @staticmethod
    def _workflow_json(workflow: Iterable[InterviewRound]) -> str:
        return json.dumps([item.model_dump(by_alias=True, exclude_none=True) for item in workflow])

    def list_companies(self) -> List[Company]:  # Companies in creation order
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT company_id, name, logo, description, target_role, workflow_json
                FROM cms_companies
                ORDER BY rowid
                """
            ).fetchall()
            return [self._company_from_row(row) for row in rows]
        finally:
            conn.close()

    def get_company(self, company_id: str) -> Optional[Company]:
        conn = self._connect()
        try:
            row = conn.execute(
                """
                SELECT company_id, name, logo, description, target_role, workflow_json
                FROM cms_companies
                WHERE company_id = ?
                """,
                (company_id,),
            ).fetchone()
            return self._company_from_row(row) if row else None
        finally:
            conn.close()

    def workflow_for(self, company_id: str) -> List[InterviewRound]:
        """Resolve the ordered rounds for ``company_id``.

        Raises:
            CompanyNotFound: If the company is unknown or has no rounds.
        """

        company = self.get_company(company_id)
        if company is None or not company.workflow:
            raise CompanyNotFound(company_id)
        return list(company.workflow)

    def add_company(self, draft: CompanyDraft, *, company_id: Optional[str] = None) -> Company:
        company = Company(id=company_id or uuid4().hex, **draft.model_dump())
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO cms_companies (company_id, name, logo, description, target_role, workflow_json, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    company.id,
                    company.name,
                    company.logo,
                    company.description,
                    company.target_role,
                    self._workflow_json(company.workflow),
                    _now(),
                ),
            )
            conn.commit()
            return company
        finally:
            conn.close()

    def update_company(self, company_id: str, patch: CompanyPatch) -> Company:
        """Apply the set fields of ``patch``; raises ``CompanyNotFound``."""

        current = self.get_company(company_id)
        if current is None:
            raise CompanyNotFound(company_id)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        updated = Company.model_validate({**current.model_dump(), **changes})
        conn = self._connect()
        try:
            conn.execute(
                """
                UPDATE cms_companies
                SET name = ?, logo = ?, description = ?, target_role = ?, workflow_json = ?
                WHERE company_id = ?
                """,
                (
                    updated.name,
                    updated.logo,
                    updated.description,
                    updated.target_role,
                    self._workflow_json(updated.workflow),
                    company_id,
                ),
            )
            conn.commit()
            return updated
        finally:
            conn.close()

    def delete_company(self, company_id: str) -> bool:  # Coding questions cascade
        conn = self._connect()
        try:
            cur = conn.execute("DELETE FROM cms_companies WHERE company_id = ?", (company_id,))
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Aptitude bank
    # ------------------------------------------------------------------
    def aptitude_bank(self) -> List[AptitudeQuestion]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT payload_json FROM cms_aptitude_questions ORDER BY position"
            ).fetchall()
            return [AptitudeQuestion.model_validate_json(row["payload_json"]) for row in rows]
        finally:
            conn.close()

    def set_aptitude_bank(self, questions: Iterable[AptitudeQuestion]) -> int:
        """Replace the whole bank and return the number of stored questions."""

        conn = self._connect()
        try:
            conn.execute("DELETE FROM cms_aptitude_questions")
            count = 0
            for position, question in enumerate(questions):
                conn.execute(
                    """
                    INSERT OR REPLACE INTO cms_aptitude_questions (question_id, position, topic, payload_json)
                    VALUES (?, ?, ?, ?)
                    """,
                    (question.id, position, question.topic, question.model_dump_json(by_alias=True)),
                )
                count += 1
            conn.commit()
            return count
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Coding bank
    # ------------------------------------------------------------------
    def list_coding_questions(self, company_id: Optional[str] = None) -> List[CodingQuestion]:
        conn = self._connect()
        try:
            query = """
                SELECT question_id, company_id, title, problem_statement, boilerplate
                FROM cms_coding_questions
            """
            params: tuple = ()
            if company_id is not None:
                query += " WHERE company_id = ?"
                params = (company_id,)
            rows = conn.execute(query + " ORDER BY rowid", params).fetchall()
            return [
                CodingQuestion(
                    id=row["question_id"],
                    company_id=row["company_id"],
                    title=row["title"],
                    problem_statement=row["problem_statement"],
                    boilerplate=row["boilerplate"],
                )
                for row in rows
            ]
        finally:
            conn.close()

    def add_coding_question(
        self, draft: CodingQuestionDraft, *, question_id: Optional[str] = None
    ) -> CodingQuestion:
        """Persist a coding question; raises ``CompanyNotFound`` for unknown companies."""

        if self.get_company(draft.company_id) is None:
            raise CompanyNotFound(draft.company_id)
        question = CodingQuestion(id=question_id or uuid4().hex, **draft.model_dump())
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO cms_coding_questions (question_id, company_id, title, problem_statement, boilerplate, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    question.id,
                    question.company_id,
                    question.title,
                    question.problem_statement,
                    question.boilerplate,
                    _now(),
                ),
            )
            conn.commit()
            return question
        finally:
            conn.close()

    def delete_coding_question(self, question_id: str) -> bool:
        conn = self._connect()
        try:
            cur = conn.execute("DELETE FROM cms_coding_questions WHERE question_id = ?", (question_id,))
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()


__all__ = ["CmsStore"]
