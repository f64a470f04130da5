"""Persistence helpers for round score history."""
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel

from .sqlite import get_conn


class RoundScorePayload(BaseModel):
    owner_id: str
    company_id: str
    round_index: int
    round_type: Optional[str] = None
    score: float
    feedback: str


def insert_round_score(**data: Any) -> int:
    """Insert a submitted round score; resubmissions add a new row."""

    payload = RoundScorePayload(**data)
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO round_scores
               (timestamp, owner_id, company_id, round_index, round_type, score, feedback)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                timestamp,
                payload.owner_id,
                payload.company_id,
                payload.round_index,
                payload.round_type,
                payload.score,
                payload.feedback,
            ),
        )
        return int(cur.lastrowid)
