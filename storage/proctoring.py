"""Persistence helpers for proctoring warnings."""
from __future__ import annotations

import datetime as dt
import json
from typing import Any, Dict

from pydantic import BaseModel, Field

from .sqlite import get_conn


class ProctorWarningPayload(BaseModel):
    owner_id: str
    company_id: str
    round_index: int
    reason: str
    warning_count: int
    terminated: bool
    metadata: Dict[str, Any] = Field(default_factory=dict)


def insert_proctor_warning(**data: Any) -> int:
    """Insert a proctoring warning row and return its primary key."""

    payload = ProctorWarningPayload(**data)
    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        cur = conn.cursor()
        cur.execute(
            """INSERT INTO proctor_warnings
               (timestamp, owner_id, company_id, round_index, reason,
                warning_count, terminated, metadata)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                timestamp,
                payload.owner_id,
                payload.company_id,
                payload.round_index,
                payload.reason,
                payload.warning_count,
                int(payload.terminated),
                json.dumps(payload.metadata),
            ),
        )
        return int(cur.lastrowid)
