"""Key-value persistence of the candidate session snapshot."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from config.settings import settings
from marathon.state import Session

from .sqlite import get_conn


def save_snapshot(owner_id: str, session: Session) -> None:
    """Store the whole session JSON under the configured storage key."""

    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO session_snapshots (owner_id, storage_key, payload, updated_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT(owner_id, storage_key)
               DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at""",
            (owner_id, settings.STORAGE_KEY, session.to_snapshot(), timestamp),
        )


def load_snapshot(owner_id: str) -> Optional[Session]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT payload FROM session_snapshots WHERE owner_id = ? AND storage_key = ?",
            (owner_id, settings.STORAGE_KEY),
        ).fetchone()
    if row is None:
        return None
    return Session.from_snapshot(row[0])


def delete_snapshot(owner_id: str) -> bool:
    with get_conn() as conn:
        cur = conn.execute(
            "DELETE FROM session_snapshots WHERE owner_id = ? AND storage_key = ?",
            (owner_id, settings.STORAGE_KEY),
        )
        return cur.rowcount > 0


def store_snapshot(owner_id: str, session: Optional[Session]) -> None:
    """Persist ``session`` or drop the snapshot when it is absent."""

    if session is None:
        delete_snapshot(owner_id)
    else:
        save_snapshot(owner_id, session)


__all__ = ["delete_snapshot", "load_snapshot", "save_snapshot", "store_snapshot"]
