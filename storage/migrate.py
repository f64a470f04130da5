"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS session_snapshots (
  owner_id TEXT NOT NULL,
  storage_key TEXT NOT NULL,
  payload TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  PRIMARY KEY (owner_id, storage_key)
);
""",
    """
CREATE TABLE IF NOT EXISTS session_runs (
  owner_id TEXT PRIMARY KEY,
  company_id TEXT NOT NULL,
  workflow TEXT NOT NULL,
  served_round INTEGER,
  served_questions TEXT,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS proctor_warnings (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  timestamp TEXT NOT NULL,
  owner_id TEXT NOT NULL,
  company_id TEXT NOT NULL,
  round_index INTEGER NOT NULL,
  reason TEXT NOT NULL,
  warning_count INTEGER NOT NULL,
  terminated INTEGER NOT NULL,
  metadata TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS round_scores (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  timestamp TEXT NOT NULL,
  owner_id TEXT NOT NULL,
  company_id TEXT NOT NULL,
  round_index INTEGER NOT NULL,
  round_type TEXT,
  score REAL NOT NULL,
  feedback TEXT NOT NULL
);
""",
]


def migrate(db_path: str = "data/marathon.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    migrate()
