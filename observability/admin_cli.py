"""Tail the proctoring and score audit tables from the command line."""
from __future__ import annotations

import argparse
import sqlite3
from typing import Callable, List, Optional

from storage.sqlite import get_conn


def _tail(table: str, columns: str, limit: int, owner_id: Optional[str]) -> List[sqlite3.Row]:
    query = f"SELECT {columns} FROM {table}"
    params: list = []
    if owner_id:
        query += " WHERE owner_id = ?"
        params.append(owner_id)
    query += " ORDER BY id DESC LIMIT ?"
    params.append(limit)
    with get_conn(row_factory=sqlite3.Row) as conn:
        return conn.execute(query, params).fetchall()


def _warning_line(row: sqlite3.Row) -> str:
    state = "TERMINATED" if row["terminated"] else "active"
    return (
        f"[{row['timestamp']}] {row['owner_id']}/{row['company_id']} round={row['round_index']} "
        f"reason={row['reason']} warnings={row['warning_count']} {state}"
    )


def _score_line(row: sqlite3.Row) -> str:
    return (
        f"[{row['timestamp']}] {row['owner_id']}/{row['company_id']} round={row['round_index']} "
        f"type={row['round_type']} score={row['score']}"
    )


def _print_rows(rows: List[sqlite3.Row], fmt: Callable[[sqlite3.Row], str]) -> None:
    for row in rows:
        print(fmt(row))


def tail_warnings(limit: int = 20, owner_id: Optional[str] = None) -> None:
    rows = _tail(
        "proctor_warnings",
        "timestamp, owner_id, company_id, round_index, reason, warning_count, terminated",
        limit,
        owner_id,
    )
    _print_rows(rows, _warning_line)


def tail_scores(limit: int = 20, owner_id: Optional[str] = None) -> None:
    rows = _tail("round_scores", "timestamp, owner_id, company_id, round_index, round_type, score", limit, owner_id)
    _print_rows(rows, _score_line)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Inspect marathon audit tables")
    parser.add_argument("--tail-warnings", type=int, metavar="N", help="Show the latest proctoring warnings")
    parser.add_argument("--tail-scores", type=int, metavar="N", help="Show the latest submitted round scores")
    parser.add_argument("--owner", help="Only rows for this session owner")
    args = parser.parse_args(argv)

    if args.tail_warnings:
        tail_warnings(args.tail_warnings, args.owner)
    if args.tail_scores:
        tail_scores(args.tail_scores, args.owner)


if __name__ == "__main__":
    main()
