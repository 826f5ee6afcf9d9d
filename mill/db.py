from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Iterable, Optional

import streamlit as st

from mill.schema import SCHEMA_SQL
from mill.utils import iso_now, new_id


def connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@st.cache_resource
def get_conn(db_path: Path) -> sqlite3.Connection:
    return connect(db_path)


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA_SQL)
    conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


def x(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> int:
    cur = conn.execute(sql, tuple(params))
    conn.commit()
    count = cur.rowcount
    cur.close()
    return int(count)


# -------------------------
# Table helpers
# -------------------------
# Every table row belongs to one user. Lists come back newest first,
# inserts return the created row, updates patch by id and return the row.

def select_rows(conn: sqlite3.Connection, table: str, user_id: str, **where: Any) -> list[dict]:
    clauses = ["user_id=?"]
    params: list[Any] = [user_id]
    for col, val in where.items():
        clauses.append(f"{col}=?")
        params.append(val)
    rows = q(
        conn,
        f"SELECT * FROM {table} WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, rowid DESC",
        params,
    )
    return [dict(r) for r in rows]


def get_row(conn: sqlite3.Connection, table: str, user_id: str, row_id: str) -> Optional[dict]:
    rows = q(conn, f"SELECT * FROM {table} WHERE id=? AND user_id=?", (row_id, user_id))
    return dict(rows[0]) if rows else None


# insert_values/update_values do not commit: the caller owns the transaction.

def insert_values(conn: sqlite3.Connection, table: str, user_id: str, values: dict) -> str:
    now = iso_now()
    row = {"id": new_id(), "user_id": user_id, "created_at": now, "updated_at": now, **values}
    cols = ", ".join(row)
    marks = ", ".join("?" for _ in row)
    conn.execute(f"INSERT INTO {table} ({cols}) VALUES ({marks})", tuple(row.values()))
    return row["id"]


def update_values(conn: sqlite3.Connection, table: str, user_id: str, row_id: str, updates: dict) -> int:
    patch = {**updates, "updated_at": iso_now()}
    sets = ", ".join(f"{col}=?" for col in patch)
    cur = conn.execute(
        f"UPDATE {table} SET {sets} WHERE id=? AND user_id=?",
        (*patch.values(), row_id, user_id),
    )
    return cur.rowcount


def insert_row(conn: sqlite3.Connection, table: str, user_id: str, values: dict) -> dict:
    with conn:
        row_id = insert_values(conn, table, user_id, values)
    return get_row(conn, table, user_id, row_id)


def update_row(conn: sqlite3.Connection, table: str, user_id: str, row_id: str, updates: dict) -> dict:
    with conn:
        if not update_values(conn, table, user_id, row_id, updates):
            raise LookupError(f"No {table[:-1]} with id {row_id}.")
    return get_row(conn, table, user_id, row_id)


def get_profile(conn: sqlite3.Connection, user_id: str) -> Optional[dict]:
    rows = q(conn, "SELECT * FROM profiles WHERE user_id=?", (user_id,))
    return dict(rows[0]) if rows else None


def upsert_profile(conn: sqlite3.Connection, user_id: str, **values: Any) -> dict:
    existing = get_profile(conn, user_id)
    if existing is None:
        return insert_row(conn, "profiles", user_id, values)
    return update_row(conn, "profiles", user_id, existing["id"], values)
