from __future__ import annotations

import json
import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from app.core.config import settings

_conn: sqlite3.Connection | None = None
_conn_lock = threading.Lock()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def _get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.document_store_db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS cv_documents (
                id TEXT PRIMARY KEY,
                file_name TEXT NOT NULL,
                file_type TEXT NOT NULL,
                extracted_text TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS job_descriptions (
                id TEXT PRIMARY KEY,
                content TEXT NOT NULL,
                keywords_json TEXT NOT NULL,
                cv_id TEXT,
                created_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS optimized_cvs (
                id TEXT PRIMARY KEY,
                content TEXT NOT NULL,
                match_rate INTEGER NOT NULL,
                cv_id TEXT NOT NULL,
                job_description_id TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_optimized_cvs_pair
            ON optimized_cvs (cv_id, job_description_id);
            """
        )
        return _conn


def init_document_store() -> None:
    _get_connection()


def create_cv_document(*, file_name: str, file_type: str, extracted_text: str) -> dict[str, Any]:
    conn = _get_connection()
    record = {
        "id": _new_id(),
        "file_name": file_name,
        "file_type": file_type,
        "extracted_text": extracted_text,
        "created_at": _utc_now(),
    }
    with _conn_lock:
        conn.execute(
            """
            INSERT INTO cv_documents (id, file_name, file_type, extracted_text, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                record["id"],
                file_name,
                file_type,
                extracted_text,
                record["created_at"].isoformat(),
            ),
        )
        conn.commit()
    return record


def get_cv_document(cv_id: str) -> dict[str, Any] | None:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            SELECT id, file_name, file_type, extracted_text, created_at
            FROM cv_documents
            WHERE id = ?
            """,
            (cv_id,),
        )
        row = cur.fetchone()

    if not row:
        return None
    return {
        "id": row[0],
        "file_name": row[1],
        "file_type": row[2],
        "extracted_text": row[3],
        "created_at": datetime.fromisoformat(row[4]),
    }


def create_job_description(*, content: str, keywords: list[str], cv_id: str | None = None) -> dict[str, Any]:
    conn = _get_connection()
    record = {
        "id": _new_id(),
        "content": content,
        "keywords": list(keywords),
        "cv_id": cv_id,
        "created_at": _utc_now(),
    }
    with _conn_lock:
        conn.execute(
            """
            INSERT INTO job_descriptions (id, content, keywords_json, cv_id, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                record["id"],
                content,
                json.dumps(record["keywords"], ensure_ascii=False),
                cv_id,
                record["created_at"].isoformat(),
            ),
        )
        conn.commit()
    return record


def get_job_description(job_description_id: str) -> dict[str, Any] | None:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            SELECT id, content, keywords_json, cv_id, created_at
            FROM job_descriptions
            WHERE id = ?
            """,
            (job_description_id,),
        )
        row = cur.fetchone()

    if not row:
        return None
    keywords = json.loads(row[2]) if row[2] else []
    return {
        "id": row[0],
        "content": row[1],
        "keywords": keywords if isinstance(keywords, list) else [],
        "cv_id": row[3],
        "created_at": datetime.fromisoformat(row[4]),
    }


def create_optimized_cv(*, content: str, match_rate: int, cv_id: str, job_description_id: str) -> dict[str, Any]:
    conn = _get_connection()
    record = {
        "id": _new_id(),
        "content": content,
        "match_rate": int(match_rate),
        "cv_id": cv_id,
        "job_description_id": job_description_id,
        "created_at": _utc_now(),
    }
    with _conn_lock:
        conn.execute(
            """
            INSERT INTO optimized_cvs (id, content, match_rate, cv_id, job_description_id, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record["id"],
                content,
                record["match_rate"],
                cv_id,
                job_description_id,
                record["created_at"].isoformat(),
            ),
        )
        conn.commit()
    return record


def _optimized_row_to_record(row: tuple[Any, ...]) -> dict[str, Any]:
    return {
        "id": row[0],
        "content": row[1],
        "match_rate": int(row[2]),
        "cv_id": row[3],
        "job_description_id": row[4],
        "created_at": datetime.fromisoformat(row[5]),
    }


def get_optimized_cv(optimized_id: str) -> dict[str, Any] | None:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            SELECT id, content, match_rate, cv_id, job_description_id, created_at
            FROM optimized_cvs
            WHERE id = ?
            """,
            (optimized_id,),
        )
        row = cur.fetchone()
    return _optimized_row_to_record(row) if row else None


def get_optimized_cv_by_pair(cv_id: str, job_description_id: str) -> dict[str, Any] | None:
    conn = _get_connection()
    with _conn_lock:
        cur = conn.execute(
            """
            SELECT id, content, match_rate, cv_id, job_description_id, created_at
            FROM optimized_cvs
            WHERE cv_id = ? AND job_description_id = ?
            ORDER BY created_at DESC
            LIMIT 1
            """,
            (cv_id, job_description_id),
        )
        row = cur.fetchone()
    return _optimized_row_to_record(row) if row else None
