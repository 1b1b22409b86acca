# feedback_api/services/store.py
from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from feedback_api.core.errors import BackendError, NotFoundError
from feedback_api.schemas.forms import Form, Question
from feedback_api.schemas.responses import AnswerItem, Response, ResponseWithAnswers
from feedback_api.services.assembler import FormSavePlan, QuestionRow

logger = logging.getLogger(__name__)

FORM_NOT_FOUND = "Form not found or you do not have permission to access it."
ACTIVE_FORM_NOT_FOUND = "Form not found or is no longer active."


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def _connect(sqlite_path: Path) -> Iterator[sqlite3.Connection]:
    """One short-lived connection per call; commit on success, sqlite errors become BackendError."""
    try:
        con = sqlite3.connect(str(sqlite_path))
    except sqlite3.Error as e:
        raise BackendError(f"{type(e).__name__}: {e}") from e

    con.row_factory = sqlite3.Row
    try:
        con.execute("PRAGMA foreign_keys = ON;")
        yield con
        con.commit()
    except sqlite3.Error as e:
        con.rollback()
        logger.error("sqlite failure: %s", e)
        raise BackendError(f"{type(e).__name__}: {e}") from e
    finally:
        con.close()


# -------------------------
# DB initialization + migration
# -------------------------
def _ensure_column(con: sqlite3.Connection, table: str, col: str, col_type: str) -> None:
    """Lightweight migration: add column if missing (SQLite-safe for local use)."""
    cur = con.cursor()
    cur.execute(f"PRAGMA table_info({table});")
    cols = {row[1] for row in cur.fetchall()}
    if col not in cols:
        cur.execute(f"ALTER TABLE {table} ADD COLUMN {col} {col_type};")


def init_db(sqlite_path: Path) -> None:
    sqlite_path.parent.mkdir(parents=True, exist_ok=True)

    with _connect(sqlite_path) as con:
        cur = con.cursor()

        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS forms (
              id TEXT PRIMARY KEY,
              user_id TEXT NOT NULL,
              title TEXT NOT NULL,
              description TEXT DEFAULT '',
              is_active INTEGER NOT NULL DEFAULT 1,
              created_at TEXT NOT NULL,
              updated_at TEXT
            )
            """
        )

        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS questions (
              id TEXT PRIMARY KEY,
              form_id TEXT NOT NULL REFERENCES forms(id) ON DELETE CASCADE,
              question_text TEXT NOT NULL,
              question_type TEXT NOT NULL CHECK (question_type IN ('text', 'multiple_choice', 'rating')),
              options TEXT DEFAULT '[]',  -- JSON string
              is_required INTEGER NOT NULL DEFAULT 1,
              order_index INTEGER NOT NULL,
              created_at TEXT NOT NULL
            )
            """
        )

        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS responses (
              id TEXT PRIMARY KEY,
              form_id TEXT NOT NULL REFERENCES forms(id) ON DELETE CASCADE,
              submitted_at TEXT NOT NULL,
              ip_address TEXT,
              user_agent TEXT
            )
            """
        )

        # answers go away with their question: a full replace on edit drops them
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS answers (
              id TEXT PRIMARY KEY,
              response_id TEXT NOT NULL REFERENCES responses(id) ON DELETE CASCADE,
              question_id TEXT NOT NULL REFERENCES questions(id) ON DELETE CASCADE,
              answer_text TEXT NOT NULL,
              created_at TEXT NOT NULL
            )
            """
        )

        cur.execute("CREATE INDEX IF NOT EXISTS idx_forms_user_id ON forms(user_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_questions_form_id ON questions(form_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_responses_form_id ON responses(form_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_answers_response_id ON answers(response_id);")

        # ---- migrations (for older DBs) ----
        _ensure_column(con, "forms", "updated_at", "TEXT")
        _ensure_column(con, "responses", "user_agent", "TEXT")


# -------------------------
# Row mappers
# -------------------------
def _form_from_row(r: sqlite3.Row) -> Form:
    d = dict(r)
    d["is_active"] = bool(d.get("is_active"))
    d["description"] = d.get("description") or ""
    return Form(**{k: d[k] for k in ("id", "user_id", "title", "description", "is_active", "created_at", "updated_at")})


def _question_from_row(r: sqlite3.Row) -> Question:
    d = dict(r)
    return Question(
        id=d["id"],
        form_id=d["form_id"],
        question_text=d["question_text"],
        question_type=d["question_type"],
        options=json.loads(d.get("options") or "[]"),
        is_required=bool(d["is_required"]),
        order_index=int(d["order_index"]),
    )


def _insert_questions(con: sqlite3.Connection, form_id: str, rows: Sequence[QuestionRow]) -> None:
    now = _now_iso()
    con.executemany(
        """
        INSERT INTO questions (id, form_id, question_text, question_type, options, is_required, order_index, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                _new_id(),
                form_id,
                row.question_text,
                row.question_type,
                json.dumps(row.options),
                1 if row.is_required else 0,
                int(row.order_index),
                now,
            )
            for row in rows
        ],
    )


# -------------------------
# Forms + questions
# -------------------------
def create_form(
    sqlite_path: Path,
    owner_id: str,
    title: str,
    description: str = "",
    is_active: bool = True,
) -> Form:
    init_db(sqlite_path)
    form_id = _new_id()
    now = _now_iso()

    with _connect(sqlite_path) as con:
        con.execute(
            """
            INSERT INTO forms (id, user_id, title, description, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (form_id, owner_id, title, description, 1 if is_active else 0, now, now),
        )

    return Form(
        id=form_id,
        user_id=owner_id,
        title=title,
        description=description,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )


def replace_form_questions(sqlite_path: Path, form_id: str, rows: Sequence[QuestionRow]) -> None:
    """Delete every question of the form, then insert `rows`."""
    init_db(sqlite_path)
    with _connect(sqlite_path) as con:
        con.execute("DELETE FROM questions WHERE form_id = ?", (form_id,))
        _insert_questions(con, form_id, rows)


def apply_form_save_plan(sqlite_path: Path, plan: FormSavePlan, owner_id: str) -> str:
    """
    Apply a save plan in one transaction: create or update the form row,
    delete the plan's `delete_ids` that belong to this form, insert the new
    questions. Returns the form id.
    """
    init_db(sqlite_path)
    now = _now_iso()

    with _connect(sqlite_path) as con:
        if plan.form_id is None:
            form_id = _new_id()
            con.execute(
                """
                INSERT INTO forms (id, user_id, title, description, is_active, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (form_id, owner_id, plan.title, plan.description, 1 if plan.is_active else 0, now, now),
            )
        else:
            form_id = plan.form_id
            cur = con.execute(
                """
                UPDATE forms
                SET title=?, description=?, is_active=?, updated_at=?
                WHERE id=? AND user_id=?
                """,
                (plan.title, plan.description, 1 if plan.is_active else 0, now, form_id, owner_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError(FORM_NOT_FOUND, param="form_id")

            con.executemany(
                "DELETE FROM questions WHERE id = ? AND form_id = ?",
                [(qid, form_id) for qid in plan.delete_ids],
            )

        _insert_questions(con, form_id, plan.insert_rows)

    return form_id


def load_form(sqlite_path: Path, form_id: str, require_owner_id: Optional[str] = None) -> Form:
    init_db(sqlite_path)
    with _connect(sqlite_path) as con:
        if require_owner_id is None:
            row = con.execute("SELECT * FROM forms WHERE id = ?", (form_id,)).fetchone()
        else:
            row = con.execute(
                "SELECT * FROM forms WHERE id = ? AND user_id = ?",
                (form_id, require_owner_id),
            ).fetchone()
    if not row:
        raise NotFoundError(FORM_NOT_FOUND, param="form_id")
    return _form_from_row(row)


def load_active_form(sqlite_path: Path, form_id: str) -> Form:
    init_db(sqlite_path)
    with _connect(sqlite_path) as con:
        row = con.execute("SELECT * FROM forms WHERE id = ? AND is_active = 1", (form_id,)).fetchone()
    if not row:
        raise NotFoundError(ACTIVE_FORM_NOT_FOUND, param="form_id")
    return _form_from_row(row)


def load_questions(sqlite_path: Path, form_id: str) -> List[Question]:
    init_db(sqlite_path)
    with _connect(sqlite_path) as con:
        rows = con.execute(
            "SELECT * FROM questions WHERE form_id = ? ORDER BY order_index ASC",
            (form_id,),
        ).fetchall()
    return [_question_from_row(r) for r in rows]


def list_forms_with_counts(sqlite_path: Path, owner_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    init_db(sqlite_path)
    sql = """
        SELECT f.*, (SELECT COUNT(*) FROM responses r WHERE r.form_id = f.id) AS responses
        FROM forms f
        WHERE f.user_id = ?
        ORDER BY f.created_at DESC
    """
    params: Tuple[Any, ...] = (owner_id,)
    if limit is not None:
        sql += " LIMIT ?"
        params = (owner_id, int(limit))

    with _connect(sqlite_path) as con:
        rows = con.execute(sql, params).fetchall()

    out: List[Dict[str, Any]] = []
    for r in rows:
        d = dict(r)
        d["is_active"] = bool(d.get("is_active"))
        d["description"] = d.get("description") or ""
        d["responses"] = int(d.get("responses") or 0)
        out.append(d)
    return out


def set_form_active(sqlite_path: Path, form_id: str, owner_id: str, is_active: bool) -> Form:
    init_db(sqlite_path)
    with _connect(sqlite_path) as con:
        cur = con.execute(
            "UPDATE forms SET is_active=?, updated_at=? WHERE id=? AND user_id=?",
            (1 if is_active else 0, _now_iso(), form_id, owner_id),
        )
        if cur.rowcount == 0:
            raise NotFoundError(FORM_NOT_FOUND, param="form_id")
    return load_form(sqlite_path, form_id, require_owner_id=owner_id)


def delete_form(sqlite_path: Path, form_id: str, owner_id: str) -> None:
    init_db(sqlite_path)
    with _connect(sqlite_path) as con:
        cur = con.execute("DELETE FROM forms WHERE id=? AND user_id=?", (form_id, owner_id))
        if cur.rowcount == 0:
            raise NotFoundError(FORM_NOT_FOUND, param="form_id")


# -------------------------
# Responses + answers
# -------------------------
def create_response(
    sqlite_path: Path,
    form_id: str,
    metadata: Optional[Dict[str, Any]] = None,
    submitted_at: Optional[str] = None,
) -> Response:
    """Anonymous insert; only allowed while the form is active."""
    init_db(sqlite_path)
    metadata = metadata or {}
    response_id = _new_id()
    ts = submitted_at or _now_iso()

    with _connect(sqlite_path) as con:
        row = con.execute("SELECT is_active FROM forms WHERE id = ?", (form_id,)).fetchone()
        if not row or not row["is_active"]:
            raise NotFoundError(ACTIVE_FORM_NOT_FOUND, param="form_id")

        con.execute(
            """
            INSERT INTO responses (id, form_id, submitted_at, ip_address, user_agent)
            VALUES (?, ?, ?, ?, ?)
            """,
            (response_id, form_id, ts, metadata.get("ip_address"), metadata.get("user_agent")),
        )

    return Response(
        id=response_id,
        form_id=form_id,
        submitted_at=ts,
        ip_address=metadata.get("ip_address"),
        user_agent=metadata.get("user_agent"),
    )


def create_answers(sqlite_path: Path, response_id: str, answers: Sequence[Tuple[str, str]]) -> int:
    if not answers:
        return 0

    init_db(sqlite_path)
    now = _now_iso()
    with _connect(sqlite_path) as con:
        con.executemany(
            """
            INSERT INTO answers (id, response_id, question_id, answer_text, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [(_new_id(), response_id, qid, text, now) for qid, text in answers],
        )
    return len(answers)


def load_responses_with_answers(
    sqlite_path: Path,
    form_id: Optional[str] = None,
    owner_id: Optional[str] = None,
) -> List[ResponseWithAnswers]:
    """
    Responses newest first, each expanded with its answers (joined to question
    text/type/order, sorted by order_index). Scope by form, by owner, or both.
    """
    if form_id is None and owner_id is None:
        raise ValueError("form_id or owner_id is required")

    init_db(sqlite_path)

    where: List[str] = []
    params: List[Any] = []
    if form_id is not None:
        where.append("r.form_id = ?")
        params.append(form_id)
    if owner_id is not None:
        where.append("f.user_id = ?")
        params.append(owner_id)

    with _connect(sqlite_path) as con:
        resp_rows = con.execute(
            f"""
            SELECT r.*, f.title AS form_title
            FROM responses r
            JOIN forms f ON f.id = r.form_id
            WHERE {' AND '.join(where)}
            ORDER BY r.submitted_at DESC
            """,
            tuple(params),
        ).fetchall()

        answer_rows = con.execute(
            f"""
            SELECT a.id, a.response_id, a.question_id, a.answer_text,
                   q.question_text, q.question_type, q.order_index
            FROM answers a
            JOIN questions q ON q.id = a.question_id
            JOIN responses r ON r.id = a.response_id
            JOIN forms f ON f.id = r.form_id
            WHERE {' AND '.join(where)}
            ORDER BY q.order_index ASC
            """,
            tuple(params),
        ).fetchall()

    by_response: Dict[str, List[AnswerItem]] = {}
    for a in answer_rows:
        d = dict(a)
        by_response.setdefault(d.pop("response_id"), []).append(AnswerItem(**d))

    out: List[ResponseWithAnswers] = []
    for r in resp_rows:
        d = dict(r)
        out.append(ResponseWithAnswers(**d, answers=by_response.get(d["id"], [])))
    return out
