from __future__ import annotations

from typing import Any, Dict, List


def fmt_dt(v: Any) -> str:
    if v is None or v == "":
        return "—"
    return str(v).replace("T", " ")[:19]


def fmt_rating(v: Any, max_stars: int = 5) -> str:
    try:
        n = int(str(v).strip())
    except (TypeError, ValueError):
        return str(v) if v not in (None, "") else "—"
    n = max(0, min(n, max_stars))
    return "★" * n + "☆" * (max_stars - n)


def fmt_answer(answer: Dict[str, Any]) -> str:
    if answer.get("question_type") == "rating":
        return fmt_rating(answer.get("answer_text"))
    text = answer.get("answer_text")
    return str(text) if text not in (None, "") else "—"


def flatten_responses(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One row per response: metadata columns plus one column per question text."""
    rows: List[Dict[str, Any]] = []
    for it in items:
        row: Dict[str, Any] = {
            "form": it.get("form_title") or "",
            "submitted_at": fmt_dt(it.get("submitted_at")),
        }
        for a in it.get("answers") or []:
            row[a.get("question_text") or a.get("question_id")] = fmt_answer(a)
        rows.append(row)
    return rows
