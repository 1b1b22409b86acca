# feedback_api/services/aggregation.py
from __future__ import annotations

import calendar
import csv
import io
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from feedback_api.schemas.forms import Question
from feedback_api.schemas.responses import ResponseWithAnswers

MetadataColumn = Tuple[str, Callable[[ResponseWithAnswers], Any]]

FORM_METADATA_COLUMNS: List[MetadataColumn] = [
    ("Response ID", lambda r: r.id),
    ("Submitted At", lambda r: r.submitted_at),
    ("IP Address", lambda r: r.ip_address or "N/A"),
]

OWNER_METADATA_COLUMNS: List[MetadataColumn] = [
    ("Form Title", lambda r: r.form_title),
    ("Submitted At", lambda r: r.submitted_at),
]


# -------------------------
# Helpers
# -------------------------
def parse_ts(value: str) -> datetime:
    """Stored timestamps are ISO-8601; naive values are taken as UTC."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    dt = datetime.fromisoformat(v)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def round1(x: float) -> float:
    # half-up, like the UI has always displayed it
    return math.floor(x * 10 + 0.5) / 10


def one_month_before(now: datetime) -> datetime:
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


# -------------------------
# Core statistics
# -------------------------
def response_count(responses: Sequence[ResponseWithAnswers]) -> int:
    return len(responses)


def rating_values(responses: Sequence[ResponseWithAnswers]) -> List[int]:
    values: List[int] = []
    for r in responses:
        for a in r.answers:
            if a.question_type != "rating":
                continue
            try:
                values.append(int(a.answer_text.strip()))
            except ValueError:
                continue
    return values


def average_rating(responses: Sequence[ResponseWithAnswers]) -> float:
    values = rating_values(responses)
    if not values:
        return 0
    return round1(sum(values) / len(values))


def responses_in_window(responses: Sequence[ResponseWithAnswers], since: datetime) -> int:
    since_utc = _as_utc(since)
    return sum(1 for r in responses if parse_ts(r.submitted_at) >= since_utc)


def trailing_daily_counts(
    responses: Sequence[ResponseWithAnswers],
    days: int = 7,
    reference_now: Optional[datetime] = None,
) -> List[Tuple[str, int]]:
    """
    (YYYY-MM-DD, count) for the `days` calendar dates ending at reference_now,
    oldest first. A response lands in a bucket when its stored timestamp string
    starts with that date.
    """
    today = _as_utc(reference_now or datetime.now(timezone.utc)).date()
    dates = [(today - timedelta(days=days - 1 - i)).isoformat() for i in range(days)]
    return [(d, sum(1 for r in responses if r.submitted_at.startswith(d))) for d in dates]


def top_performing_form(forms_with_counts: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    top: Optional[Dict[str, Any]] = None
    for f in forms_with_counts:
        if top is None or int(f.get("responses", 0)) > int(top.get("responses", 0)):
            top = f
    return top


# -------------------------
# CSV export
# -------------------------
def collect_question_order(responses: Sequence[ResponseWithAnswers]) -> List[Question]:
    """
    Distinct questions across responses, first seen first, each response's
    answers taken in their order_index order. Indices are renumbered so the
    result can mix questions from several forms.
    """
    seen: Dict[str, Question] = {}
    for r in responses:
        for a in sorted(r.answers, key=lambda x: x.order_index):
            if a.question_id in seen:
                continue
            seen[a.question_id] = Question(
                id=a.question_id,
                question_text=a.question_text,
                question_type=a.question_type,
                order_index=len(seen),
            )
    return list(seen.values())


def to_csv(
    responses: Sequence[ResponseWithAnswers],
    question_order: Sequence[Question],
    metadata_columns: Sequence[MetadataColumn] = FORM_METADATA_COLUMNS,
) -> str:
    questions = sorted(question_order, key=lambda q: q.order_index)

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([name for name, _ in metadata_columns] + [q.question_text for q in questions])

    for r in responses:
        by_question = {a.question_id: a.answer_text for a in r.answers}
        meta = ["" if get(r) is None else str(get(r)) for _, get in metadata_columns]
        writer.writerow(meta + [by_question.get(q.id, "") for q in questions])

    return buf.getvalue()


# -------------------------
# Views
# -------------------------
def filter_responses(
    responses: Sequence[ResponseWithAnswers],
    form_id: Optional[str] = None,
    search: str = "",
) -> List[ResponseWithAnswers]:
    needle = (search or "").strip().lower()
    out: List[ResponseWithAnswers] = []
    for r in responses:
        if form_id and form_id != "all" and r.form_id != form_id:
            continue
        if needle:
            haystack = [r.form_title] + [a.answer_text for a in r.answers]
            if not any(needle in (h or "").lower() for h in haystack):
                continue
        out.append(r)
    return out


def relative_time(ts: str, now: Optional[datetime] = None) -> str:
    now_utc = _as_utc(now or datetime.now(timezone.utc))
    hours = int((now_utc - parse_ts(ts)).total_seconds() // 3600)

    if hours < 24:
        return "Just now" if hours <= 0 else f"{hours} hours ago"
    if hours < 168:
        days = hours // 24
        return f"{days} day{'s' if days > 1 else ''} ago"
    weeks = hours // 168
    return f"{weeks} week{'s' if weeks > 1 else ''} ago"


def dashboard_summary(
    forms_with_counts: Sequence[Dict[str, Any]],
    responses: Sequence[ResponseWithAnswers],
    now: Optional[datetime] = None,
    trend_days: int = 7,
    recent_limit: int = 3,
) -> Dict[str, Any]:
    """
    Owner-wide dashboard numbers. `forms_with_counts` rows carry id, title,
    is_active, created_at and responses; `responses` are all of the owner's
    responses.
    """
    now_utc = _as_utc(now or datetime.now(timezone.utc))

    total_forms = len(forms_with_counts)
    total_responses = sum(int(f.get("responses", 0)) for f in forms_with_counts)
    active = sum(1 for f in forms_with_counts if f.get("is_active"))
    top = top_performing_form(forms_with_counts)

    recent = sorted(forms_with_counts, key=lambda f: f.get("created_at") or "", reverse=True)[:recent_limit]

    return {
        "total_forms": total_forms,
        "total_responses": total_responses,
        "this_month": responses_in_window(responses, one_month_before(now_utc)),
        "avg_responses_per_form": round1(total_responses / total_forms) if total_forms else 0,
        "active_forms_count": active,
        "avg_rating": average_rating(responses),
        "top_performing_form": (
            {"id": top["id"], "title": top["title"], "responses": int(top.get("responses", 0))} if top else None
        ),
        "trend": [
            {"date": d, "count": c} for d, c in trailing_daily_counts(responses, trend_days, now_utc)
        ],
        "recent_forms": [
            {
                "id": f["id"],
                "title": f["title"],
                "responses": int(f.get("responses", 0)),
                "created": relative_time(f["created_at"], now_utc),
            }
            for f in recent
        ],
    }
