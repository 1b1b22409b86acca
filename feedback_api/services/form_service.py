# feedback_api/services/form_service.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from feedback_api.core.config import Settings
from feedback_api.core.logging import get_event_logger, json_log
from feedback_api.schemas.forms import FormDraft, FormWithQuestions, Question
from feedback_api.schemas.responses import ResponseWithAnswers
from feedback_api.services import aggregation, store
from feedback_api.services.assembler import assemble_submission, plan_form_save, submitter_metadata
from feedback_api.services.question_schema import public_link, reorder_for_display
from feedback_api.services.validator import validate_answer_values, validate_submission


# -------------------------
# Authoring
# -------------------------
def create_form(settings: Settings, owner_id: str, draft: FormDraft) -> FormWithQuestions:
    """Create path: validation uses the create-path option minimum."""
    plan = plan_form_save(draft, min_options=settings.min_options_for("create"))
    form_id = store.apply_form_save_plan(settings.abs_sqlite_path(), plan, owner_id=owner_id)

    json_log(get_event_logger(), {
        "event": "form_created",
        "form_id": form_id,
        "owner_id": owner_id,
        "questions": len(plan.insert_rows),
    })
    return load_owned_form(settings, owner_id, form_id)


def save_form(settings: Settings, owner_id: str, form_id: str, draft: FormDraft) -> FormWithQuestions:
    """
    Edit path: full replace of the question list. Old question ids (and the
    answers attached to them) do not survive.
    """
    # ownership check before validation so a foreign id is always a 404
    store.load_form(settings.abs_sqlite_path(), form_id, require_owner_id=owner_id)
    existing = store.load_questions(settings.abs_sqlite_path(), form_id)

    plan = plan_form_save(
        draft,
        min_options=settings.min_options_for("edit"),
        form_id=form_id,
        existing=existing,
    )
    store.apply_form_save_plan(settings.abs_sqlite_path(), plan, owner_id=owner_id)

    json_log(get_event_logger(), {
        "event": "form_saved",
        "form_id": form_id,
        "owner_id": owner_id,
        "questions_deleted": len(plan.delete_ids),
        "questions_inserted": len(plan.insert_rows),
    })
    return load_owned_form(settings, owner_id, form_id)


def load_owned_form(settings: Settings, owner_id: str, form_id: str) -> FormWithQuestions:
    form = store.load_form(settings.abs_sqlite_path(), form_id, require_owner_id=owner_id)
    questions = list(reorder_for_display(store.load_questions(settings.abs_sqlite_path(), form_id)))
    return FormWithQuestions(
        **form.model_dump(),
        questions=questions,
        public_url=public_link(settings.public_base_url, form_id),
    )


def list_forms(settings: Settings, owner_id: str) -> List[Dict[str, Any]]:
    rows = store.list_forms_with_counts(settings.abs_sqlite_path(), owner_id)
    for r in rows:
        r["status"] = "active" if r["is_active"] else "draft"
        r["public_url"] = public_link(settings.public_base_url, r["id"])
    return rows


# -------------------------
# Public path
# -------------------------
def load_public_form(settings: Settings, form_id: str) -> FormWithQuestions:
    form = store.load_active_form(settings.abs_sqlite_path(), form_id)
    questions = list(reorder_for_display(store.load_questions(settings.abs_sqlite_path(), form_id)))
    # owner id stays private on the public path
    return FormWithQuestions(**form.model_dump(exclude={"user_id"}), user_id="", questions=questions)


def submit_response(
    settings: Settings,
    form_id: str,
    answers: Dict[str, str],
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Validate, then create the response row followed by its answer rows.
    Resubmitting creates a new response; there is no deduplication.
    """
    store.load_active_form(settings.abs_sqlite_path(), form_id)
    questions = store.load_questions(settings.abs_sqlite_path(), form_id)

    validate_submission(questions, answers)
    validate_answer_values(questions, answers, settings.rating_min, settings.rating_max)

    known = {q.id for q in questions}
    rows = [(qid, text) for qid, text in assemble_submission(questions, answers) if qid in known]

    response = store.create_response(
        settings.abs_sqlite_path(),
        form_id,
        metadata=submitter_metadata(ip_address, user_agent),
    )
    saved = store.create_answers(settings.abs_sqlite_path(), response.id, rows)

    json_log(get_event_logger(), {
        "event": "response_submitted",
        "form_id": form_id,
        "response_id": response.id,
        "answers": saved,
    })
    return {"status": "ok", "response_id": response.id, "form_id": form_id, "answers_saved": saved}


# -------------------------
# Analytics
# -------------------------
def form_responses(settings: Settings, owner_id: str, form_id: str) -> Dict[str, Any]:
    store.load_form(settings.abs_sqlite_path(), form_id, require_owner_id=owner_id)
    items = store.load_responses_with_answers(settings.abs_sqlite_path(), form_id=form_id, owner_id=owner_id)
    return {
        "items": items,
        "stats": {
            "total_responses": aggregation.response_count(items),
            "avg_rating": aggregation.average_rating(items),
        },
    }


def form_responses_csv(settings: Settings, owner_id: str, form_id: str) -> tuple[str, str]:
    form = store.load_form(settings.abs_sqlite_path(), form_id, require_owner_id=owner_id)
    questions = store.load_questions(settings.abs_sqlite_path(), form_id)
    items = store.load_responses_with_answers(settings.abs_sqlite_path(), form_id=form_id, owner_id=owner_id)
    content = aggregation.to_csv(items, questions, aggregation.FORM_METADATA_COLUMNS)
    return content, f"{form.title or 'form'}-responses.csv"


def owner_responses(
    settings: Settings,
    owner_id: str,
    form_id: Optional[str] = None,
    search: str = "",
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    everything = store.load_responses_with_answers(settings.abs_sqlite_path(), owner_id=owner_id)
    return {
        "items": aggregation.filter_responses(everything, form_id=form_id, search=search),
        "stats": {
            "total_responses": aggregation.response_count(everything),
            "this_week": aggregation.responses_in_window(everything, now - timedelta(days=7)),
            "avg_rating": aggregation.average_rating(everything),
        },
    }


def owner_responses_csv(settings: Settings, owner_id: str, form_id: Optional[str] = None, search: str = "") -> str:
    items: List[ResponseWithAnswers] = aggregation.filter_responses(
        store.load_responses_with_answers(settings.abs_sqlite_path(), owner_id=owner_id),
        form_id=form_id,
        search=search,
    )
    order: List[Question] = aggregation.collect_question_order(items)
    return aggregation.to_csv(items, order, aggregation.OWNER_METADATA_COLUMNS)


def dashboard(settings: Settings, owner_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    forms = store.list_forms_with_counts(settings.abs_sqlite_path(), owner_id)
    responses = store.load_responses_with_answers(settings.abs_sqlite_path(), owner_id=owner_id)
    return aggregation.dashboard_summary(
        forms,
        responses,
        now=now,
        trend_days=settings.trend_days,
        recent_limit=settings.recent_forms_limit,
    )
