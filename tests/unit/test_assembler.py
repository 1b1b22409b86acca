from __future__ import annotations

import pytest
from conftest import q

from feedback_api.core.errors import ValidationError
from feedback_api.schemas.forms import FormDraft
from feedback_api.services.assembler import assemble_submission, plan_form_save, submitter_metadata
from feedback_api.services.validator import validate_answer_values, validate_submission


def test_blank_and_empty_answers_are_dropped_and_text_trimmed():
    questions = [q("q1", qtype="text", order=0), q("q2", qtype="text", order=1)]
    assert assemble_submission(questions, {"q1": "  hi  ", "q2": ""}) == [("q1", "hi")]


def test_whitespace_only_text_answer_dropped():
    questions = [q("q1", qtype="text")]
    assert assemble_submission(questions, {"q1": "   "}) == []


def test_rating_and_choice_values_kept_and_normalized():
    questions = [
        q("r", qtype="rating", order=0),
        q("m", qtype="multiple_choice", order=1, options=["Yes"]),
    ]
    rows = assemble_submission(questions, {"m": " Yes", "r": "4 "})
    # display order, not input order
    assert rows == [("r", "4"), ("m", "Yes")]


def test_assembled_answers_pass_validation_again():
    questions = [
        q("a", qtype="text", order=0),
        q("b", qtype="rating", order=1),
        q("c", qtype="text", order=2, required=False),
    ]
    raw = {"a": " fine ", "b": "5", "c": "   "}
    validate_submission(questions, raw)

    stored = dict(assemble_submission(questions, raw))
    assert stored == {"a": "fine", "b": "5"}
    validate_submission(questions, stored)


def test_blank_rating_value_is_not_stored_and_is_rejected():
    questions = [q("a", qtype="text", order=0), q("b", qtype="rating", order=1)]
    raw = {"a": "ok", "b": "   "}

    assert assemble_submission(questions, raw) == [("a", "ok")]
    with pytest.raises(ValidationError, match="question 2 has an invalid answer"):
        validate_answer_values(questions, raw)


def test_submitter_metadata_blanks_become_none():
    assert submitter_metadata("", None) == {"ip_address": None, "user_agent": None}
    assert submitter_metadata("10.0.0.1", "ua") == {"ip_address": "10.0.0.1", "user_agent": "ua"}


def test_plan_form_save_builds_full_replace():
    existing = [q("old-1", order=0), q("old-2", order=1)]
    draft = FormDraft(
        title="  Title ",
        description=" desc ",
        is_active=False,
        questions=[
            q("t2", qtype="multiple_choice", order=1, text=" Pick ", options=[" a ", "", "b"]),
            q("t1", qtype="rating", order=0, text="Rate", options=["leftover"]),
        ],
    )

    plan = plan_form_save(draft, min_options=2, form_id="f1", existing=existing)

    assert plan.form_id == "f1"
    assert plan.title == "Title"
    assert plan.description == "desc"
    assert plan.is_active is False
    assert plan.delete_ids == ["old-1", "old-2"]
    assert [r.order_index for r in plan.insert_rows] == [0, 1]
    assert plan.insert_rows[0].question_type == "rating"
    assert plan.insert_rows[0].options == []
    assert plan.insert_rows[1].question_text == "Pick"
    assert plan.insert_rows[1].options == ["a", "b"]


def test_plan_form_save_validates_first():
    with pytest.raises(ValidationError, match="title required"):
        plan_form_save(FormDraft(title=" ", questions=[q("a")]), min_options=1)
