# feedback_api/services/assembler.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from feedback_api.schemas.forms import FormDraft, Question
from feedback_api.services.question_schema import reorder_for_display
from feedback_api.services.validator import clean_options, validate_form_for_save


# -------------------------
# Submission
# -------------------------
def assemble_submission(questions: Sequence[Question], answers: Dict[str, str]) -> List[Tuple[str, str]]:
    """
    Turn the in-progress answer map into (question_id, answer_text) rows.

    Skipped, empty or whitespace-only values produce no row, whatever the
    question type; every kept value is stored trimmed.
    """
    order = {q.id: i for i, q in enumerate(reorder_for_display(questions))}

    rows: List[Tuple[int, int, str, str]] = []
    for pos, (question_id, value) in enumerate(answers.items()):
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        # known questions first (display order), unknown ids after in input order
        rank = order.get(question_id, len(order))
        rows.append((rank, pos, question_id, text))

    rows.sort(key=lambda r: (r[0], r[1]))
    return [(qid, text) for _, _, qid, text in rows]


def submitter_metadata(ip_address: Optional[str], user_agent: Optional[str]) -> Dict[str, Optional[str]]:
    return {"ip_address": ip_address or None, "user_agent": user_agent or None}


# -------------------------
# Form save (full replace)
# -------------------------
@dataclass
class QuestionRow:
    question_text: str
    question_type: str
    options: List[str]
    is_required: bool
    order_index: int


@dataclass
class FormSavePlan:
    """
    Destructive replace of a form's questions.

    Phase 1 updates the scalar fields and deletes `delete_ids`; phase 2 inserts
    `insert_rows`. Question identity is not preserved across a save.
    """
    form_id: Optional[str]
    title: str
    description: str
    is_active: bool
    delete_ids: List[str] = field(default_factory=list)
    insert_rows: List[QuestionRow] = field(default_factory=list)


def build_question_rows(questions: Sequence[Question]) -> List[QuestionRow]:
    rows: List[QuestionRow] = []
    for i, q in enumerate(reorder_for_display(questions)):
        rows.append(
            QuestionRow(
                question_text=q.question_text.strip(),
                question_type=q.question_type,
                options=clean_options(q.options) if q.question_type == "multiple_choice" else [],
                is_required=bool(q.is_required),
                order_index=i,
            )
        )
    return rows


def plan_form_save(
    form: FormDraft,
    min_options: int,
    form_id: Optional[str] = None,
    existing: Sequence[Question] = (),
) -> FormSavePlan:
    validate_form_for_save(form, min_options)
    return FormSavePlan(
        form_id=form_id,
        title=form.title.strip(),
        description=form.description.strip(),
        is_active=form.is_active,
        delete_ids=[q.id for q in existing],
        insert_rows=build_question_rows(form.questions),
    )
