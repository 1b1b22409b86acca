# feedback_api/services/question_schema.py
from __future__ import annotations

import uuid
from typing import Any, Iterable, Iterator, List, Sequence

from feedback_api.schemas.forms import Question

TYPES_WITHOUT_OPTIONS = {"text", "rating"}


def _temp_id() -> str:
    return f"temp-{uuid.uuid4().hex[:12]}"


def _renumber(questions: List[Question]) -> List[Question]:
    return [q.model_copy(update={"order_index": i}) for i, q in enumerate(questions)]


def _index_of(questions: Sequence[Question], question_id: str) -> int:
    for i, q in enumerate(questions):
        if q.id == question_id:
            return i
    return -1


class DisplayOrder:
    """
    Questions sorted ascending by order_index.

    Iterating is lazy and can be repeated: every pass re-sorts the snapshot
    taken at construction, so the editor, the preview and the public page
    always agree on the order of the same stored state.
    """

    def __init__(self, questions: Iterable[Question]):
        self._questions = list(questions)

    def __iter__(self) -> Iterator[Question]:
        # sorted() is stable: equal indices keep their stored order
        return iter(sorted(self._questions, key=lambda q: q.order_index))

    def __len__(self) -> int:
        return len(self._questions)


def reorder_for_display(questions: Iterable[Question]) -> DisplayOrder:
    return DisplayOrder(questions)


def add_question(questions: Sequence[Question], is_required: bool) -> List[Question]:
    new_q = Question(
        id=_temp_id(),
        question_text="",
        question_type="text",
        options=[],
        is_required=is_required,
        order_index=len(questions),
    )
    return list(questions) + [new_q]


def remove_question(questions: Sequence[Question], question_id: str) -> List[Question]:
    ordered = list(reorder_for_display(questions))
    if _index_of(ordered, question_id) == -1:
        return ordered
    kept = [q for q in ordered if q.id != question_id]
    return _renumber(kept)


def move_question(questions: Sequence[Question], question_id: str, direction: str) -> List[Question]:
    # neighbours are neighbours in display order, not in list position
    out = list(reorder_for_display(questions))
    current = _index_of(out, question_id)
    if current == -1:
        return out

    target = current - 1 if direction == "up" else current + 1
    if target < 0 or target >= len(out):
        return out

    out[current], out[target] = out[target], out[current]
    return _renumber(out)


def update_question(questions: Sequence[Question], question_id: str, **changes: Any) -> List[Question]:
    """Replace fields of one question in place; order_index is never touched here."""
    changes.pop("order_index", None)
    changes.pop("id", None)
    out: List[Question] = []
    for q in questions:
        if q.id == question_id:
            q = q.model_copy(update=changes)
            if q.question_type in TYPES_WITHOUT_OPTIONS and q.options:
                q = q.model_copy(update={"options": []})
        out.append(q)
    return out


def change_question_type(questions: Sequence[Question], question_id: str, question_type: str) -> List[Question]:
    return update_question(questions, question_id, question_type=question_type)


def public_link(base_url: str, form_id: str) -> str:
    return f"{base_url.rstrip('/')}/form/{form_id}"
