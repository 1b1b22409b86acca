# feedback_api/services/validator.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from feedback_api.core.errors import ValidationError
from feedback_api.schemas.forms import FormDraft, Question
from feedback_api.services.question_schema import reorder_for_display


def clean_options(options: Sequence[str]) -> List[str]:
    return [opt.strip() for opt in options if opt and opt.strip()]


def validate_form_for_save(form: FormDraft, min_options: int) -> None:
    """
    Raise ValidationError for the first problem found, in this order:
    title, question count, then per question (display order) text and options.
    """
    if not form.title.strip():
        raise ValidationError("title required", param="title")

    if not form.questions:
        raise ValidationError("at least one question required", param="questions")

    for n, q in enumerate(reorder_for_display(form.questions), start=1):
        if not q.question_text.strip():
            raise ValidationError(f"question {n} text required", param="questions")
        if q.question_type == "multiple_choice" and len(clean_options(q.options)) < min_options:
            raise ValidationError(f"question {n} needs options", param="questions")


def _is_missing(question: Question, answer: Optional[str]) -> bool:
    if not answer:
        return True
    if question.question_type == "text" and not answer.strip():
        return True
    return False


def missing_required_questions(questions: Sequence[Question], answers: Dict[str, str]) -> List[int]:
    """1-indexed positions (display order) of required questions without an acceptable answer."""
    missing: List[int] = []
    for n, q in enumerate(reorder_for_display(questions), start=1):
        if q.is_required and _is_missing(q, answers.get(q.id)):
            missing.append(n)
    return missing


def validate_submission(questions: Sequence[Question], answers: Dict[str, str]) -> None:
    missing = missing_required_questions(questions, answers)
    if missing:
        numbers = ", ".join(str(n) for n in missing)
        raise ValidationError(
            f"Please answer all required questions. Missing: Question {numbers}",
            param="answers",
            missing=missing,
        )


def _answer_ok(question: Question, value: str, rating_min: int, rating_max: int) -> bool:
    if question.question_type == "rating":
        try:
            rating = int(value)
        except ValueError:
            return False
        return rating_min <= rating <= rating_max
    if question.question_type == "multiple_choice":
        return value in clean_options(question.options)
    return True


def validate_answer_values(
    questions: Sequence[Question],
    answers: Dict[str, str],
    rating_min: int = 1,
    rating_max: int = 5,
) -> None:
    """
    Ratings must be in range and choices must be one of the question's options.
    A blank rating or choice value is invalid; a blank text value is skipped.
    """
    for n, q in enumerate(reorder_for_display(questions), start=1):
        raw = answers.get(q.id)
        if not raw:
            continue
        value = raw.strip()
        if not value and q.question_type == "text":
            continue
        if not _answer_ok(q, value, rating_min, rating_max):
            raise ValidationError(f"question {n} has an invalid answer", param="answers")
