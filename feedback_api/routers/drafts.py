# feedback_api/routers/drafts.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from feedback_api.core.config import Settings, get_settings
from feedback_api.core.errors import ValidationError
from feedback_api.schemas.forms import (
    DraftAddQuestionIn,
    DraftChangeTypeIn,
    DraftMoveQuestionIn,
    DraftPreviewIn,
    DraftPreviewOut,
    DraftQuestionsOut,
    DraftRemoveQuestionIn,
)
from feedback_api.services.question_schema import (
    add_question,
    change_question_type,
    move_question,
    remove_question,
    reorder_for_display,
)
from feedback_api.services.validator import validate_form_for_save

# Builder state lives with the client; these endpoints only transform it.
router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.post("/questions/add", response_model=DraftQuestionsOut)
def drafts_add(body: DraftAddQuestionIn, settings: Settings = Depends(get_settings)):
    return {"questions": add_question(body.questions, is_required=settings.required_default_for(body.path))}


@router.post("/questions/remove", response_model=DraftQuestionsOut)
def drafts_remove(body: DraftRemoveQuestionIn):
    return {"questions": remove_question(body.questions, body.question_id)}


@router.post("/questions/move", response_model=DraftQuestionsOut)
def drafts_move(body: DraftMoveQuestionIn):
    return {"questions": move_question(body.questions, body.question_id, body.direction)}


@router.post("/questions/type", response_model=DraftQuestionsOut)
def drafts_change_type(body: DraftChangeTypeIn):
    return {"questions": change_question_type(body.questions, body.question_id, body.question_type)}


@router.post("/preview", response_model=DraftPreviewOut)
def drafts_preview(body: DraftPreviewIn, settings: Settings = Depends(get_settings)):
    draft = body.draft
    error = None
    try:
        validate_form_for_save(draft, settings.min_options_for(body.path))
    except ValidationError as e:
        error = e.message

    return {
        "title": draft.title,
        "description": draft.description,
        "questions": list(reorder_for_display(draft.questions)),
        "valid": error is None,
        "error": error,
    }
