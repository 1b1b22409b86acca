# feedback_api/schemas/forms.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

QuestionType = Literal["text", "multiple_choice", "rating"]
SavePath = Literal["create", "edit"]
Direction = Literal["up", "down"]


class Question(BaseModel):
    """
    One prompt within a form. `id` is a temporary token ("temp-...") while the
    question only lives in a draft; stored questions carry the store's id.
    """
    id: str
    form_id: Optional[str] = None
    question_text: str = ""
    question_type: QuestionType = "text"
    options: List[str] = Field(default_factory=list)
    is_required: bool = True
    order_index: int = 0


class Form(BaseModel):
    id: str
    object: Literal["form"] = "form"
    user_id: str
    title: str
    description: str = ""
    is_active: bool = True
    created_at: str
    updated_at: Optional[str] = None


class FormDraft(BaseModel):
    """Editable form state as the builder holds it before a save."""
    title: str = ""
    description: str = ""
    is_active: bool = True
    questions: List[Question] = Field(default_factory=list)


class FormWithQuestions(Form):
    questions: List[Question] = Field(default_factory=list)
    public_url: Optional[str] = None


class FormListItem(BaseModel):
    id: str
    title: str
    description: str = ""
    is_active: bool
    status: Literal["active", "draft"]
    created_at: str
    responses: int = 0
    public_url: str


class ActiveToggleIn(BaseModel):
    is_active: bool


# -------------------------
# Stateless draft edits
# -------------------------
class DraftAddQuestionIn(BaseModel):
    questions: List[Question] = Field(default_factory=list)
    path: SavePath = "create"


class DraftRemoveQuestionIn(BaseModel):
    questions: List[Question]
    question_id: str


class DraftMoveQuestionIn(BaseModel):
    questions: List[Question]
    question_id: str
    direction: Direction


class DraftChangeTypeIn(BaseModel):
    questions: List[Question]
    question_id: str
    question_type: QuestionType


class DraftPreviewIn(BaseModel):
    draft: FormDraft
    path: SavePath = "create"


class DraftQuestionsOut(BaseModel):
    questions: List[Question]


class DraftPreviewOut(BaseModel):
    title: str
    description: str
    questions: List[Question]
    valid: bool
    error: Optional[str] = None
