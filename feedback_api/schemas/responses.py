# feedback_api/schemas/responses.py
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from feedback_api.schemas.forms import QuestionType


class SubmissionIn(BaseModel):
    """
    Input schema for POST /public/forms/{form_id}/responses
    answers: question id -> raw value (ratings and choices arrive as strings)
    """
    answers: Dict[str, str] = Field(default_factory=dict)


class Response(BaseModel):
    id: str
    object: Literal["response"] = "response"
    form_id: str
    submitted_at: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class AnswerItem(BaseModel):
    """Stored answer joined with its question."""
    id: str
    question_id: str
    answer_text: str
    question_text: str = ""
    question_type: QuestionType = "text"
    order_index: int = 0


class ResponseWithAnswers(Response):
    form_title: str = ""
    answers: List[AnswerItem] = Field(default_factory=list)


class SubmissionOut(BaseModel):
    status: Literal["ok"] = "ok"
    response_id: str
    form_id: str
    answers_saved: int


class DailyCount(BaseModel):
    date: str
    count: int


class ResponseStats(BaseModel):
    total_responses: int
    avg_rating: float
    this_week: Optional[int] = None


class ResponsesOut(BaseModel):
    items: List[ResponseWithAnswers]
    stats: ResponseStats


class TopForm(BaseModel):
    id: str
    title: str
    responses: int


class RecentForm(BaseModel):
    id: str
    title: str
    responses: int
    created: str


class DashboardSummary(BaseModel):
    total_forms: int
    total_responses: int
    this_month: int
    avg_responses_per_form: float
    active_forms_count: int
    avg_rating: float
    top_performing_form: Optional[TopForm] = None
    trend: List[DailyCount] = Field(default_factory=list)
    recent_forms: List[RecentForm] = Field(default_factory=list)
