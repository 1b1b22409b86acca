# feedback_api/routers/public.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from feedback_api.core.config import Settings, get_settings
from feedback_api.schemas.forms import FormWithQuestions
from feedback_api.schemas.responses import SubmissionIn, SubmissionOut
from feedback_api.services import form_service

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/forms/{form_id}", response_model=FormWithQuestions, response_model_exclude={"user_id"})
def public_form(form_id: str, settings: Settings = Depends(get_settings)):
    return form_service.load_public_form(settings, form_id)


@router.post("/forms/{form_id}/responses", response_model=SubmissionOut, status_code=201)
def public_submit(form_id: str, body: SubmissionIn, request: Request, settings: Settings = Depends(get_settings)):
    return form_service.submit_response(
        settings,
        form_id,
        body.answers,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
