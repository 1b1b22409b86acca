# feedback_api/routers/responses.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from feedback_api.core.config import Settings, get_settings
from feedback_api.schemas.responses import DashboardSummary, ResponsesOut
from feedback_api.services import form_service
from feedback_api.services.auth import CurrentUser, get_current_user

router = APIRouter(tags=["responses"])


@router.get("/responses", response_model=ResponsesOut)
def responses_all(
    form_id: Optional[str] = Query(default=None),
    q: str = Query(default=""),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user),
):
    return form_service.owner_responses(settings, user.id, form_id=form_id, search=q)


@router.get("/responses.csv")
def responses_all_csv(
    form_id: Optional[str] = Query(default=None),
    q: str = Query(default=""),
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user),
):
    content = form_service.owner_responses_csv(settings, user.id, form_id=form_id, search=q)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="feedback-responses.csv"'},
    )


@router.get("/dashboard", response_model=DashboardSummary)
def dashboard_summary(settings: Settings = Depends(get_settings), user: CurrentUser = Depends(get_current_user)):
    return form_service.dashboard(settings, user.id)
