# feedback_api/routers/forms.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from feedback_api.core.config import Settings, get_settings
from feedback_api.schemas.forms import ActiveToggleIn, FormDraft, FormListItem, FormWithQuestions
from feedback_api.schemas.responses import ResponsesOut
from feedback_api.services import form_service, store
from feedback_api.services.auth import CurrentUser, get_current_user

router = APIRouter(tags=["forms"])


@router.post("/forms", response_model=FormWithQuestions, status_code=201)
def forms_create(
    body: FormDraft,
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user),
):
    return form_service.create_form(settings, user.id, body)


@router.get("/forms", response_model=List[FormListItem])
def forms_list(settings: Settings = Depends(get_settings), user: CurrentUser = Depends(get_current_user)):
    return [FormListItem(**r) for r in form_service.list_forms(settings, user.id)]


@router.get("/forms/{form_id}", response_model=FormWithQuestions)
def forms_get(form_id: str, settings: Settings = Depends(get_settings), user: CurrentUser = Depends(get_current_user)):
    return form_service.load_owned_form(settings, user.id, form_id)


@router.put("/forms/{form_id}", response_model=FormWithQuestions)
def forms_save(
    form_id: str,
    body: FormDraft,
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user),
):
    return form_service.save_form(settings, user.id, form_id, body)


@router.post("/forms/{form_id}/active", response_model=FormWithQuestions)
def forms_toggle_active(
    form_id: str,
    body: ActiveToggleIn,
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user),
):
    store.set_form_active(settings.abs_sqlite_path(), form_id, user.id, body.is_active)
    return form_service.load_owned_form(settings, user.id, form_id)


@router.delete("/forms/{form_id}")
def forms_delete(form_id: str, settings: Settings = Depends(get_settings), user: CurrentUser = Depends(get_current_user)):
    store.delete_form(settings.abs_sqlite_path(), form_id, user.id)
    return {"status": "ok", "form_id": form_id, "deleted": True}


@router.get("/forms/{form_id}/responses", response_model=ResponsesOut)
def forms_responses(
    form_id: str,
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user),
):
    return form_service.form_responses(settings, user.id, form_id)


@router.get("/forms/{form_id}/responses.csv")
def forms_responses_csv(
    form_id: str,
    settings: Settings = Depends(get_settings),
    user: CurrentUser = Depends(get_current_user),
):
    content, filename = form_service.form_responses_csv(settings, user.id, form_id)
    # header values must stay latin-1
    safe_name = filename.replace('"', "").encode("ascii", "ignore").decode("ascii") or "form-responses.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}"'},
    )
