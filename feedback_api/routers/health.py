# feedback_api/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from feedback_api.core.config import Settings, get_settings
from feedback_api.services.store import init_db

router = APIRouter(tags=["health"])


@router.get("/health")
def health_root(settings: Settings = Depends(get_settings)):
    # simple liveness + DB init (safe)
    init_db(settings.abs_sqlite_path())
    return {"status": "ok"}
