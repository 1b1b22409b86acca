# feedback_api/services/auth.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from feedback_api.core.errors import AuthError

USER_HEADER = "X-User-Id"


@dataclass
class CurrentUser:
    id: str


def get_current_user(x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER)) -> CurrentUser:
    """
    Identity comes from the gateway in front of the API (it owns sign-in and
    sign-out). Every owner-scoped store call receives this id explicitly.
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthError()
    return CurrentUser(id=user_id)
