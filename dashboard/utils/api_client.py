from __future__ import annotations

from typing import Any, Dict, List, Optional
import requests


def _headers(user_id: str) -> Dict[str, str]:
    return {"X-User-Id": user_id}


def api_get_dashboard(api_base: str, user_id: str) -> Dict[str, Any]:
    r = requests.get(f"{api_base}/dashboard", headers=_headers(user_id), timeout=10)
    r.raise_for_status()
    return r.json()


def api_get_forms(api_base: str, user_id: str) -> List[Dict[str, Any]]:
    r = requests.get(f"{api_base}/forms", headers=_headers(user_id), timeout=10)
    r.raise_for_status()
    return r.json()


def api_set_form_active(api_base: str, user_id: str, form_id: str, is_active: bool) -> Dict[str, Any]:
    r = requests.post(
        f"{api_base}/forms/{form_id}/active",
        json={"is_active": bool(is_active)},
        headers=_headers(user_id),
        timeout=10,
    )
    r.raise_for_status()
    return r.json()


def api_get_responses(
    api_base: str,
    user_id: str,
    form_id: Optional[str] = None,
    q: str = "",
) -> Dict[str, Any]:
    params: Dict[str, Any] = {"q": q}
    if form_id:
        params["form_id"] = form_id
    r = requests.get(f"{api_base}/responses", params=params, headers=_headers(user_id), timeout=20)
    r.raise_for_status()
    return r.json()


def api_get_responses_csv(api_base: str, user_id: str, form_id: Optional[str] = None, q: str = "") -> str:
    params: Dict[str, Any] = {"q": q}
    if form_id:
        params["form_id"] = form_id
    r = requests.get(f"{api_base}/responses.csv", params=params, headers=_headers(user_id), timeout=20)
    r.raise_for_status()
    return r.text


def api_get_form_responses_csv(api_base: str, user_id: str, form_id: str) -> str:
    r = requests.get(f"{api_base}/forms/{form_id}/responses.csv", headers=_headers(user_id), timeout=20)
    r.raise_for_status()
    return r.text
