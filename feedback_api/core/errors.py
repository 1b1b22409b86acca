# feedback_api/core/errors.py
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str, param: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.param = param

    @property
    def kind(self) -> str:
        return self.code


class ValidationError(ApiError):
    """User-correctable input problem (empty title, missing required answer, ...)."""

    def __init__(self, message: str, param: str | None = None, missing: Optional[List[int]] = None):
        super().__init__(400, "validation_error", message, param=param)
        self.missing = list(missing or [])


class NotFoundError(ApiError):
    """Absent or not visible to the caller. Access denied looks exactly the same."""

    def __init__(self, message: str = "Not found.", param: str | None = None):
        super().__init__(404, "resource_missing", message, param=param)


class BackendError(ApiError):
    def __init__(self, detail: str | None = None):
        super().__init__(502, "backend_error", "The storage backend failed.")
        self.detail = detail


class AuthError(ApiError):
    def __init__(self, message: str = "Authentication required."):
        super().__init__(401, "authentication_required", message)


def stripe_error(
    code: str,
    message: str,
    param: str | None = None,
    type_: str = "invalid_request_error",
    detail: str | None = None,
):
    body = {
        "error": {
            "type": type_,
            "code": code,
            "message": message,
        }
    }
    if param:
        body["error"]["param"] = param
    if detail:
        body["error"]["detail"] = detail
    return body


def _error_type(exc: ApiError) -> str:
    if isinstance(exc, BackendError):
        return "api_error"
    if isinstance(exc, AuthError):
        return "authentication_error"
    return "invalid_request_error"


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if isinstance(exc, BackendError):
            logger.error("backend failure on %s: %s", request.url.path, exc.detail)
        body = stripe_error(
            exc.code,
            exc.message,
            exc.param,
            type_=_error_type(exc),
            detail=getattr(exc, "detail", None),
        )
        if isinstance(exc, ValidationError) and exc.missing:
            body["error"]["missing"] = exc.missing
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        # keep it safe; do not leak internals in API response
        logger.exception("unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=stripe_error("internal_error", f"{type(exc).__name__}: {exc}", type_="api_error"),
        )
