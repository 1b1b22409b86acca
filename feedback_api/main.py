# feedback_api/main.py
from fastapi import FastAPI

from feedback_api.core.config import get_settings
from feedback_api.core.errors import register_exception_handlers
from feedback_api.core.logging import setup_logging, RequestIdMiddleware

from feedback_api.routers.health import router as health_router
from feedback_api.routers.forms import router as forms_router
from feedback_api.routers.public import router as public_router
from feedback_api.routers.responses import router as responses_router
from feedback_api.routers.drafts import router as drafts_router


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings)

    app = FastAPI(title="Feedback Forms API")

    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(forms_router)
    app.include_router(public_router)
    app.include_router(responses_router)
    app.include_router(drafts_router)

    return app


app = create_app()
