from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from socialfeed.core.normalize import first_error_message
from socialfeed.core.observability import setup_logging
from socialfeed.core.settings import Settings
from socialfeed.core.tables import Tables, build_tables
from socialfeed.errors import GENERIC_SERVER_MESSAGE
from socialfeed.metrics import metrics_endpoint, metrics_middleware, set_app_info
from socialfeed.models import ErrorEnvelope, envelope_body
from socialfeed.routers.comments import router as comments_router
from socialfeed.routers.posts import router as posts_router
from socialfeed.routers.user import router as user_router

logger = logging.getLogger(__name__)


def error_response(code: int, message: Any) -> JSONResponse:
    if not isinstance(message, str):
        message = GENERIC_SERVER_MESSAGE if code >= 500 else str(message)
    env = ErrorEnvelope(message=message, code=code)
    return JSONResponse(status_code=code, content=envelope_body(env))


async def http_exception_handler(request: Request, exc: HTTPException):
    if exc.status_code >= 500:
        logger.error("request failed", extra={"path": request.url.path, "status": exc.status_code})
    resp = error_response(exc.status_code, exc.detail)
    if exc.headers:
        resp.headers.update(exc.headers)
    return resp


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = first_error_message(exc.errors()) or "Invalid request"
    return error_response(400, message)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled error",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"path": request.url.path, "method": request.method},
    )
    return error_response(500, GENERIC_SERVER_MESSAGE)


def create_app(settings: Optional[Settings] = None, tables: Optional[Tables] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(title="socialfeed", version="0.1.0")
    app.state.settings = settings
    app.state.tables = tables if tables is not None else build_tables(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.metrics_enabled:
        app.middleware("http")(metrics_middleware)
        set_app_info(app.title, app.version)
        app.get("/metrics", include_in_schema=False)(metrics_endpoint)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(posts_router)
    app.include_router(comments_router)
    app.include_router(user_router)

    return app
