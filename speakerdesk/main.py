"""Application entrypoint: FastAPI app factory and uvicorn runner."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from speakerdesk.api.v1 import get_api_router
from speakerdesk.core.config import Config, get_config
from speakerdesk.core.dependencies import Services, build_services
from speakerdesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    SpeakerdeskError,
    UpstreamServiceError,
    ValidationError,
)
from speakerdesk.core.startup import bootstrap

logger = logging.getLogger(__name__)


def error_status(exc: SpeakerdeskError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, PersistenceError):
        return 404 if exc.error_code == "update_failed" else 500
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, UpstreamServiceError):
        return 502
    return 500


def error_body(error: str, error_code: str, details=None) -> dict:
    body = {"error": error, "error_code": error_code}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SpeakerdeskError)
    async def _speakerdesk_error(request: Request, exc: SpeakerdeskError) -> JSONResponse:
        status_code = error_status(exc)
        if status_code >= 500:
            logger.error(
                "api.request.failed",
                extra={"event": "api.request.failed", "error": str(exc)},
            )
        return JSONResponse(status_code=status_code, content=error_body(str(exc), exc.error_code, exc.details))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = {400: "invalid_input", 401: "unauthenticated", 403: "forbidden", 404: "not_found"}.get(
            exc.status_code, "http_error"
        )
        return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail), code))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"loc": list(item.get("loc", ())), "msg": item.get("msg")}
            for item in exc.errors()
        ]
        return JSONResponse(status_code=400, content=error_body("Invalid request", "invalid_input", details))

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api.request.unhandled", extra={"event": "api.request.unhandled", "error": str(exc)})
        return JSONResponse(status_code=500, content=error_body("Internal server error", "internal_error", str(exc)))


def create_app(config: Config | None = None, services: Services | None = None) -> FastAPI:
    """Create the FastAPI application.

    ``services`` is built from ``config`` unless supplied, which lets tests
    wire their own database, notifier and LLM client.
    """
    cfg = config or get_config()
    services = services or build_services(cfg)
    bootstrap(cfg, services.db_engine)

    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION)
    app.state.services = services
    register_exception_handlers(app)
    app.include_router(get_api_router(cfg.API_PREFIX))

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


def run() -> None:
    cfg = get_config()
    uvicorn.run(create_app(cfg), host=cfg.API_HOST, port=cfg.API_PORT)


if __name__ == "__main__":
    run()
