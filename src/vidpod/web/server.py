"""
Web server for VidPOD.

Provides the FastAPI application serving the rundown JSON API. Collaborators
(identity provider, class roster, story repository, document renderer) are
attached to ``app.state`` so tests and deployments can swap them.
"""

from __future__ import annotations

from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..adapters.renderers.text_renderer import PlainTextRenderer
from ..adapters.yaml_directory import YamlDirectory
from ..core.access import AccessEvaluator
from ..domain.interfaces import ClassRoster, DocumentRenderer, IdentityProvider, StoryRepository
from ..infra.exceptions import (
    AccessDeniedError,
    ConflictError,
    InvalidArgumentError,
    InvalidReorderSetError,
    LimitReachedError,
    NotFoundError,
    UnauthenticatedError,
    VidpodError,
)
from ..infra.logging import configure_logging, get_logger
from ..infra.settings import settings
from .api.rundowns import router as rundowns_router

_log = get_logger(__name__)

# Error kind -> HTTP status
STATUS_BY_ERROR: dict[type[VidpodError], int] = {
    NotFoundError: 404,
    AccessDeniedError: 403,
    UnauthenticatedError: 401,
    InvalidArgumentError: 400,
    InvalidReorderSetError: 400,
    LimitReachedError: 400,
    ConflictError: 409,
}


def _error_body(kind: str, message: str, **extra) -> dict:
    return {"error": {"kind": kind, "message": message, **extra}}


async def _vidpod_error_handler(request: Request, exc: VidpodError) -> JSONResponse:
    status = STATUS_BY_ERROR.get(type(exc), 400)
    extra = {}
    if isinstance(exc, InvalidReorderSetError):
        extra = {"missing": exc.missing, "unexpected": exc.unexpected}
    _log.info("request_rejected", path=request.url.path, kind=exc.kind, status=status)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(
        status_code=status, content=_error_body(exc.kind, exc.message, **extra), headers=headers
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content=_error_body(InvalidArgumentError.kind, problems or "Invalid request"),
    )


async def _store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    _log.error("store_failure", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content=_error_body("internal", "Internal error"))


def _default_directory() -> YamlDirectory:
    if not settings.directory_file:
        raise RuntimeError("DIRECTORY_FILE is not set; cannot resolve identities, classes or stories")
    return YamlDirectory(Path(settings.directory_file))


def create_app(
    *,
    identity: IdentityProvider | None = None,
    roster: ClassRoster | None = None,
    stories: StoryRepository | None = None,
    renderer: DocumentRenderer | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Missing collaborators fall back to a YamlDirectory read from DIRECTORY_FILE
    and the plain-text renderer.
    """
    if identity is None or roster is None or stories is None:
        directory = _default_directory()
        identity = identity or directory
        roster = roster or directory
        stories = stories or directory

    app = FastAPI(title="VidPOD Rundown API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.identity = identity
    app.state.access = AccessEvaluator(roster)
    app.state.stories = stories
    app.state.renderer = renderer or PlainTextRenderer()

    app.add_exception_handler(VidpodError, _vidpod_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, _store_error_handler)

    app.include_router(rundowns_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


def run_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    configure_logging()
    app = create_app()
    _log.info("server_starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port)


__all__ = ["STATUS_BY_ERROR", "create_app", "run_server"]
