import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from agenda.agendamentos.router import router as agendamentos_router
from agenda.auth.router import router as auth_router
from agenda.core.config import settings
from agenda.core.errors import AgendaError
from agenda.db.init_db import build_repository, init_storage
from agenda.db.repository import Repository
from agenda.users.router import router as users_router

if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

logger = logging.getLogger("agenda")


def _error_body(message: str, code: str, **extra) -> dict:
    return {"error": message, "code": code, **extra}


async def agenda_error_handler(request: Request, exc: AgendaError):
    if exc.status_code >= 500:
        logger.error("erro interno path=%s: %s", request.url.path, exc.message, exc_info=exc)
    body = _error_body(exc.message, exc.code)
    if getattr(exc, "fields", None):
        body["fields"] = exc.fields
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    logger.info("validation error path=%s details=%s", request.url.path, details)
    return JSONResponse(
        status_code=400,
        content=_error_body("Dados invalidos", "ValidationError", details=details),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), "HTTPError"),
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Erro inesperado path=%s", request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Erro interno do servidor", "InternalError"))


def create_app(repository: Optional[Repository] = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Agenda de medicoes - agendamentos e usuarios",
    )
    app.state.repository = repository

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AgendaError, agenda_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    @app.on_event("startup")
    def on_startup() -> None:
        if app.state.repository is None:
            app.state.repository = build_repository(settings)
        init_storage(app.state.repository, settings)
        if settings.ENV.lower() == "production":
            if settings.SECRET_KEY == "dev-secret-change-me":
                logger.warning("SECRET_KEY esta usando valor padrao em producao.")
            if "*" in settings.BACKEND_CORS_ORIGINS:
                logger.warning("BACKEND_CORS_ORIGINS libera qualquer origem em producao.")
        logger.info("storage backend=%s", app.state.repository.backend_name)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(users_router, prefix=settings.API_PREFIX)
    app.include_router(agendamentos_router, prefix=settings.API_PREFIX)

    @app.get(f"{settings.API_PREFIX}/health")
    def health(request: Request):
        repository = request.app.state.repository
        return {"status": "ok", "storage": repository.backend_name if repository else None}

    return app


app = create_app()
