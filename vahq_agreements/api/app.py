"""FastAPI application factory"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vahq_agreements import __version__
from vahq_agreements.api.routes.agreements import router as agreements_router
from vahq_agreements.api.routes.templates import router as templates_router
from vahq_agreements.api.schemas import HealthResponse
from vahq_agreements.errors import (
    AgreementEngineError,
    ConflictError,
    InvalidOptionError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    SchemaError,
    TypeMismatchError,
    UnsupportedFieldKindError,
)
from vahq_agreements.utils.config import configure_logging, get_settings

logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match wins
ERROR_STATUS = [
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidTransitionError, 409),
    (SchemaError, 422),
    (InvalidOptionError, 422),
    (UnsupportedFieldKindError, 422),
    (TypeMismatchError, 422),
    (PersistenceError, 503),
]


async def engine_error_handler(request: Request, exc: AgreementEngineError) -> JSONResponse:
    """Map engine errors to HTTP status codes"""
    status_code = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        description="Workflow agreement templates, client customization and sign-off",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AgreementEngineError, engine_error_handler)
    app.include_router(templates_router)
    app.include_router(agreements_router)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        from vahq_agreements.db.supabase import get_database

        status = get_database().get_status()
        return HealthResponse(
            status="ok" if status.get("status") == "connected" else "error",
            db_mode=status.get("mode", settings.db_mode),
            version=__version__,
        )

    return app
