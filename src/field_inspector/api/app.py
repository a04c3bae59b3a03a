"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from field_inspector.api.auth import router as auth_router
from field_inspector.api.records import router as records_router
from field_inspector.app_logging import configure_logging
from field_inspector.config import parse_cors_origins
from field_inspector.containers import AppContainer
from field_inspector.domain.errors import FieldInspectorError

SERVICE_NAME = "Field Inspector API"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(container.settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(records_router)

    @app.exception_handler(FieldInspectorError)
    async def handle_domain_error(
        request: Request, exc: FieldInspectorError
    ) -> JSONResponse:
        if exc.status_code >= 500:  # noqa: PLR2004
            logger.error("Request failed: %s", exc.message)
            return _error_response(500, "Internal server error")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request") if errors else None
        return _error_response(400, str(detail or "Invalid request"))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return _error_response(500, "Internal server error")

    @app.get("/health")
    async def health(request: Request) -> dict[str, object]:
        """Health check reporting which backends are active."""
        state_container: AppContainer = request.app.state.container
        return {
            "status": "OK",
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "service": SERVICE_NAME,
            "backends": {
                "auth": state_container.auth_service.external,
                "storage": state_container.photo_service.external,
                "transcription": state_container.transcription_service.external,
                "records": state_container.record_service.external,
            },
        }

    return app


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )
