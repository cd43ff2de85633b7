"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from legal_compliance import __version__
from legal_compliance.api.deps import get_db
from legal_compliance.api.routes.attestation import router as attestation_router
from legal_compliance.api.routes.consent import router as consent_router
from legal_compliance.api.schemas import ErrorResponse, HealthResponse
from legal_compliance.db import DatabaseInterface, get_database
from legal_compliance.errors import ComplianceError, ValidationError
from legal_compliance.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    get_database().init_db()
    yield


async def compliance_error_handler(request: Request, exc: ComplianceError) -> JSONResponse:
    """Translate service errors into their HTTP status with a JSON body"""
    body = ErrorResponse(detail=exc.message)
    if isinstance(exc, ValidationError):
        body.violations = exc.violations
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters get the same error shape"""
    return await compliance_error_handler(request, ValidationError.from_errors("Request", exc.errors()))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    setup_logging()
    app = FastAPI(
        title="Legal Compliance API",
        description="Lawyer attestations and client consent with an append-only audit trail",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ComplianceError, compliance_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(attestation_router)
    app.include_router(consent_router)

    @app.get("/api/health", response_model=HealthResponse)
    def health(db: DatabaseInterface = Depends(get_db)):
        status = db.get_status()
        return HealthResponse(
            status="ok" if status.get("status") == "connected" else "error",
            db_mode=status.get("mode", "unknown"),
            version=__version__,
        )

    return app
