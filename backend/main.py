"""
FastAPI application entry point for HOA Nexus.

Multi-tenant routing is enabled via TenantContextMiddleware: every
authenticated request runs against the tenant database named in its JWT
(databaseName claim), or the default tenant database when the claim is
absent.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hoa_nexus.api.routes import (
    amenities,
    assignments,
    auth,
    billing_information,
    board_information,
    commitment_fees,
    communities,
    community_fee_variances,
    dynamic_drop_choices,
    fee_master,
    health,
    management_fees,
    management_team,
    properties,
    stakeholders,
    tickets,
)
from hoa_nexus.config.settings import get_cors_origins, get_database_settings
from hoa_nexus.database.registry import get_connection, get_master_connection, reset_registry
from hoa_nexus.platform.errors import AppError, DatabaseError
from hoa_nexus.platform.tenant_context import TenantContextMiddleware

# Configure structured logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _check_connectivity(get_engine) -> None:
    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting HOA Nexus API", extra={"env": os.getenv("ENV", "development")})

    db_settings = get_database_settings()
    missing = db_settings.missing_required()
    app.state.database_configured = not missing
    if missing:
        logger.error(
            "Database configuration incomplete; tenant requests will fail",
            extra={"missing": missing},
        )
    else:
        logger.info(
            "Database configuration loaded",
            extra={
                "server": db_settings.server,
                "default_database": db_settings.database,
                "master_database": db_settings.master_database,
                "pool_size": db_settings.pool_size,
            },
        )

    # Connectivity checks surface misconfiguration in deploy logs without
    # blocking startup; pools are created lazily again on first use.
    try:
        _check_connectivity(get_master_connection)
        logger.info("Master database connection established")
    except Exception as e:
        logger.error(
            "Master database unreachable; login will fail",
            extra={"error": f"{type(e).__name__}: {e}"},
        )

    try:
        _check_connectivity(get_connection)
        logger.info("Default tenant database connection established")
    except Exception as e:
        logger.warning(
            "Default tenant database unreachable",
            extra={"error": f"{type(e).__name__}: {e}"},
        )

    yield

    # Shutdown
    logger.info("Shutting down HOA Nexus API")
    reset_registry()


# Create FastAPI app
app = FastAPI(
    title="HOA Nexus API",
    description="Multi-tenant HOA management backend with one database per organization",
    version=health.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# CRITICAL: Add tenant context middleware
tenant_middleware = TenantContextMiddleware()
app.middleware("http")(tenant_middleware)

# Health routes (/, /health bypass authentication)
app.include_router(health.router)

# Auth routes (login/logout bypass authentication)
app.include_router(auth.router)

# Tenant resources (require authentication, routed by databaseName)
app.include_router(communities.router)
app.include_router(properties.router)
app.include_router(stakeholders.router)
app.include_router(amenities.router)
app.include_router(assignments.router)
app.include_router(tickets.router)
app.include_router(management_team.router)
app.include_router(management_fees.router)
app.include_router(billing_information.router)
app.include_router(board_information.router)
app.include_router(fee_master.router)
app.include_router(community_fee_variances.router)
app.include_router(commitment_fees.router)
app.include_router(dynamic_drop_choices.router)


def _tenant_database(request: Request):
    tenant_context = getattr(request.state, "tenant_context", None)
    return tenant_context.database_name if tenant_context else None


def _validation_errors(exc: RequestValidationError) -> list:
    return [
        {"location": list(error.get("loc", ())), "message": error.get("msg")}
        for error in exc.errors()
    ]


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    log = logger.warning if exc.is_operational else logger.error
    log(
        "Request failed",
        extra={
            "error": exc.message,
            "error_type": type(exc).__name__,
            "status_code": exc.status_code,
            "database_name": _tenant_database(request),
            "path": request.url.path,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if (
        exc.status_code == status.HTTP_404_NOT_FOUND
        and exc.detail == "Not Found"
        and request.url.path.startswith("/api/")
    ):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "success": False,
                "message": "API route not found",
                "requestedUrl": request.url.path,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid request",
            "errors": _validation_errors(exc),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(
        "Database error",
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "database_name": _tenant_database(request),
            "path": request.url.path,
        },
        exc_info=True,
    )
    error = DatabaseError("The operation could not be completed", original_error=exc)
    return JSONResponse(status_code=error.status_code, content=error.to_response())


# Global exception handler for anything unexpected
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions with proper logging."""
    logger.error(
        "Unhandled exception",
        extra={
            "database_name": _tenant_database(request),
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": "Internal server error",
        }
    )


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 5001))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("ENV") == "development"
    )
