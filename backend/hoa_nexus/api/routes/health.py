"""
Health and connectivity endpoints.

GET / and GET /health are public. GET /api/test-db runs SELECT 1 against the
tenant pool resolved for the caller, so it needs a token like any other /api
route.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hoa_nexus.database.registry import get_connection
from hoa_nexus.platform.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def root():
    return {
        "success": True,
        "message": "HOA Nexus API is running!",
        "version": API_VERSION,
        "timestamp": _now(),
    }


@router.get("/health")
async def health_check():
    """Liveness check. Does not touch the database."""
    return {"status": "healthy", "timestamp": _now()}


@router.get("/api/test-db")
def test_database():
    try:
        engine = get_connection()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except (DatabaseConnectionError, SQLAlchemyError) as e:
        logger.error("Database connection test failed", extra={"error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Database connection failed",
                "error": str(e),
            },
        )

    return {
        "success": True,
        "message": "Database connection successful",
        "database": engine.url.database,
        "timestamp": _now(),
    }
