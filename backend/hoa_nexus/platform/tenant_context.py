"""
Multi-tenant request context for HOA Nexus.

CRITICAL SECURITY REQUIREMENTS:
- The tenant database name is ALWAYS taken from the verified JWT
  (databaseName claim), NEVER from the request body, query or headers
- Requests to protected /api paths without a token return 401
- Requests with an invalid or expired token return 403
- The tenant database name is request-scoped: it is set before downstream
  handlers run and always restored afterwards, so no tenant leaks into a
  later or concurrent request

A token without databaseName is valid; such requests use the default tenant
database.
"""

import logging
from typing import Optional

from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jwt.exceptions import InvalidTokenError

from hoa_nexus.auth.jwt import HoaJWTClaims, decode_access_token
from hoa_nexus.platform.database_context import set_database_name, reset_database_name

logger = logging.getLogger(__name__)

# Security scheme for extracting Bearer token
security = HTTPBearer(auto_error=False)

# Paths that never require a token
PUBLIC_PATHS = frozenset({
    "/",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/api/auth/login",
    "/api/auth/logout",
})


class TenantContext:
    """
    Immutable identity of the authenticated caller, extracted from the JWT.

    database_name is None when the token carries no databaseName; queries then
    run against the default tenant database.
    """

    __slots__ = (
        "_user_id",
        "_username",
        "_stakeholder_id",
        "_stakeholder_type",
        "_sub_type",
        "_access_level",
        "_database_name",
        "_organization_id",
    )

    def __init__(
        self,
        user_id: str,
        username: str,
        stakeholder_id: Optional[int] = None,
        stakeholder_type: Optional[str] = None,
        sub_type: Optional[str] = None,
        access_level: Optional[str] = None,
        database_name: Optional[str] = None,
        organization_id: Optional[str] = None,
    ):
        if not user_id:
            raise ValueError("user_id cannot be empty")
        object.__setattr__(self, "_user_id", user_id)
        object.__setattr__(self, "_username", username)
        object.__setattr__(self, "_stakeholder_id", stakeholder_id)
        object.__setattr__(self, "_stakeholder_type", stakeholder_type)
        object.__setattr__(self, "_sub_type", sub_type)
        object.__setattr__(self, "_access_level", access_level)
        object.__setattr__(self, "_database_name", database_name or None)
        object.__setattr__(self, "_organization_id", organization_id)

    def __setattr__(self, name, value):
        raise AttributeError("TenantContext is immutable")

    @classmethod
    def from_claims(cls, claims: HoaJWTClaims) -> "TenantContext":
        return cls(
            user_id=claims.user_id,
            username=claims.username,
            stakeholder_id=claims.stakeholder_id,
            stakeholder_type=claims.stakeholder_type,
            sub_type=claims.sub_type,
            access_level=claims.access_level,
            database_name=claims.database_name,
            organization_id=claims.organization_id,
        )

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def username(self) -> str:
        return self._username

    @property
    def stakeholder_id(self) -> Optional[int]:
        return self._stakeholder_id

    @property
    def stakeholder_type(self) -> Optional[str]:
        return self._stakeholder_type

    @property
    def sub_type(self) -> Optional[str]:
        return self._sub_type

    @property
    def access_level(self) -> Optional[str]:
        return self._access_level

    @property
    def database_name(self) -> Optional[str]:
        return self._database_name

    @property
    def organization_id(self) -> Optional[str]:
        return self._organization_id

    def __repr__(self) -> str:
        return (
            f"TenantContext(user_id={self._user_id}, "
            f"stakeholder_id={self._stakeholder_id}, database_name={self._database_name})"
        )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def _is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or not path.startswith("/api/")


class TenantContextMiddleware:
    """
    FastAPI middleware that authenticates requests and routes them to the
    tenant database named in the JWT.

    Register with:
        app.middleware("http")(TenantContextMiddleware())

    Errors are returned as JSON responses rather than raised, because
    exceptions raised inside an HTTP middleware bypass FastAPI's
    HTTPException handling.
    """

    async def __call__(self, request: Request, call_next):
        """
        Verify the token, then run the rest of the stack with the tenant
        database name set for this request only.
        """
        path = request.url.path
        if _is_public_path(path):
            return await call_next(request)

        credentials: Optional[HTTPAuthorizationCredentials] = await security(request)

        if not credentials or not credentials.credentials:
            logger.warning("Request missing authorization token", extra={
                "path": path,
                "method": request.method,
            })
            return _error_response(status.HTTP_401_UNAUTHORIZED, "Access token required")

        try:
            claims = decode_access_token(credentials.credentials)
            tenant_context = TenantContext.from_claims(claims)
        except (InvalidTokenError, ValueError) as e:
            logger.warning("JWT verification failed", extra={
                "error": str(e),
                "error_type": type(e).__name__,
                "path": path,
            })
            return _error_response(status.HTTP_403_FORBIDDEN, "Invalid or expired token")

        request.state.tenant_context = tenant_context

        # None clears any inherited value, so requests without the claim use
        # the default tenant.
        token = set_database_name(tenant_context.database_name)
        try:
            logger.info("Request authenticated", extra={
                "user_id": tenant_context.user_id,
                "stakeholder_id": tenant_context.stakeholder_id,
                "database_name": tenant_context.database_name,
                "path": path,
                "method": request.method,
            })
            response = await call_next(request)
        finally:
            reset_database_name(token)

        if tenant_context.database_name:
            response.headers["X-Tenant-Database"] = tenant_context.database_name
        return response


def get_tenant_context(request: Request) -> TenantContext:
    """
    Extract tenant context from request state.

    Raises 401 if the request was not authenticated.
    Use this in route handlers to access the caller's identity.
    """
    tenant_context = getattr(request.state, "tenant_context", None)
    if tenant_context is None:
        logger.error("Route handler accessed without tenant context", extra={
            "path": request.url.path
        })
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return tenant_context
