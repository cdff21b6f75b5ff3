"""
Platform-level modules for multi-tenant request handling and security.

- database_context: Request-scoped tenant database name
- tenant_context: JWT authentication and tenant routing middleware
- rbac: Permission enforcement for routes
- errors: Application error hierarchy
"""

from hoa_nexus.platform.database_context import (
    clear_database_name,
    database_scope,
    get_database_name,
    set_database_name,
)

from hoa_nexus.platform.errors import (
    AppError,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    DatabaseError,
    DatabaseConnectionError,
)

from hoa_nexus.platform.tenant_context import (
    TenantContext,
    TenantContextMiddleware,
    get_tenant_context,
)

from hoa_nexus.platform.rbac import require_permission

__all__ = [
    "clear_database_name",
    "database_scope",
    "get_database_name",
    "set_database_name",
    "AppError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "DatabaseError",
    "DatabaseConnectionError",
    "TenantContext",
    "TenantContextMiddleware",
    "get_tenant_context",
    "require_permission",
]
