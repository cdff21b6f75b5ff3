"""
Permission enforcement for HOA Nexus routes.

CRITICAL SECURITY REQUIREMENTS:
- Permissions MUST be enforced server-side for every protected endpoint
- UI permission gating is NOT security; treat it as UX only
- All decisions come from constants.permissions.check_user_permission

Usage:
    from hoa_nexus.platform.rbac import require_permission

    @router.delete("/{community_id}")
    @require_permission(Action.DELETE, "communities")
    def delete_community(request: Request, community_id: int):
        ...
"""

import inspect
import logging
from functools import wraps
from typing import Callable, Optional, Union

from fastapi import Request, HTTPException, status

from hoa_nexus.constants.permissions import Action, check_user_permission
from hoa_nexus.platform.tenant_context import get_tenant_context

logger = logging.getLogger(__name__)


def _get_request_from_args(args, kwargs) -> Request:
    """Extract Request object from function arguments."""
    for arg in args:
        if isinstance(arg, Request):
            return arg
    if "request" in kwargs:
        return kwargs["request"]
    raise ValueError("Request object not found in function arguments")


def _check_permission(request: Request, action_name: str, resource: Optional[str]) -> None:
    tenant_context = get_tenant_context(request)

    if not check_user_permission(tenant_context, action_name, resource):
        logger.warning(
            "Permission denied",
            extra={
                "user_id": tenant_context.user_id,
                "action": action_name,
                "resource": resource,
                "user_type": tenant_context.stakeholder_type,
                "access_level": tenant_context.access_level,
                "path": request.url.path,
                "method": request.method,
            }
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions"
        )


def require_permission(action: Union[Action, str], resource: Optional[str] = None) -> Callable:
    """
    Decorator to require permission for an action on an endpoint.

    Raises 401 if the request is unauthenticated and 403 if the caller's
    stakeholder classification does not allow the action.

    Works on both sync and async endpoints. Sync endpoints keep a sync
    wrapper so FastAPI still runs them in its threadpool.

    Args:
        action: Action being performed (view, create, edit, delete, admin)
        resource: Optional resource name (vendors are limited to "own-tickets")
    """
    action_name = action.value if isinstance(action, Action) else action

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                _check_permission(_get_request_from_args(args, kwargs), action_name, resource)
                return await func(*args, **kwargs)
            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            _check_permission(_get_request_from_args(args, kwargs), action_name, resource)
            return func(*args, **kwargs)
        return wrapper
    return decorator
