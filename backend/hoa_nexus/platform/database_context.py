"""
Request-scoped tenant database name.

The auth middleware stores the tenant database name taken from the JWT
here, and the connection registry reads it when no explicit name is given.

The value lives in a ContextVar, so each request (asyncio task) sees its own
value and concurrent requests never observe each other's tenant. Values set
before a task or threadpool call is started are inherited by it.

None means "unset": the registry falls back to the default tenant database.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

_database_name: ContextVar[Optional[str]] = ContextVar(
    "hoa_nexus_database_name", default=None
)


def set_database_name(name: Optional[str]) -> Token:
    """
    Set the tenant database name for the current context.

    The name is not validated. Returns a token for reset_database_name().
    """
    return _database_name.set(name)


def get_database_name() -> Optional[str]:
    """Return the current tenant database name, or None if unset."""
    return _database_name.get()


def clear_database_name() -> None:
    """Mark the current context as having no tenant."""
    _database_name.set(None)


def reset_database_name(token: Token) -> None:
    """Restore the value that was current before the matching set call."""
    _database_name.reset(token)


@contextmanager
def database_scope(name: Optional[str]) -> Iterator[None]:
    """
    Run a block with the given tenant database name in context.

    Usage:
        with database_scope("hoa_nexus_acme"):
            engine = get_connection()
    """
    token = set_database_name(name)
    try:
        yield
    finally:
        reset_database_name(token)
