"""
Database session management on top of the connection registry.

Provides FastAPI dependencies for tenant and master sessions. The tenant
session is bound to whichever engine the registry resolves for the current
request (JWT databaseName, or the default tenant).

Usage:
    from hoa_nexus.database.session import get_tenant_session

    @router.get("/items")
    def get_items(db: Session = Depends(get_tenant_session)):
        return db.query(Item).all()
"""

import logging
from contextlib import contextmanager
from typing import Generator, Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from hoa_nexus.database.registry import get_connection, get_master_connection

logger = logging.getLogger(__name__)

# Configured once, bound per call since every tenant has its own engine
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """
    Open a session on the given engine and always close it.

    Uncommitted work is rolled back if the block raises.
    """
    session = SessionLocal(bind=engine)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def tenant_session(database_name: Optional[str] = None) -> Iterator[Session]:
    """Session for a tenant database (explicit name, request context, or default)."""
    with session_scope(get_connection(database_name)) as session:
        yield session


@contextmanager
def master_session() -> Iterator[Session]:
    """Session for the master database."""
    with session_scope(get_master_connection()) as session:
        yield session


def get_tenant_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency for the current request's tenant database.

    A plain generator, so FastAPI resolves it in the threadpool and a slow
    pool creation for one tenant never holds up the event loop.

    Raises DatabaseConnectionError (503) if the tenant pool cannot be created.
    """
    with tenant_session() as session:
        yield session


def get_master_session() -> Generator[Session, None, None]:
    """FastAPI dependency for the master database."""
    with master_session() as session:
        yield session
