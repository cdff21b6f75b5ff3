"""
Connection pool registry for multi-tenant database routing.

Each organization has its own SQL Server database. This module keeps one
SQLAlchemy engine (and therefore one connection pool) per database:

- a default engine for the configured default tenant database
- a master engine for the shared master database (organizations, accounts)
- a map of named tenant engines, created on first use

Engines are created lazily, verified with `SELECT 1`, and live until
dispose_all() is called at application shutdown. A failed creation is never
cached, so the next call tries again.

Usage:
    from hoa_nexus.database.registry import get_connection

    engine = get_connection()           # tenant from request context
    engine = get_connection("org_db")   # explicit tenant
"""

import logging
import threading
from typing import Callable, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from hoa_nexus.config.settings import DatabaseSettings, get_database_settings
from hoa_nexus.platform.database_context import get_database_name
from hoa_nexus.platform.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str], Engine]

_DEFAULT_SLOT = ("default",)
_MASTER_SLOT = ("master",)


class ConnectionRegistry:
    """
    Keyed cache of engines, one per database name.

    The default and master engines are held in their own slots. The master
    engine is never looked up in (or stored into) the tenant map, so it stays
    a distinct pool even if a tenant database has the same name.

    Creation is serialized per key: concurrent first requests for the same
    database create exactly one engine, while different databases can be
    created in parallel.
    """

    def __init__(
        self,
        settings: DatabaseSettings,
        engine_factory: Optional[EngineFactory] = None,
    ):
        """
        Args:
            settings: Connection settings shared by all pools
            engine_factory: Builds an engine for a database name. Defaults to
                a pooled mssql+pyodbc engine built from settings.
        """
        self._settings = settings
        self._engine_factory = engine_factory or self._create_sqlserver_engine
        self._default_engine: Optional[Engine] = None
        self._master_engine: Optional[Engine] = None
        self._client_engines: dict[str, Engine] = {}
        self._slot_locks: dict[tuple, threading.Lock] = {}
        self._lock = threading.Lock()

    @property
    def default_database_name(self) -> Optional[str]:
        return self._settings.default_database

    @property
    def master_database_name(self) -> str:
        return self._settings.master_database

    @property
    def client_database_names(self) -> frozenset:
        """Names that currently have a cached tenant engine."""
        with self._lock:
            return frozenset(self._client_engines)

    def get_connection(self, name_override: Optional[str] = None) -> Engine:
        """
        Resolve the engine for the current request.

        Resolution order:
        1. name_override, when given
        2. tenant database name from the request context
        3. configured default database

        Empty names count as "not given" and fall through to the next source.
        """
        name = name_override or get_database_name() or self.default_database_name
        if name == self.default_database_name:
            return self.get_default_connection()
        return self.get_client_connection(name)

    def get_default_connection(self) -> Engine:
        """Return the singleton engine for the default tenant database."""
        if self._default_engine is not None:
            return self._default_engine

        database_name = self.default_database_name
        if not database_name:
            logger.error("Default database is not configured (DB_DATABASE)")
            raise DatabaseConnectionError(None)

        with self._get_slot_lock(_DEFAULT_SLOT):
            if self._default_engine is None:
                self._default_engine = self._create_engine(database_name)
        return self._default_engine

    def get_client_connection(self, database_name: str) -> Engine:
        """
        Return the engine for a named tenant database, creating it if needed.

        The default database name is redirected to the default engine and
        never gets an entry in the tenant map. The name is not validated;
        a bad name fails when the driver connects.
        """
        if database_name == self.default_database_name:
            return self.get_default_connection()

        engine = self._client_engines.get(database_name)
        if engine is not None:
            return engine

        with self._get_slot_lock(("client", database_name)):
            engine = self._client_engines.get(database_name)
            if engine is None:
                engine = self._create_engine(database_name)
                with self._lock:
                    self._client_engines[database_name] = engine
                logger.info(
                    "Tenant connection pool cached",
                    extra={
                        "database_name": database_name,
                        "cached_pools": len(self._client_engines),
                    },
                )
        return engine

    def get_master_connection(self) -> Engine:
        """Return the singleton engine for the master database."""
        if self._master_engine is not None:
            return self._master_engine

        with self._get_slot_lock(_MASTER_SLOT):
            if self._master_engine is None:
                self._master_engine = self._create_engine(self.master_database_name)
        return self._master_engine

    def dispose_all(self) -> None:
        """Close every pool. Later calls create fresh engines."""
        with self._lock:
            engines = list(self._client_engines.values())
            self._client_engines.clear()
            for engine in (self._default_engine, self._master_engine):
                if engine is not None:
                    engines.append(engine)
            self._default_engine = None
            self._master_engine = None

        for engine in engines:
            engine.dispose()
        logger.info("Disposed database connection pools", extra={"pool_count": len(engines)})

    def _get_slot_lock(self, slot: tuple) -> threading.Lock:
        with self._lock:
            lock = self._slot_locks.get(slot)
            if lock is None:
                lock = threading.Lock()
                self._slot_locks[slot] = lock
            return lock

    def _create_engine(self, database_name: str) -> Engine:
        """
        Build an engine and verify it can reach the database.

        Raises:
            DatabaseConnectionError: If the engine cannot be created or the
                SELECT 1 check fails. Nothing is cached in that case.
        """
        engine = None
        try:
            engine = self._engine_factory(database_name)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            if engine is not None:
                engine.dispose()
            logger.error(
                "Failed to connect to database",
                extra={
                    "database_name": database_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            raise DatabaseConnectionError(database_name, original_error=e) from e

        logger.info(
            "Database engine created with connection pooling",
            extra={"database_name": database_name},
        )
        return engine

    def _create_sqlserver_engine(self, database_name: str) -> Engine:
        settings = self._settings
        return create_engine(
            settings.build_url(database_name),
            poolclass=QueuePool,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_pre_ping=True,  # Verify connection health
            pool_recycle=settings.pool_recycle,
        )


# Process-wide registry, built lazily from environment settings
_registry: Optional[ConnectionRegistry] = None
_registry_lock = threading.Lock()


def get_registry() -> ConnectionRegistry:
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = ConnectionRegistry(get_database_settings())
    return _registry


def set_registry(registry: Optional[ConnectionRegistry]) -> Optional[ConnectionRegistry]:
    """Install a registry (tests, custom startup). Returns the previous one."""
    global _registry
    with _registry_lock:
        previous = _registry
        _registry = registry
    return previous


def reset_registry() -> None:
    """Dispose the current registry's pools and drop it."""
    previous = set_registry(None)
    if previous is not None:
        previous.dispose_all()


def get_connection(name_override: Optional[str] = None) -> Engine:
    return get_registry().get_connection(name_override)


def get_client_connection(database_name: str) -> Engine:
    return get_registry().get_client_connection(database_name)


def get_master_connection() -> Engine:
    return get_registry().get_master_connection()
