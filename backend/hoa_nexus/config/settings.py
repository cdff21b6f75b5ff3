"""
Environment-driven configuration for HOA Nexus.

All values are read from environment variables once and cached. Call
reset_settings_cache() after changing the environment (tests only).

Database variables:
    DB_SERVER, DB_PORT, DB_USER, DB_PASSWORD: SQL Server connection
    DB_DATABASE: Default tenant database (used when a request has no tenant)
    DB_MASTER_DATABASE: Master database holding organizations and accounts
    DB_ENCRYPT, DB_TRUST_SERVER_CERTIFICATE: TLS options
    DB_ODBC_DRIVER: ODBC driver name passed to pyodbc

Auth variables:
    JWT_SECRET, JWT_EXPIRES_IN (e.g. "24h"), BCRYPT_ROUNDS
"""

import os
import re
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from sqlalchemy.engine import URL

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "hoa-nexus-default-secret-change-in-production"
DEFAULT_MASTER_DATABASE = "hoa_nexus_master"
DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"

# Local frontend dev servers
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3007",
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:5175",
    "http://localhost:5176",
    "http://localhost:5177",
    "http://localhost:5178",
]

_REQUIRED_DB_VARS = ("DB_SERVER", "DB_DATABASE", "DB_USER", "DB_PASSWORD")

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(
            "Invalid integer in environment, using default",
            extra={"variable": name, "default": default},
        )
        return default


def parse_duration(value: str) -> int:
    """
    Parse a duration like "24h", "30m", "7d" or "3600" into seconds.

    Raises:
        ValueError: If the value is not a recognised duration
    """
    match = re.fullmatch(r"\s*(\d+)\s*([smhd]?)\s*", value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _DURATION_UNITS[unit or "s"]


@dataclass(frozen=True)
class DatabaseSettings:
    """SQL Server connection settings shared by every pool."""

    server: Optional[str]
    database: Optional[str]
    user: Optional[str]
    password: Optional[str]
    master_database: str = DEFAULT_MASTER_DATABASE
    port: int = 1433
    encrypt: bool = False
    trust_server_certificate: bool = False
    odbc_driver: str = DEFAULT_ODBC_DRIVER
    pool_size: int = 10
    max_overflow: int = 0
    pool_recycle: int = 1800

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        return cls(
            server=os.getenv("DB_SERVER"),
            database=os.getenv("DB_DATABASE"),
            user=os.getenv("DB_USER"),
            password=os.getenv("DB_PASSWORD"),
            master_database=os.getenv("DB_MASTER_DATABASE", DEFAULT_MASTER_DATABASE),
            port=_env_int("DB_PORT", 1433),
            encrypt=_env_bool("DB_ENCRYPT", False),
            trust_server_certificate=_env_bool("DB_TRUST_SERVER_CERTIFICATE", False),
            odbc_driver=os.getenv("DB_ODBC_DRIVER", DEFAULT_ODBC_DRIVER),
            pool_size=_env_int("DB_POOL_SIZE", 10),
            max_overflow=_env_int("DB_POOL_MAX_OVERFLOW", 0),
            pool_recycle=_env_int("DB_POOL_RECYCLE_SECONDS", 1800),
        )

    @property
    def default_database(self) -> Optional[str]:
        """Name of the tenant database used when no tenant is in context."""
        return self.database

    def missing_required(self) -> list[str]:
        """Return the names of required variables that are not set."""
        values = {
            "DB_SERVER": self.server,
            "DB_DATABASE": self.database,
            "DB_USER": self.user,
            "DB_PASSWORD": self.password,
        }
        return [name for name in _REQUIRED_DB_VARS if not values[name]]

    def build_url(self, database: str) -> URL:
        """
        Build the SQLAlchemy URL for one database on the configured server.

        Every pool shares host, credentials and TLS options; only the
        database name differs.
        """
        query = {
            "driver": self.odbc_driver,
            "Encrypt": "yes" if self.encrypt else "no",
            "TrustServerCertificate": "yes" if self.trust_server_certificate else "no",
        }
        return URL.create(
            "mssql+pyodbc",
            username=self.user,
            password=self.password,
            host=self.server,
            port=self.port,
            database=database,
            query=query,
        )


@dataclass(frozen=True)
class AuthSettings:
    """JWT and password hashing settings."""

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_in: int = 24 * 3600
    bcrypt_rounds: int = 12

    @classmethod
    def from_env(cls) -> "AuthSettings":
        secret = os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET
        if secret == DEFAULT_JWT_SECRET and os.getenv("ENV", "development") == "production":
            logger.warning("JWT_SECRET is not set; using the development default")
        return cls(
            jwt_secret=secret,
            jwt_expires_in=parse_duration(os.getenv("JWT_EXPIRES_IN", "24h")),
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 12),
        )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings.from_env()


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    return AuthSettings.from_env()


def reset_settings_cache() -> None:
    """Drop cached settings so the next call re-reads the environment."""
    get_database_settings.cache_clear()
    get_auth_settings.cache_clear()


def get_cors_origins() -> list[str]:
    """
    Allowed CORS origins.

    Local dev ports are always allowed; FRONTEND_URL and the comma separated
    CORS_ORIGINS list are appended when set.
    """
    origins = list(DEFAULT_CORS_ORIGINS)
    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url:
        origins.append(frontend_url.rstrip("/"))
    extra = os.getenv("CORS_ORIGINS", "")
    origins.extend(o.strip() for o in extra.split(",") if o.strip())
    # Preserve order, drop duplicates
    return list(dict.fromkeys(origins))
