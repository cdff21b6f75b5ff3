"""
Tests for environment-driven configuration.
"""

import pytest

from hoa_nexus.config.settings import (
    DEFAULT_CORS_ORIGINS,
    DEFAULT_MASTER_DATABASE,
    DatabaseSettings,
    get_auth_settings,
    get_cors_origins,
    get_database_settings,
    parse_duration,
    reset_settings_cache,
)


class TestParseDuration:
    @pytest.mark.parametrize("value,seconds", [
        ("3600", 3600),
        ("45s", 45),
        ("30m", 1800),
        ("24h", 86400),
        ("7d", 604800),
    ])
    def test_valid(self, value, seconds):
        assert parse_duration(value) == seconds

    @pytest.mark.parametrize("value", ["", "h", "1w", "-5m", "ten"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestDatabaseSettings:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DB_SERVER", "sql.internal")
        monkeypatch.setenv("DB_DATABASE", "hoa_default")
        monkeypatch.setenv("DB_USER", "svc")
        monkeypatch.setenv("DB_PASSWORD", "pw")
        monkeypatch.setenv("DB_ENCRYPT", "true")
        monkeypatch.delenv("DB_MASTER_DATABASE", raising=False)
        monkeypatch.setenv("DB_POOL_SIZE", "not-a-number")
        reset_settings_cache()

        settings = get_database_settings()
        assert settings.default_database == "hoa_default"
        assert settings.master_database == DEFAULT_MASTER_DATABASE
        assert settings.encrypt is True
        assert settings.pool_size == 10
        assert settings.missing_required() == []

    def test_missing_required(self):
        settings = DatabaseSettings(server="sql", database=None, user=None, password="pw")
        assert settings.missing_required() == ["DB_DATABASE", "DB_USER"]

    def test_build_url_varies_only_by_database(self):
        settings = DatabaseSettings(server="sql", database="hoa_default", user="svc", password="pw")
        url_a = settings.build_url("org_a")
        url_b = settings.build_url("org_b")

        assert url_a.drivername == "mssql+pyodbc"
        assert url_a.database == "org_a"
        assert url_b.database == "org_b"
        assert url_a.host == url_b.host == "sql"
        assert url_a.port == 1433
        assert url_a.query["Encrypt"] == "no"
        assert url_a.query["driver"] == "ODBC Driver 18 for SQL Server"

    def test_settings_are_cached(self):
        assert get_database_settings() is get_database_settings()


class TestAuthSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("JWT_EXPIRES_IN", "2h")
        reset_settings_cache()
        settings = get_auth_settings()
        assert settings.jwt_secret == "test-jwt-secret"
        assert settings.jwt_expires_in == 7200
        assert settings.bcrypt_rounds == 4


class TestCorsOrigins:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FRONTEND_URL", raising=False)
        monkeypatch.delenv("CORS_ORIGINS", raising=False)
        assert get_cors_origins() == DEFAULT_CORS_ORIGINS

    def test_extra_origins_without_duplicates(self, monkeypatch):
        monkeypatch.setenv("FRONTEND_URL", "https://portal.example.test/")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.test, http://localhost:3000 ,")
        origins = get_cors_origins()
        assert origins[-2:] == ["https://portal.example.test", "https://a.test"]
        assert origins.count("http://localhost:3000") == 1
