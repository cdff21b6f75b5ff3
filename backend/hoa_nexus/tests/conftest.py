"""
Root test configuration and fixtures.

Every test runs against a ConnectionRegistry whose engine factory builds an
in-memory SQLite database per database name, so "one database per
organization" is real in tests: org_a and org_b do not share rows.

Fixtures:
- registry: Installed process-wide for the duration of a test
- engine_factory: Records which database names were connected
- make_token / auth_headers: Signed JWTs for the middleware
- client: TestClient around the real application
- make_community / make_stakeholder / make_organization / make_account:
  Row factories that commit and return primary keys
- make_choice: Dropdown choice factory for the tenant database
"""

import os
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

# Set test environment before settings are read
os.environ.setdefault("ENV", "test")
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["BCRYPT_ROUNDS"] = "4"

from hoa_nexus.auth.jwt import create_access_token
from hoa_nexus.config.settings import DatabaseSettings, reset_settings_cache
from hoa_nexus.database.registry import ConnectionRegistry, set_registry
from hoa_nexus.database.session import session_scope
from hoa_nexus.db_base import MasterBase, TenantBase
import hoa_nexus.models  # noqa: F401
from hoa_nexus.models.community import Community
from hoa_nexus.models.dynamic_drop_choice import DynamicDropChoice
from hoa_nexus.models.organization import Organization
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.platform.database_context import clear_database_name
from hoa_nexus.services.user_account_service import UserAccountService

DEFAULT_DATABASE = "hoa_nexus_testclient"
MASTER_DATABASE = "hoa_nexus_master"
TEST_PASSWORD = "Welcome12!Start34"


def pytest_configure(config):
    config.addinivalue_line("markers", "security: tenant isolation and authentication tests")
    config.addinivalue_line("markers", "slow: tests that spin up threads or many engines")


class SqliteEngineFactory:
    """
    Engine factory producing one in-memory SQLite database per name.

    The master database gets the master tables, every other name gets the
    tenant tables.
    """

    def __init__(self, master_database: str = MASTER_DATABASE):
        self.master_database = master_database
        self.calls: List[str] = []
        self.engines: List[Engine] = []

    def __call__(self, database_name: str) -> Engine:
        self.calls.append(database_name)
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        base = MasterBase if database_name == self.master_database else TenantBase
        base.metadata.create_all(engine)
        self.engines.append(engine)
        return engine


@pytest.fixture(autouse=True)
def _fresh_settings_and_context():
    """Re-read settings from the test environment; start with no tenant set."""
    reset_settings_cache()
    clear_database_name()
    yield
    clear_database_name()
    reset_settings_cache()


@pytest.fixture
def db_settings() -> DatabaseSettings:
    return DatabaseSettings(
        server="localhost",
        database=DEFAULT_DATABASE,
        user="sa",
        password="test-password",
        master_database=MASTER_DATABASE,
    )


@pytest.fixture
def engine_factory() -> SqliteEngineFactory:
    return SqliteEngineFactory()


@pytest.fixture
def registry(db_settings, engine_factory):
    """Registry installed process-wide; disposed after the test."""
    registry = ConnectionRegistry(db_settings, engine_factory=engine_factory)
    previous = set_registry(registry)
    yield registry
    set_registry(previous)
    registry.dispose_all()


@pytest.fixture
def app(registry):
    from main import app as application
    return application


@pytest.fixture
def client(app):
    """TestClient without lifespan; pools are created on first use."""
    return TestClient(app)


@pytest.fixture
def make_token():
    """Factory for signed tokens. Claims default to a company admin."""

    def _make_token(**overrides: Any) -> str:
        claims: Dict[str, Any] = {
            "userId": "user-1",
            "username": "admin@hoanexus.local",
            "stakeholderId": 1,
            "type": "Company Employee",
            "subType": None,
            "accessLevel": "Admin",
        }
        claims.update(overrides)
        return create_access_token({k: v for k, v in claims.items() if v is not None})

    return _make_token


@pytest.fixture
def auth_headers(make_token):
    def _auth_headers(**overrides: Any) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(**overrides)}"}

    return _auth_headers


@pytest.fixture
def make_community(registry):
    def _make_community(database_name: Optional[str] = None, **fields: Any) -> int:
        fields.setdefault("name", "Sunset Ridge")
        fields.setdefault("pcode", "SR01")
        with session_scope(registry.get_connection(database_name)) as session:
            community = Community(**fields)
            session.add(community)
            session.commit()
            return community.id

    return _make_community


@pytest.fixture
def make_stakeholder(registry):
    def _make_stakeholder(database_name: Optional[str] = None, **fields: Any) -> int:
        fields.setdefault("type", "Resident")
        fields.setdefault("first_name", "Dana")
        fields.setdefault("last_name", "Owner")
        with session_scope(registry.get_connection(database_name)) as session:
            stakeholder = Stakeholder(**fields)
            session.add(stakeholder)
            session.commit()
            return stakeholder.id

    return _make_stakeholder


@pytest.fixture
def make_organization(registry):
    def _make_organization(database_name: str, name: str = "Test Org", is_active: bool = True) -> str:
        with session_scope(registry.get_master_connection()) as session:
            organization = Organization(name=name, database_name=database_name, is_active=is_active)
            session.add(organization)
            session.commit()
            return organization.id

    return _make_organization


@pytest.fixture
def make_account(registry):
    """Create a master user account with the known TEST_PASSWORD."""

    def _make_account(organization_id: str, email: str, stakeholder_id: Optional[int]) -> str:
        with session_scope(registry.get_master_connection()) as session:
            account, _ = UserAccountService(session).create(
                organization_id=organization_id,
                email=email,
                stakeholder_id=stakeholder_id,
                temp_password=TEST_PASSWORD,
            )
            return account.id

    return _make_account


@pytest.fixture
def make_choice(registry):
    def _make_choice(group_id: str, choice_value: str, database_name: Optional[str] = None, **fields: Any) -> int:
        fields.setdefault("display_order", 0)
        with session_scope(registry.get_connection(database_name)) as session:
            choice = DynamicDropChoice(group_id=group_id, choice_value=choice_value, **fields)
            session.add(choice)
            session.commit()
            return choice.id

    return _make_choice
