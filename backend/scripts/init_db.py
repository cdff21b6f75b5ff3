"""
Database initialization script.

Creates the master tables (organizations, user accounts) in the master
database and the tenant tables in one or more tenant databases, using the
same connection registry as the API.

Usage:
    python -m scripts.init_db
    python -m scripts.init_db --tenant hoa_nexus_testclient --seed-admin

Environment variables:
    DB_SERVER, DB_USER, DB_PASSWORD, DB_DATABASE, DB_MASTER_DATABASE
"""

import sys
import logging
from pathlib import Path

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from sqlalchemy.exc import SQLAlchemyError

from hoa_nexus.constants.permissions import AccessLevel, StakeholderType
from hoa_nexus.database.registry import get_client_connection, get_master_connection, get_registry
from hoa_nexus.database.session import master_session, tenant_session
from hoa_nexus.db_base import MasterBase, TenantBase
# Import all models to register them with the metadata
import hoa_nexus.models  # noqa: F401
from hoa_nexus.models.organization import Organization
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.services.user_account_service import UserAccountService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@hoanexus.local"
ADMIN_FIRST_NAME = "Admin"
ADMIN_LAST_NAME = "User"


def init_master() -> None:
    """Create master tables if they don't exist."""
    engine = get_master_connection()
    table_names = sorted(MasterBase.metadata.tables.keys())
    logger.info(f"Master tables to create/verify: {', '.join(table_names)}")
    try:
        MasterBase.metadata.create_all(bind=engine)
        logger.info("Master tables created/verified successfully")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create master tables: {e}")
        raise


def init_tenant(database_name: str) -> None:
    """
    Create tenant tables if they don't exist.

    Existing tables are not modified.
    """
    engine = get_client_connection(database_name)
    table_names = sorted(TenantBase.metadata.tables.keys())
    logger.info(f"Tenant tables to create/verify in {database_name}: {', '.join(table_names)}")
    try:
        TenantBase.metadata.create_all(bind=engine)
        logger.info(f"Tenant tables created/verified in {database_name}")
    except SQLAlchemyError as e:
        logger.error(f"Failed to create tenant tables in {database_name}: {e}")
        raise


def seed_admin(database_name: str, organization_name: str) -> None:
    """
    Register the tenant as an organization and create its first admin.

    The admin is a Company Employee with Admin access and portal access
    enabled. The temporary password is printed once; it must be changed on
    first login.
    """
    with master_session() as master_db:
        organization = (
            master_db.query(Organization)
            .filter(Organization.database_name == database_name)
            .first()
        )
        if organization is None:
            organization = Organization(name=organization_name, database_name=database_name)
            master_db.add(organization)
            master_db.commit()
            logger.info(f"Created organization {organization_name} for {database_name}")
        organization_id = organization.id

        with tenant_session(database_name) as tenant_db:
            stakeholder = (
                tenant_db.query(Stakeholder)
                .filter(Stakeholder.email == ADMIN_EMAIL, Stakeholder.is_active == True)
                .first()
            )
            if stakeholder is None:
                stakeholder = Stakeholder(
                    type=StakeholderType.COMPANY_EMPLOYEE.value,
                    access_level=AccessLevel.ADMIN.value,
                    first_name=ADMIN_FIRST_NAME,
                    last_name=ADMIN_LAST_NAME,
                    email=ADMIN_EMAIL,
                    portal_access_enabled=True,
                    is_active=True,
                )
                tenant_db.add(stakeholder)
                tenant_db.commit()
                logger.info(f"Created admin stakeholder {stakeholder.id}")
            stakeholder_id = stakeholder.id

        accounts = UserAccountService(master_db)
        if accounts.find_by_email(ADMIN_EMAIL) is not None:
            logger.info(f"Admin user account already exists: {ADMIN_EMAIL}")
            return

        _, password = accounts.create(
            organization_id=organization_id,
            email=ADMIN_EMAIL,
            stakeholder_id=stakeholder_id,
            first_name=ADMIN_FIRST_NAME,
            last_name=ADMIN_LAST_NAME,
        )
        print(f"Admin login: {ADMIN_EMAIL}")
        print(f"Temporary password: {password}")
        print("The password must be changed on first login.")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Initialize master and tenant databases")
    parser.add_argument(
        "--tenant",
        action="append",
        help="Tenant database to initialize (repeatable, defaults to DB_DATABASE)"
    )
    parser.add_argument(
        "--seed-admin",
        action="store_true",
        help="Create the organization and its first admin user for each tenant"
    )
    parser.add_argument(
        "--organization-name",
        type=str,
        default="HOA Nexus Test Client",
        help="Organization name used with --seed-admin"
    )

    args = parser.parse_args()

    tenants = args.tenant or [get_registry().default_database_name]
    if not all(tenants):
        parser.error("No tenant database given and DB_DATABASE is not set")

    logger.info("Starting database initialization...")
    init_master()
    for database_name in tenants:
        init_tenant(database_name)
        if args.seed_admin:
            seed_admin(database_name, args.organization_name)

    logger.info("Database initialization complete!")


if __name__ == "__main__":
    main()
