"""
Organization lookups against the master database.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from hoa_nexus.database.registry import get_registry
from hoa_nexus.models.organization import Organization
from hoa_nexus.platform.database_context import get_database_name

logger = logging.getLogger(__name__)


class OrganizationService:
    """Resolves organizations from their tenant database names and back."""

    def __init__(self, session: Session):
        """
        Args:
            session: Session bound to the master database
        """
        self.session = session

    def get_by_database_name(self, database_name: str) -> Optional[Organization]:
        if not database_name:
            return None
        return self.session.query(Organization).filter(
            Organization.database_name == database_name,
            Organization.is_active == True,
        ).first()

    def get_active_by_id(self, organization_id: str) -> Optional[Organization]:
        return self.session.query(Organization).filter(
            Organization.id == organization_id,
            Organization.is_active == True,
        ).first()

    def get_organization_id_by_database_name(self, database_name: str) -> Optional[str]:
        """
        Return the OrganizationID owning a tenant database, or None.

        Inactive organizations are treated as missing.
        """
        organization = self.get_by_database_name(database_name)
        if organization is None:
            logger.warning(
                "No active organization for database",
                extra={"database_name": database_name},
            )
            return None
        return organization.id

    def get_current_organization_id(self) -> Optional[str]:
        """
        OrganizationID for the current request's tenant database.

        Falls back to the configured default tenant when no tenant is set.
        """
        database_name = get_database_name() or get_registry().default_database_name
        return self.get_organization_id_by_database_name(database_name)
