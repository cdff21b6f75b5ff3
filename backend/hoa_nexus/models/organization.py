"""
Organization model (master database).

An organization is one management company. Its DatabaseName points to the
tenant database that holds all of its communities, properties and
stakeholders; the auth flow puts this name into the JWT as databaseName.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, func

from hoa_nexus.db_base import MasterBase
from hoa_nexus.models.base import SerializableMixin


class Organization(MasterBase, SerializableMixin):
    """Management organization and the tenant database it owns."""

    __tablename__ = "cor_Organizations"

    id = Column(
        "OrganizationID",
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="Organization GUID",
    )

    name = Column("Name", String(255), nullable=False)

    database_name = Column(
        "DatabaseName",
        String(100),
        nullable=False,
        unique=True,
        index=True,
        comment="Physical tenant database for this organization",
    )

    is_active = Column("IsActive", Boolean, nullable=False, default=True)

    created_on = Column("CreatedOn", DateTime, nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, database_name={self.database_name})>"
