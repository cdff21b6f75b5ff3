"""
Stakeholder model, tenant database.

A stakeholder is anyone involved with a community: company and community
employees, board members, residents and vendors. Type, SubType and
AccessLevel drive the permission matrix in constants.permissions.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import SerializableMixin, SoftDeleteMixin


class Stakeholder(TenantBase, SerializableMixin, SoftDeleteMixin):
    __tablename__ = "cor_Stakeholders"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)

    type = Column("Type", String(50), nullable=False, comment="Stakeholder type, e.g. Resident")
    sub_type = Column("SubType", String(50), nullable=True)
    access_level = Column("AccessLevel", String(50), nullable=True)

    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=True,
        index=True,
    )

    first_name = Column("FirstName", String(100), nullable=True)
    last_name = Column("LastName", String(100), nullable=True)
    company_name = Column("CompanyName", String(255), nullable=True)
    email = Column("Email", String(255), nullable=True, index=True)
    phone = Column("Phone", String(50), nullable=True)
    mobile_phone = Column("MobilePhone", String(50), nullable=True)
    preferred_contact_method = Column("PreferredContactMethod", String(50), nullable=True)
    status = Column("Status", String(50), nullable=False, default="Active")

    portal_access_enabled = Column("PortalAccessEnabled", Boolean, nullable=False, default=False)
    last_login_date = Column("LastLoginDate", DateTime, nullable=True)
    notes = Column("Notes", Text, nullable=True)

    created_date = Column("CreatedDate", DateTime, nullable=False, server_default=func.now())
    modified_date = Column("ModifiedDate", DateTime, nullable=True, onupdate=func.now())

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def __repr__(self) -> str:
        return f"<Stakeholder(id={self.id}, type={self.type})>"
