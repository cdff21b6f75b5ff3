"""
Community (association) model, tenant database.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String, func

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import SerializableMixin, SoftDeleteMixin


class Community(TenantBase, SerializableMixin, SoftDeleteMixin):
    """An HOA or condo association managed by the organization."""

    __tablename__ = "cor_Communities"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)

    pcode = Column("Pcode", String(50), nullable=True, index=True, comment="Short property code")
    name = Column("Name", String(255), nullable=False)
    display_name = Column("DisplayName", String(255), nullable=True)
    community_type = Column("CommunityType", String(50), nullable=True)
    status = Column("Status", String(50), nullable=False, default="Active")

    formation_date = Column("FormationDate", Date, nullable=True)
    fiscal_year_start = Column("FiscalYearStart", Date, nullable=True)
    fiscal_year_end = Column("FiscalYearEnd", Date, nullable=True)
    contract_start_date = Column("ContractStartDate", Date, nullable=True)
    contract_end_date = Column("ContractEndDate", Date, nullable=True)

    tax_id = Column("TaxID", String(50), nullable=True)
    time_zone = Column("TimeZone", String(50), nullable=False, default="UTC")
    master_association = Column("MasterAssociation", String(255), nullable=True)
    is_sub_association = Column("IsSubAssociation", Boolean, nullable=False, default=False)

    last_audit_date = Column("LastAuditDate", Date, nullable=True)
    next_audit_date = Column("NextAuditDate", Date, nullable=True)
    data_completeness = Column(
        "DataCompleteness",
        Float,
        nullable=False,
        default=0,
        comment="Share of profile fields filled in, 0-100",
    )

    address_line1 = Column("AddressLine1", String(255), nullable=True)
    address_line2 = Column("AddressLine2", String(255), nullable=True)
    city = Column("City", String(100), nullable=True)
    state = Column("State", String(50), nullable=True)
    postal_code = Column("PostalCode", String(20), nullable=True)
    country = Column("Country", String(50), nullable=True)

    created_date = Column("CreatedDate", DateTime, nullable=False, server_default=func.now())
    last_updated = Column("LastUpdated", DateTime, nullable=True, onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Community(id={self.id}, pcode={self.pcode}, name={self.name})>"
