"""
Property model and property/stakeholder link, tenant database.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import SerializableMixin, SoftDeleteMixin


class Property(TenantBase, SerializableMixin, SoftDeleteMixin):
    """A unit or lot within a community."""

    __tablename__ = "cor_Properties"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)

    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )

    address_line1 = Column("AddressLine1", String(255), nullable=False)
    address_line2 = Column("AddressLine2", String(255), nullable=True)
    city = Column("City", String(100), nullable=True)
    state = Column("State", String(50), nullable=True)
    postal_code = Column("PostalCode", String(20), nullable=True)
    country = Column("Country", String(50), nullable=True)
    latitude = Column("Latitude", Float, nullable=True)
    longitude = Column("Longitude", Float, nullable=True)

    property_type = Column("PropertyType", String(50), nullable=True)
    square_footage = Column("SquareFootage", Integer, nullable=True)
    bedrooms = Column("Bedrooms", Integer, nullable=True)
    bathrooms = Column("Bathrooms", Numeric(4, 1), nullable=True)
    year_built = Column("YearBuilt", Integer, nullable=True)
    lot_size = Column("LotSize", Numeric(12, 2), nullable=True)
    parcel_id = Column("ParcelID", String(100), nullable=True)

    assessment_percentage = Column(
        "AssessmentPercentage",
        Numeric(7, 4),
        nullable=True,
        comment="Share of community assessments charged to this property",
    )
    is_active_development = Column("IsActiveDevelopment", Boolean, nullable=False, default=False)
    voting_interest = Column("VotingInterest", Numeric(7, 4), nullable=True)
    status = Column("Status", String(50), nullable=False, default="Active")

    created_date = Column("CreatedDate", DateTime, nullable=False, server_default=func.now())
    modified_date = Column("ModifiedDate", DateTime, nullable=True, onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, community_id={self.community_id})>"


class PropertyStakeholder(TenantBase):
    """Links owners, tenants and other stakeholders to a property."""

    __tablename__ = "cor_Property_Stakeholders"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)
    property_id = Column("PropertyID", Integer, ForeignKey("cor_Properties.ID"), nullable=False, index=True)
    stakeholder_id = Column("StakeholderID", Integer, ForeignKey("cor_Stakeholders.ID"), nullable=False, index=True)
    relationship_type = Column("RelationshipType", String(50), nullable=True)
