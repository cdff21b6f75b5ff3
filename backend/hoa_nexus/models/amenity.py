"""
Amenity model (pools, clubhouses, courts), tenant database.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import SerializableMixin


class Amenity(TenantBase, SerializableMixin):
    __tablename__ = "op_Amenities"

    id = Column("AmenityID", Integer, primary_key=True, autoincrement=True)
    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )

    name = Column("Name", String(255), nullable=False)
    amenity_type = Column("AmenityType", String(50), nullable=True)
    status = Column("Status", String(50), nullable=False, default="Active")
    description = Column("Description", Text, nullable=True)
    location = Column("Location", String(255), nullable=True)
    capacity = Column("Capacity", Integer, nullable=True)
    is_reservable = Column("IsReservable", Boolean, nullable=False, default=False)
    requires_approval = Column("RequiresApproval", Boolean, nullable=False, default=False)
    reservation_fee = Column("ReservationFee", Numeric(10, 2), nullable=True)

    created_date = Column("CreatedDate", DateTime, nullable=False, server_default=func.now())
    modified_date = Column("ModifiedDate", DateTime, nullable=True, onupdate=func.now())
