"""
Company employee to community assignments, tenant database.

Used to decide which tickets an employee can see (their own plus every
ticket raised in a community they are assigned to) and to list a
community's management team.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, func

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import SoftDeleteMixin


class CompanyCommunityAssignment(TenantBase, SoftDeleteMixin):
    __tablename__ = "cor_CompanyCommunityAssignments"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)
    stakeholder_id = Column(
        "StakeholderID",
        Integer,
        ForeignKey("cor_Stakeholders.ID"),
        nullable=False,
        index=True,
    )
    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )
    role_type = Column("RoleType", String(50), nullable=True, comment="Director, Manager or Assistant")
    role_title = Column("RoleTitle", String(100), nullable=True)
    start_date = Column("StartDate", Date, nullable=True)
    end_date = Column("EndDate", Date, nullable=True)
    created_on = Column("CreatedOn", DateTime, nullable=False, server_default=func.now())
