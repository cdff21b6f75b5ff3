"""
Assignment request tickets and ticket notes, tenant database.

An assignment request asks the management company to assign (or replace) a
manager, director or assistant for a community. Requests are the first
ticket type; notes are shared by all ticket types via TicketType/TicketID.
"""

from enum import Enum

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, func

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import SerializableMixin


class RequestedRoleType(str, Enum):
    MANAGER = "Manager"
    DIRECTOR = "Director"
    ASSISTANT = "Assistant"


class TicketPriority(str, Enum):
    NORMAL = "Normal"
    URGENT = "Urgent"
    EMERGENCY = "Emergency"


class TicketStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


ASSIGNMENT_REQUEST_TICKET_TYPE = "AssignmentRequest"
TICKET_NUMBER_PREFIX = "AR"


class AssignmentRequest(TenantBase, SerializableMixin):
    __tablename__ = "cor_AssignmentRequests"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)
    ticket_number = Column(
        "TicketNumber",
        String(20),
        nullable=True,
        unique=True,
        comment="Human readable ticket number, e.g. AR-000042",
    )

    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )
    requested_role_type = Column("RequestedRoleType", String(50), nullable=False)
    requested_role_title = Column("RequestedRoleTitle", String(100), nullable=False)
    effective_date = Column("EffectiveDate", Date, nullable=False)
    end_date = Column("EndDate", Date, nullable=True)
    replacing_stakeholder_id = Column(
        "ReplacingStakeholderID",
        Integer,
        ForeignKey("cor_Stakeholders.ID"),
        nullable=True,
    )

    priority = Column("Priority", String(20), nullable=False, default=TicketPriority.NORMAL.value)
    status = Column("Status", String(20), nullable=False, default=TicketStatus.PENDING.value)

    created_by = Column("CreatedBy", Integer, ForeignKey("cor_Stakeholders.ID"), nullable=False, index=True)
    created_on = Column("CreatedOn", DateTime, nullable=False, server_default=func.now())
    modified_by = Column("ModifiedBy", Integer, ForeignKey("cor_Stakeholders.ID"), nullable=True)
    modified_on = Column("ModifiedOn", DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    def assign_ticket_number(self) -> None:
        """Derive the ticket number from the (flushed) primary key."""
        self.ticket_number = f"{TICKET_NUMBER_PREFIX}-{self.id:06d}"


class TicketNote(TenantBase, SerializableMixin):
    __tablename__ = "cor_TicketNotes"

    id = Column("ID", Integer, primary_key=True, autoincrement=True)
    ticket_type = Column("TicketType", String(50), nullable=False)
    ticket_id = Column("TicketID", Integer, nullable=False, index=True)
    note_text = Column("NoteText", Text, nullable=False)
    is_internal = Column("IsInternal", Boolean, nullable=False, default=False)
    created_by = Column("CreatedBy", Integer, ForeignKey("cor_Stakeholders.ID"), nullable=False)
    created_on = Column("CreatedOn", DateTime, nullable=False, server_default=func.now())
