"""
Assignment request tickets.

A request and its first (public) note are written in one transaction. The
ticket number is derived from the request ID, so the request is flushed
before the number is assigned and the note is added.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from hoa_nexus.models.assignment_request import (
    ASSIGNMENT_REQUEST_TICKET_TYPE,
    AssignmentRequest,
    RequestedRoleType,
    TicketNote,
    TicketPriority,
    TicketStatus,
)
from hoa_nexus.models.community import Community
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.platform.errors import NotFoundError, ValidationError, handle_integrity_error

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "community_id",
    "requested_role_type",
    "requested_role_title",
    "effective_date",
    "notes",
    "created_by",
)


def _full_name(stakeholder: Optional[Stakeholder]) -> Optional[str]:
    return stakeholder.full_name if stakeholder is not None else None


def _parse_date(value: Any, field: str) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid date for {field}: {value}")


def get_ticket_notes(session: Session, ticket_type: str, ticket_id: int) -> List[Dict[str, Any]]:
    """Notes of one ticket, oldest first, with the author's name."""
    rows = (
        session.query(TicketNote, Stakeholder)
        .outerjoin(Stakeholder, Stakeholder.id == TicketNote.created_by)
        .filter(TicketNote.ticket_type == ticket_type, TicketNote.ticket_id == ticket_id)
        .order_by(TicketNote.created_on, TicketNote.id)
        .all()
    )
    return [
        {
            "ID": note.id,
            "NoteText": note.note_text,
            "IsInternal": note.is_internal,
            "CreatedOn": note.created_on.isoformat() if note.created_on else None,
            "CreatedByName": _full_name(author),
        }
        for note, author in rows
    ]


class AssignmentService:
    def __init__(self, session: Session):
        self.session = session

    def create_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create an assignment request with its initial note.

        Args:
            data: community_id, requested_role_type, requested_role_title,
                effective_date, notes, created_by and optionally end_date,
                replacing_stakeholder_id, priority

        Returns:
            {id, ticketNumber, status, priority}

        Raises:
            ValidationError: Missing field, unknown role type or priority
        """
        missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
        if missing:
            raise ValidationError(
                "Missing required fields: communityID, requestedRoleType, requestedRoleTitle, "
                "effectiveDate, notes, createdBy",
                details={"missing": missing},
            )

        role_types = [r.value for r in RequestedRoleType]
        if data["requested_role_type"] not in role_types:
            raise ValidationError(f"Invalid role type. Must be one of: {', '.join(role_types)}")

        priorities = [p.value for p in TicketPriority]
        priority = data.get("priority") or TicketPriority.NORMAL.value
        if priority not in priorities:
            raise ValidationError(f"Invalid priority. Must be one of: {', '.join(priorities)}")

        request = AssignmentRequest(
            community_id=data["community_id"],
            requested_role_type=data["requested_role_type"],
            requested_role_title=data["requested_role_title"],
            effective_date=_parse_date(data["effective_date"], "effectiveDate"),
            end_date=_parse_date(data.get("end_date"), "endDate"),
            replacing_stakeholder_id=data.get("replacing_stakeholder_id"),
            priority=priority,
            status=TicketStatus.PENDING.value,
            created_by=data["created_by"],
            modified_by=data["created_by"],
        )
        try:
            self.session.add(request)
            self.session.flush()
            request.assign_ticket_number()
            self.session.add(
                TicketNote(
                    ticket_type=ASSIGNMENT_REQUEST_TICKET_TYPE,
                    ticket_id=request.id,
                    note_text=data["notes"],
                    is_internal=False,
                    created_by=data["created_by"],
                )
            )
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise handle_integrity_error(e, "Assignment request") from e
        except SQLAlchemyError:
            self.session.rollback()
            raise

        logger.info(
            "Assignment request created",
            extra={
                "ticket_id": request.id,
                "ticket_number": request.ticket_number,
                "community_id": request.community_id,
                "requested_role_type": request.requested_role_type,
            },
        )
        return {
            "id": request.id,
            "ticketNumber": request.ticket_number,
            "status": TicketStatus.PENDING.value,
            "priority": priority,
        }

    def list_requests(
        self,
        created_by: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Requests newest first, optionally for one creator and/or status."""
        creator = aliased(Stakeholder)
        query = (
            self.session.query(AssignmentRequest, Community, creator)
            .outerjoin(Community, Community.id == AssignmentRequest.community_id)
            .outerjoin(creator, creator.id == AssignmentRequest.created_by)
        )
        if created_by is not None:
            query = query.filter(AssignmentRequest.created_by == created_by)
        if status:
            query = query.filter(AssignmentRequest.status == status)

        result = []
        for request, community, author in query.order_by(
            AssignmentRequest.created_on.desc(), AssignmentRequest.id.desc()
        ):
            data = request.to_dict()
            data["CommunityCode"] = community.pcode if community else None
            data["CommunityName"] = community.name if community else None
            data["CreatedByName"] = _full_name(author)
            result.append(data)
        return result

    def get_request(self, request_id: int) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: Unknown request
        """
        creator = aliased(Stakeholder)
        modifier = aliased(Stakeholder)
        replacing = aliased(Stakeholder)
        row = (
            self.session.query(AssignmentRequest, Community, creator, modifier, replacing)
            .outerjoin(Community, Community.id == AssignmentRequest.community_id)
            .outerjoin(creator, creator.id == AssignmentRequest.created_by)
            .outerjoin(modifier, modifier.id == AssignmentRequest.modified_by)
            .outerjoin(replacing, replacing.id == AssignmentRequest.replacing_stakeholder_id)
            .filter(AssignmentRequest.id == request_id)
            .first()
        )
        if row is None:
            raise NotFoundError("Assignment request", request_id)

        request, community, author, editor, replaced = row
        data = request.to_dict()
        data["CommunityCode"] = community.pcode if community else None
        data["CommunityName"] = community.name if community else None
        data["CreatedByName"] = _full_name(author)
        data["ModifiedByName"] = _full_name(editor)
        data["ReplacingStakeholderName"] = _full_name(replaced)
        data["notes"] = get_ticket_notes(self.session, ASSIGNMENT_REQUEST_TICKET_TYPE, request_id)
        return data
