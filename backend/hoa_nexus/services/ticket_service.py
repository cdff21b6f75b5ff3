"""
Unified ticket view.

A caller sees the tickets they created plus every ticket raised in a
community they are actively assigned to (cor_CompanyCommunityAssignments).
Assignment requests are currently the only ticket type; all of them fall
under the "Management" category.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy import false, func, or_
from sqlalchemy.orm import Session

from hoa_nexus.models.assignment_request import ASSIGNMENT_REQUEST_TICKET_TYPE, AssignmentRequest
from hoa_nexus.models.community import Community
from hoa_nexus.models.community_assignment import CompanyCommunityAssignment
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.platform.errors import NotFoundError, ValidationError
from hoa_nexus.services.assignment_service import get_ticket_notes

logger = logging.getLogger(__name__)

ASSIGNMENT_REQUEST_TITLE = "Assignment Request"
ASSIGNMENT_REQUEST_CATEGORY = "Management"
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100
ALL = "All"

SORT_COLUMNS = {
    "created": AssignmentRequest.created_on,
    "modified": AssignmentRequest.modified_on,
    "priority": AssignmentRequest.priority,
    "status": AssignmentRequest.status,
}


def _split_filter(value: Optional[str]) -> Optional[List[str]]:
    """Comma separated filter values; None means no filter."""
    if not value or value == ALL:
        return None
    values = [v.strip() for v in value.split(",") if v.strip()]
    return values or None


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


class TicketService:
    def __init__(self, session: Session):
        self.session = session

    def get_assigned_community_ids(self, stakeholder_id: int) -> List[int]:
        rows = (
            self.session.query(CompanyCommunityAssignment.community_id)
            .filter(
                CompanyCommunityAssignment.stakeholder_id == stakeholder_id,
                CompanyCommunityAssignment.is_active == True,
            )
            .distinct()
            .all()
        )
        return [row[0] for row in rows]

    def _visible_filter(self, stakeholder_id: int, community_ids: List[int]):
        if community_ids:
            return or_(
                AssignmentRequest.created_by == stakeholder_id,
                AssignmentRequest.community_id.in_(community_ids),
            )
        return AssignmentRequest.created_by == stakeholder_id

    def list_tickets(
        self,
        stakeholder_id: Optional[int],
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: str = "created",
        sort_order: str = "desc",
    ) -> Dict[str, Any]:
        """
        One page of tickets visible to the stakeholder.

        Args:
            stakeholder_id: Caller's stakeholder ID (from the token)
            search: Matches ticket number, title, community name or code
            status, priority, category: Comma separated values, "All" for any
            sort_by: created, modified, priority or status
            sort_order: asc or desc

        Raises:
            ValidationError: Caller has no stakeholder, or bad paging values
        """
        if stakeholder_id is None:
            raise ValidationError("A stakeholder is required to list tickets")
        if page < 1 or page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationError(
                f"page must be >= 1 and pageSize between 1 and {MAX_PAGE_SIZE}"
            )

        community_ids = self.get_assigned_community_ids(stakeholder_id)
        query = (
            self.session.query(AssignmentRequest, Community)
            .outerjoin(Community, Community.id == AssignmentRequest.community_id)
            .filter(self._visible_filter(stakeholder_id, community_ids))
        )

        if search:
            pattern = f"%{search.lower()}%"
            conditions = [
                func.lower(AssignmentRequest.ticket_number).like(pattern),
                func.lower(Community.name).like(pattern),
                func.lower(Community.pcode).like(pattern),
            ]
            if search.lower() in ASSIGNMENT_REQUEST_TITLE.lower():
                conditions.append(AssignmentRequest.id.isnot(None))
            query = query.filter(or_(*conditions))

        statuses = _split_filter(status)
        if statuses:
            query = query.filter(AssignmentRequest.status.in_(statuses))
        priorities = _split_filter(priority)
        if priorities:
            query = query.filter(AssignmentRequest.priority.in_(priorities))
        categories = _split_filter(category)
        if categories and ASSIGNMENT_REQUEST_CATEGORY not in categories:
            query = query.filter(false())

        sort_column = SORT_COLUMNS.get(sort_by, AssignmentRequest.created_on)
        if (sort_order or "").lower() == "asc":
            ordering = [sort_column.asc(), AssignmentRequest.id.asc()]
        else:
            ordering = [sort_column.desc(), AssignmentRequest.id.desc()]

        total_count = query.count()
        rows = query.order_by(*ordering).offset((page - 1) * page_size).limit(page_size).all()
        tickets = [self._ticket_summary(r, c, stakeholder_id, community_ids) for r, c in rows]
        page_count = math.ceil(total_count / page_size)

        logger.info(
            "Tickets retrieved",
            extra={
                "stakeholder_id": stakeholder_id,
                "ticket_count": len(tickets),
                "total_count": total_count,
                "assigned_communities": len(community_ids),
            },
        )
        return {
            "tickets": tickets,
            "totalCount": total_count,
            "pageCount": page_count,
            "currentPage": page,
            "hasNextPage": page < page_count,
            "hasPreviousPage": page > 1,
        }

    def _ticket_summary(
        self,
        request: AssignmentRequest,
        community: Optional[Community],
        stakeholder_id: int,
        community_ids: List[int],
    ) -> Dict[str, Any]:
        community_name = community.name if community else None
        return {
            "id": request.id,
            "ticketNumber": request.ticket_number,
            "ticketType": ASSIGNMENT_REQUEST_TICKET_TYPE,
            "type": ASSIGNMENT_REQUEST_TITLE,
            "category": ASSIGNMENT_REQUEST_CATEGORY,
            "title": f"{ASSIGNMENT_REQUEST_TITLE} - {community_name}",
            "status": request.status,
            "priority": request.priority,
            "createdOn": _iso(request.created_on),
            "modifiedOn": _iso(request.modified_on),
            "communityName": community_name,
            "communityCode": community.pcode if community else None,
            "createdByMe": request.created_by == stakeholder_id,
            "isFromMyCommunity": request.community_id in community_ids,
            "metadata": {
                "requestedRole": request.requested_role_title,
                "effectiveDate": _iso(request.effective_date),
            },
        }

    def get_ticket(self, ticket_id: int, stakeholder_id: Optional[int]) -> Dict[str, Any]:
        """
        Ticket details with notes, if visible to the stakeholder.

        Raises:
            NotFoundError: Unknown ticket or not visible to the caller
        """
        if stakeholder_id is None:
            raise NotFoundError("Ticket", ticket_id)

        community_ids = self.get_assigned_community_ids(stakeholder_id)
        row = (
            self.session.query(AssignmentRequest, Community)
            .outerjoin(Community, Community.id == AssignmentRequest.community_id)
            .filter(
                AssignmentRequest.id == ticket_id,
                self._visible_filter(stakeholder_id, community_ids),
            )
            .first()
        )
        if row is None:
            raise NotFoundError("Ticket", ticket_id, message="Ticket not found or access denied")

        request, community = row
        creator = self.session.get(Stakeholder, request.created_by)
        modifier = self.session.get(Stakeholder, request.modified_by) if request.modified_by else None

        data = request.to_dict()
        data["CommunityName"] = community.name if community else None
        data["CommunityCode"] = community.pcode if community else None
        data["CreatedByName"] = creator.full_name if creator else None
        data["ModifiedByName"] = modifier.full_name if modifier else None
        data["notes"] = get_ticket_notes(self.session, ASSIGNMENT_REQUEST_TICKET_TYPE, ticket_id)
        data["metadata"] = {
            "requestedRole": request.requested_role_title,
            "effectiveDate": _iso(request.effective_date),
        }
        return data
