"""
Ticket routes, /api/tickets.

Visibility is per stakeholder (own tickets plus assigned communities), so
vendors may use these endpoints through the own-tickets permission.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import OWN_TICKETS_RESOURCE, Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.ticket_service import DEFAULT_PAGE_SIZE, TicketService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tickets", tags=["tickets"])


@router.get("")
@require_permission(Action.VIEW, OWN_TICKETS_RESOURCE)
def list_tickets(
    request: Request,
    page: int = 1,
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    search: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: str = Query("created", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_tenant_session),
):
    tenant_context = get_tenant_context(request)
    result = TicketService(db).list_tickets(
        tenant_context.stakeholder_id,
        page=page,
        page_size=page_size,
        search=search,
        status=status,
        priority=priority,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {"success": True, **result}


@router.get("/{ticket_id}")
@require_permission(Action.VIEW, OWN_TICKETS_RESOURCE)
def get_ticket(request: Request, ticket_id: int, db: Session = Depends(get_tenant_session)):
    tenant_context = get_tenant_context(request)
    ticket = TicketService(db).get_ticket(ticket_id, tenant_context.stakeholder_id)
    return {"success": True, "data": ticket}
