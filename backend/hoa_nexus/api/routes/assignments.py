"""
Assignment request routes, /api/assignments.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.assignment_service import AssignmentService

logger = logging.getLogger(__name__)

RESOURCE = "assignments"

router = APIRouter(prefix="/api/assignments", tags=["assignments"])


class CreateAssignmentRequest(BaseModel):
    """Dates stay strings here; the service validates them."""
    model_config = ConfigDict(populate_by_name=True)

    community_id: Optional[int] = Field(None, alias="communityID")
    requested_role_type: Optional[str] = Field(None, alias="requestedRoleType")
    requested_role_title: Optional[str] = Field(None, alias="requestedRoleTitle")
    effective_date: Optional[str] = Field(None, alias="effectiveDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    replacing_stakeholder_id: Optional[int] = Field(None, alias="replacingStakeholderID")
    priority: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = Field(None, alias="createdBy")


@router.post("/requests", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_assignment_request(
    request: Request,
    body: CreateAssignmentRequest,
    db: Session = Depends(get_tenant_session),
):
    """createdBy defaults to the caller's stakeholder."""
    data = body.model_dump()
    if data["created_by"] is None:
        data["created_by"] = get_tenant_context(request).stakeholder_id
    result = AssignmentService(db).create_request(data)
    return {"success": True, "message": "Assignment request created successfully", "data": result}


@router.get("/requests")
@require_permission(Action.VIEW, RESOURCE)
def list_assignment_requests(
    request: Request,
    created_by: Optional[int] = Query(None, alias="createdBy"),
    request_status: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_tenant_session),
):
    requests = AssignmentService(db).list_requests(created_by=created_by, status=request_status)
    return {"success": True, "data": requests}


@router.get("/requests/{request_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_assignment_request(request: Request, request_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": AssignmentService(db).get_request(request_id)}
