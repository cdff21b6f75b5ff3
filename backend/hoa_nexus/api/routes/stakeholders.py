"""
Stakeholder routes, /api/stakeholders.

Creating or updating a stakeholder with PortalAccessEnabled also maintains
the matching login in the master database (see StakeholderService).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.services.stakeholder_service import StakeholderService

logger = logging.getLogger(__name__)

RESOURCE = "stakeholders"

router = APIRouter(prefix="/api/stakeholders", tags=["stakeholders"])


class StakeholderFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Optional[str] = Field(None, alias="Type")
    sub_type: Optional[str] = Field(None, alias="SubType")
    access_level: Optional[str] = Field(None, alias="AccessLevel")
    community_id: Optional[int] = Field(None, alias="CommunityID")
    first_name: Optional[str] = Field(None, alias="FirstName")
    last_name: Optional[str] = Field(None, alias="LastName")
    company_name: Optional[str] = Field(None, alias="CompanyName")
    email: Optional[str] = Field(None, alias="Email")
    phone: Optional[str] = Field(None, alias="Phone")
    mobile_phone: Optional[str] = Field(None, alias="MobilePhone")
    preferred_contact_method: Optional[str] = Field(None, alias="PreferredContactMethod")
    status: Optional[str] = Field(None, alias="Status")
    portal_access_enabled: Optional[bool] = Field(None, alias="PortalAccessEnabled")
    notes: Optional[str] = Field(None, alias="Notes")


@router.get("")
@require_permission(Action.VIEW, RESOURCE)
def list_stakeholders(request: Request, db: Session = Depends(get_tenant_session)):
    stakeholders = StakeholderService(db).list_stakeholders()
    return {"success": True, "data": stakeholders, "count": len(stakeholders)}


@router.get("/search")
@require_permission(Action.VIEW, RESOURCE)
def search_stakeholders(
    request: Request,
    q: Optional[str] = None,
    db: Session = Depends(get_tenant_session),
):
    stakeholders = StakeholderService(db).search(q)
    return {"success": True, "data": stakeholders, "count": len(stakeholders), "searchTerm": q}


@router.get("/type/{stakeholder_type}")
@require_permission(Action.VIEW, RESOURCE)
def list_stakeholders_by_type(
    request: Request,
    stakeholder_type: str,
    db: Session = Depends(get_tenant_session),
):
    stakeholders = StakeholderService(db).list_by_type(stakeholder_type)
    return {"success": True, "data": stakeholders, "count": len(stakeholders)}


@router.get("/{stakeholder_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_stakeholder(request: Request, stakeholder_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": StakeholderService(db).get_stakeholder(stakeholder_id)}


@router.get("/{stakeholder_id}/properties")
@require_permission(Action.VIEW, RESOURCE)
def get_stakeholder_properties(
    request: Request,
    stakeholder_id: int,
    db: Session = Depends(get_tenant_session),
):
    data = StakeholderService(db).get_stakeholder_with_properties(stakeholder_id)
    return {"success": True, "data": data}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_stakeholder(
    request: Request,
    body: StakeholderFields,
    db: Session = Depends(get_tenant_session),
):
    stakeholder = StakeholderService(db).create_stakeholder(body.model_dump(exclude_unset=True))
    return {"success": True, "message": "Stakeholder created successfully", "data": stakeholder}


@router.put("/{stakeholder_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_stakeholder(
    request: Request,
    stakeholder_id: int,
    body: StakeholderFields,
    db: Session = Depends(get_tenant_session),
):
    stakeholder = StakeholderService(db).update_stakeholder(
        stakeholder_id, body.model_dump(exclude_unset=True)
    )
    return {"success": True, "message": "Stakeholder updated successfully", "data": stakeholder}


@router.delete("/{stakeholder_id}")
@require_permission(Action.DELETE, RESOURCE)
def delete_stakeholder(request: Request, stakeholder_id: int, db: Session = Depends(get_tenant_session)):
    StakeholderService(db).delete_stakeholder(stakeholder_id)
    return {"success": True, "message": "Stakeholder deleted successfully"}
