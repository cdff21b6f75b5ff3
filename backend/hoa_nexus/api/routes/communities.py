"""
Community routes, /api/communities.

Request bodies use the database column names (PascalCase) as JSON keys;
snake_case names are accepted as well.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.services.community_service import CommunityService

logger = logging.getLogger(__name__)

RESOURCE = "communities"

router = APIRouter(prefix="/api/communities", tags=["communities"])


# --- Request Models ---


class CommunityFields(BaseModel):
    """Writable community fields. All optional so the model serves updates too."""
    model_config = ConfigDict(populate_by_name=True)

    pcode: Optional[str] = Field(None, alias="Pcode")
    name: Optional[str] = Field(None, alias="Name")
    display_name: Optional[str] = Field(None, alias="DisplayName")
    community_type: Optional[str] = Field(None, alias="CommunityType")
    status: Optional[str] = Field(None, alias="Status")
    formation_date: Optional[date] = Field(None, alias="FormationDate")
    fiscal_year_start: Optional[date] = Field(None, alias="FiscalYearStart")
    fiscal_year_end: Optional[date] = Field(None, alias="FiscalYearEnd")
    contract_start_date: Optional[date] = Field(None, alias="ContractStartDate")
    contract_end_date: Optional[date] = Field(None, alias="ContractEndDate")
    tax_id: Optional[str] = Field(None, alias="TaxID")
    time_zone: Optional[str] = Field(None, alias="TimeZone")
    master_association: Optional[str] = Field(None, alias="MasterAssociation")
    is_sub_association: Optional[bool] = Field(None, alias="IsSubAssociation")
    last_audit_date: Optional[date] = Field(None, alias="LastAuditDate")
    next_audit_date: Optional[date] = Field(None, alias="NextAuditDate")
    data_completeness: Optional[float] = Field(None, alias="DataCompleteness")
    address_line1: Optional[str] = Field(None, alias="AddressLine1")
    address_line2: Optional[str] = Field(None, alias="AddressLine2")
    city: Optional[str] = Field(None, alias="City")
    state: Optional[str] = Field(None, alias="State")
    postal_code: Optional[str] = Field(None, alias="PostalCode")
    country: Optional[str] = Field(None, alias="Country")


# --- API Endpoints ---


@router.get("")
@require_permission(Action.VIEW, RESOURCE)
def list_communities(request: Request, db: Session = Depends(get_tenant_session)):
    communities = CommunityService(db).list_communities()
    return {"success": True, "data": communities, "count": len(communities)}


@router.get("/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_community(request: Request, community_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": CommunityService(db).get_community(community_id)}


@router.get("/{community_id}/stats")
@require_permission(Action.VIEW, RESOURCE)
def get_community_stats(request: Request, community_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": CommunityService(db).get_community_with_stats(community_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_community(
    request: Request,
    body: CommunityFields,
    db: Session = Depends(get_tenant_session),
):
    community = CommunityService(db).create_community(body.model_dump(exclude_unset=True))
    return {"success": True, "message": "Community created successfully", "data": community}


@router.put("/{community_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_community(
    request: Request,
    community_id: int,
    body: CommunityFields,
    db: Session = Depends(get_tenant_session),
):
    community = CommunityService(db).update_community(community_id, body.model_dump(exclude_unset=True))
    return {"success": True, "message": "Community updated successfully", "data": community}


@router.delete("/{community_id}")
@require_permission(Action.DELETE, RESOURCE)
def delete_community(request: Request, community_id: int, db: Session = Depends(get_tenant_session)):
    CommunityService(db).delete_community(community_id)
    return {"success": True, "message": "Community deleted successfully"}
