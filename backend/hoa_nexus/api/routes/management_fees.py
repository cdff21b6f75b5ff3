"""
Management fee routes, /api/management-fees.

FeeType is sent and returned as the fee-types choice's display value.
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
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.community_profile_service import ManagementFeeService

logger = logging.getLogger(__name__)

RESOURCE = "management-fees"

router = APIRouter(prefix="/api/management-fees", tags=["management-fees"])


class ManagementFeeFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    community_id: Optional[int] = Field(None, alias="CommunityID")
    management_fee: Optional[float] = Field(None, alias="ManagementFee")
    per_unit_fee: Optional[float] = Field(None, alias="PerUnitFee")
    fee_type: Optional[str] = Field(None, alias="FeeType")
    increase_type: Optional[str] = Field(None, alias="IncreaseType")
    increase_effective: Optional[date] = Field(None, alias="IncreaseEffective")
    board_approval_required: Optional[bool] = Field(None, alias="BoardApprovalRequired")
    auto_increase: Optional[str] = Field(None, alias="AutoIncrease")
    fixed_cost: Optional[float] = Field(None, alias="FixedCost")


@router.get("/community/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_management_fee_by_community(
    request: Request,
    community_id: int,
    db: Session = Depends(get_tenant_session),
):
    return {"success": True, "data": ManagementFeeService(db).get_by_community(community_id)}


@router.get("/{fee_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_management_fee(request: Request, fee_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": ManagementFeeService(db).get(fee_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_management_fee(
    request: Request,
    body: ManagementFeeFields,
    db: Session = Depends(get_tenant_session),
):
    fee = ManagementFeeService(db).create(
        body.model_dump(exclude_unset=True),
        created_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Management fee created successfully", "data": fee}


@router.put("/{fee_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_management_fee(
    request: Request,
    fee_id: int,
    body: ManagementFeeFields,
    db: Session = Depends(get_tenant_session),
):
    fee = ManagementFeeService(db).update(
        fee_id,
        body.model_dump(exclude_unset=True),
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Management fee updated successfully", "data": fee}
