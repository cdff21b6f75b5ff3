"""
Community fee variance routes, /api/community-fee-variances.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.fee_master_service import CommunityFeeVarianceService

logger = logging.getLogger(__name__)

RESOURCE = "community-fee-variances"

router = APIRouter(prefix="/api/community-fee-variances", tags=["community-fee-variances"])


class VarianceFields(BaseModel):
    """VarianceType is Standard, Not Billed or Custom."""
    model_config = ConfigDict(populate_by_name=True)

    community_id: Optional[int] = Field(None, alias="CommunityID")
    fee_master_id: Optional[int] = Field(None, alias="FeeMasterID")
    variance_type: Optional[str] = Field(None, alias="VarianceType")
    custom_amount: Optional[float] = Field(None, alias="CustomAmount", ge=0)
    notes: Optional[str] = Field(None, alias="Notes")


@router.get("/community/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def list_community_fee_variances(
    request: Request,
    community_id: int,
    db: Session = Depends(get_tenant_session),
):
    variances = CommunityFeeVarianceService(db).list_for_community(community_id)
    return {"success": True, "data": variances, "count": len(variances)}


@router.get("/{variance_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_community_fee_variance(request: Request, variance_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": CommunityFeeVarianceService(db).get_variance(variance_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_community_fee_variance(
    request: Request,
    body: VarianceFields,
    db: Session = Depends(get_tenant_session),
):
    variance = CommunityFeeVarianceService(db).create_variance(
        body.model_dump(exclude_unset=True),
        created_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Community fee variance created successfully", "data": variance}


@router.put("/{variance_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_community_fee_variance(
    request: Request,
    variance_id: int,
    body: VarianceFields,
    db: Session = Depends(get_tenant_session),
):
    variance = CommunityFeeVarianceService(db).update_variance(
        variance_id,
        body.model_dump(exclude_unset=True),
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Community fee variance updated successfully", "data": variance}


@router.delete("/{variance_id}")
@require_permission(Action.DELETE, RESOURCE)
def delete_community_fee_variance(request: Request, variance_id: int, db: Session = Depends(get_tenant_session)):
    CommunityFeeVarianceService(db).delete_variance(
        variance_id,
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Community fee variance deleted successfully"}
