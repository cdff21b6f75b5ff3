"""
Billing information routes, /api/billing-information.
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
from hoa_nexus.services.community_profile_service import BillingInformationService

logger = logging.getLogger(__name__)

RESOURCE = "billing-information"

router = APIRouter(prefix="/api/billing-information", tags=["billing-information"])


class BillingInformationFields(BaseModel):
    """BillingFrequency and NoticeRequirement are choice display values."""
    model_config = ConfigDict(populate_by_name=True)

    community_id: Optional[int] = Field(None, alias="CommunityID")
    billing_frequency: Optional[str] = Field(None, alias="BillingFrequency")
    billing_month: Optional[int] = Field(None, alias="BillingMonth", ge=1, le=12)
    billing_day: Optional[int] = Field(None, alias="BillingDay", ge=1, le=31)
    notice_requirement: Optional[str] = Field(None, alias="NoticeRequirement")
    coupon: Optional[bool] = Field(None, alias="Coupon")


@router.get("/community/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_billing_information_by_community(
    request: Request,
    community_id: int,
    db: Session = Depends(get_tenant_session),
):
    return {"success": True, "data": BillingInformationService(db).get_by_community(community_id)}


@router.get("/{billing_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_billing_information(request: Request, billing_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": BillingInformationService(db).get(billing_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_billing_information(
    request: Request,
    body: BillingInformationFields,
    db: Session = Depends(get_tenant_session),
):
    billing = BillingInformationService(db).create(
        body.model_dump(exclude_unset=True),
        created_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Billing information created successfully", "data": billing}


@router.put("/{billing_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_billing_information(
    request: Request,
    billing_id: int,
    body: BillingInformationFields,
    db: Session = Depends(get_tenant_session),
):
    billing = BillingInformationService(db).update(
        billing_id,
        body.model_dump(exclude_unset=True),
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Billing information updated successfully", "data": billing}
