"""
Fee master routes, /api/fee-master.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.fee_master_service import FeeMasterService

logger = logging.getLogger(__name__)

RESOURCE = "fee-master"

router = APIRouter(prefix="/api/fee-master", tags=["fee-master"])


class FeeFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fee_name: Optional[str] = Field(None, alias="FeeName")
    default_amount: Optional[float] = Field(None, alias="DefaultAmount", ge=0)
    display_order: Optional[int] = Field(None, alias="DisplayOrder")


class FeeOrderRequest(BaseModel):
    """Entries are validated by the service so clients get its messages."""
    model_config = ConfigDict(populate_by_name=True)

    fee_orders: Any = Field(None, alias="feeOrders")


@router.get("")
@require_permission(Action.VIEW, RESOURCE)
def list_fees(request: Request, db: Session = Depends(get_tenant_session)):
    fees = FeeMasterService(db).list_fees()
    return {"success": True, "data": fees, "count": len(fees)}


@router.put("/order/bulk")
@require_permission(Action.EDIT, RESOURCE)
def update_fee_order(
    request: Request,
    body: FeeOrderRequest,
    db: Session = Depends(get_tenant_session),
):
    FeeMasterService(db).update_order(body.fee_orders, modified_by=get_tenant_context(request).stakeholder_id)
    return {"success": True, "message": "Fee order updated successfully"}


@router.get("/{fee_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_fee(request: Request, fee_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": FeeMasterService(db).get_fee(fee_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_fee(request: Request, body: FeeFields, db: Session = Depends(get_tenant_session)):
    fee = FeeMasterService(db).create_fee(
        body.model_dump(exclude_unset=True),
        created_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Fee created successfully", "data": fee}


@router.put("/{fee_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_fee(
    request: Request,
    fee_id: int,
    body: FeeFields,
    db: Session = Depends(get_tenant_session),
):
    fee = FeeMasterService(db).update_fee(
        fee_id,
        body.model_dump(exclude_unset=True),
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Fee updated successfully", "data": fee}


@router.delete("/{fee_id}")
@require_permission(Action.DELETE, RESOURCE)
def delete_fee(request: Request, fee_id: int, db: Session = Depends(get_tenant_session)):
    FeeMasterService(db).delete_fee(fee_id, modified_by=get_tenant_context(request).stakeholder_id)
    return {"success": True, "message": "Fee deleted successfully"}
