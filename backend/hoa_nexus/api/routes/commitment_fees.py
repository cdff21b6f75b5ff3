"""
Commitment fee routes, /api/commitment-fees.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.commitment_fee_service import CommitmentFeeService

logger = logging.getLogger(__name__)

RESOURCE = "commitment-fees"

router = APIRouter(prefix="/api/commitment-fees", tags=["commitment-fees"])


class CommitmentFeeFields(BaseModel):
    """Value is checked by the service, so it is accepted as given."""
    model_config = ConfigDict(populate_by_name=True)

    community_id: Optional[int] = Field(None, alias="CommunityID")
    commitment_type_id: Optional[int] = Field(None, alias="CommitmentTypeID")
    entry_type: Optional[str] = Field(None, alias="EntryType")
    fee_name: Optional[str] = Field(None, alias="FeeName")
    value: Optional[Union[float, str]] = Field(None, alias="Value")
    notes: Optional[str] = Field(None, alias="Notes")


@router.get("/community/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def list_commitment_fees(request: Request, community_id: int, db: Session = Depends(get_tenant_session)):
    fees = CommitmentFeeService(db).list_for_community(community_id)
    return {"success": True, "data": fees, "count": len(fees)}


@router.get("/{fee_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_commitment_fee(request: Request, fee_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": CommitmentFeeService(db).get_fee(fee_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_commitment_fee(
    request: Request,
    body: CommitmentFeeFields,
    db: Session = Depends(get_tenant_session),
):
    fee = CommitmentFeeService(db).create_fee(
        body.model_dump(exclude_unset=True),
        created_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Commitment fee created successfully", "data": fee}


@router.put("/{fee_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_commitment_fee(
    request: Request,
    fee_id: int,
    body: CommitmentFeeFields,
    db: Session = Depends(get_tenant_session),
):
    fee = CommitmentFeeService(db).update_fee(
        fee_id,
        body.model_dump(exclude_unset=True),
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Commitment fee updated successfully", "data": fee}


@router.delete("/{fee_id}")
@require_permission(Action.DELETE, RESOURCE)
def delete_commitment_fee(request: Request, fee_id: int, db: Session = Depends(get_tenant_session)):
    CommitmentFeeService(db).delete_fee(fee_id, modified_by=get_tenant_context(request).stakeholder_id)
    return {"success": True, "message": "Commitment fee deleted successfully"}
