"""
Board information routes, /api/board-information.
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
from hoa_nexus.services.community_profile_service import BoardInformationService

logger = logging.getLogger(__name__)

RESOURCE = "board-information"

router = APIRouter(prefix="/api/board-information", tags=["board-information"])


class BoardInformationFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    community_id: Optional[int] = Field(None, alias="CommunityID")
    annual_meeting_frequency: Optional[str] = Field(None, alias="AnnualMeetingFrequency")
    regular_meeting_frequency: Optional[str] = Field(None, alias="RegularMeetingFrequency")
    board_members_required: Optional[int] = Field(None, alias="BoardMembersRequired", ge=0)
    quorum: Optional[int] = Field(None, alias="Quorum", ge=0)
    term_limits: Optional[str] = Field(None, alias="TermLimits")


@router.get("/community/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_board_information_by_community(
    request: Request,
    community_id: int,
    db: Session = Depends(get_tenant_session),
):
    return {"success": True, "data": BoardInformationService(db).get_by_community(community_id)}


@router.get("/{board_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_board_information(request: Request, board_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": BoardInformationService(db).get(board_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_board_information(
    request: Request,
    body: BoardInformationFields,
    db: Session = Depends(get_tenant_session),
):
    board = BoardInformationService(db).create(
        body.model_dump(exclude_unset=True),
        created_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Board information created successfully", "data": board}


@router.put("/{board_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_board_information(
    request: Request,
    board_id: int,
    body: BoardInformationFields,
    db: Session = Depends(get_tenant_session),
):
    board = BoardInformationService(db).update(
        board_id,
        body.model_dump(exclude_unset=True),
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Board information updated successfully", "data": board}
