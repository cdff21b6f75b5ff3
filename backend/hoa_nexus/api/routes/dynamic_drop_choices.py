"""
Dynamic drop choice routes, /api/dynamic-drop-choices.

Groups are addressed by groupId. The legacy table/column form
(table=cor_Communities&column=ClientType) is still accepted on reads, and
tableName/columnName in bodies.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.errors import ValidationError
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.dynamic_drop_choice_service import DynamicDropChoiceService, group_for_column

logger = logging.getLogger(__name__)

RESOURCE = "dynamic-drop-choices"

router = APIRouter(prefix="/api/dynamic-drop-choices", tags=["dynamic-drop-choices"])


class GroupTarget(BaseModel):
    """A group given directly or through a legacy table/column pair."""
    model_config = ConfigDict(populate_by_name=True)

    group_id: Optional[str] = Field(None, alias="groupId")
    table_name: Optional[str] = Field(None, alias="tableName")
    column_name: Optional[str] = Field(None, alias="columnName")

    def resolved_group(self) -> Optional[str]:
        return self.group_id or group_for_column(self.table_name, self.column_name)


class CreateChoiceRequest(GroupTarget):
    choice_value: Optional[str] = Field(None, alias="choiceValue")
    display_order: Optional[int] = Field(None, alias="displayOrder")
    is_default: bool = Field(False, alias="isDefault")
    is_active: bool = Field(True, alias="isActive")


class UpdateChoiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    choice_value: Optional[str] = Field(None, alias="choiceValue")
    display_order: Optional[int] = Field(None, alias="displayOrder")
    is_default: Optional[bool] = Field(None, alias="isDefault")
    is_active: Optional[bool] = Field(None, alias="isActive")


class ToggleActiveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_active: Optional[bool] = Field(None, alias="isActive")


class ReorderRequest(GroupTarget):
    choices: Optional[List[Any]] = None


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@router.get("")
@require_permission(Action.VIEW, RESOURCE)
def get_dynamic_drop_choices(
    request: Request,
    group_id: Optional[str] = Query(None, alias="groupId"),
    group_ids: Optional[str] = Query(None, alias="groupIds"),
    table: Optional[str] = None,
    column: Optional[str] = None,
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: Session = Depends(get_tenant_session),
):
    """Choices keyed by group ID, or by column name for the legacy form."""
    service = DynamicDropChoiceService(db)
    groups = [group_id] if group_id else _split(group_ids or "")

    if not groups and table and column:
        data = service.get_columns(table, _split(column), include_inactive)
    elif groups:
        data = service.get_groups(groups, include_inactive)
    else:
        raise ValidationError('Query parameter "groupId" or "groupIds" is required')

    return {
        "success": True,
        "message": "Dynamic drop choices retrieved successfully",
        "data": data,
        "count": len(data),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_dynamic_drop_choice(
    request: Request,
    body: CreateChoiceRequest,
    db: Session = Depends(get_tenant_session),
):
    choice = DynamicDropChoiceService(db).create_choice(
        body.resolved_group(),
        body.choice_value,
        created_by=get_tenant_context(request).stakeholder_id,
        display_order=body.display_order,
        is_default=body.is_default,
        is_active=body.is_active,
    )
    return {"success": True, "message": "Dynamic drop choice created successfully", "data": choice}


@router.post("/bulk-update-order")
@require_permission(Action.EDIT, RESOURCE)
def bulk_update_order(request: Request, body: ReorderRequest, db: Session = Depends(get_tenant_session)):
    """choices is the group's new order: [{"choiceId": 3}, {"choiceId": 1}, ...]."""
    choice_ids = None
    if body.choices is not None:
        choice_ids = [entry.get("choiceId") for entry in body.choices if isinstance(entry, dict)]
    DynamicDropChoiceService(db).reorder_group(
        body.resolved_group(),
        choice_ids,
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Display order updated successfully"}


@router.put("/{choice_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_dynamic_drop_choice(
    request: Request,
    choice_id: int,
    body: UpdateChoiceRequest,
    db: Session = Depends(get_tenant_session),
):
    choice = DynamicDropChoiceService(db).update_choice(
        choice_id,
        body.model_dump(exclude_unset=True),
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    return {"success": True, "message": "Dynamic drop choice updated successfully", "data": choice}


@router.put("/{choice_id}/toggle-active")
@require_permission(Action.EDIT, RESOURCE)
def toggle_dynamic_drop_choice(
    request: Request,
    choice_id: int,
    body: ToggleActiveRequest,
    db: Session = Depends(get_tenant_session),
):
    choice = DynamicDropChoiceService(db).set_active(
        choice_id,
        body.is_active,
        modified_by=get_tenant_context(request).stakeholder_id,
    )
    state = "activated" if body.is_active else "deactivated"
    return {"success": True, "message": f"Choice {state} successfully", "data": choice}
