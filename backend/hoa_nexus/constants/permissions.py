"""
Canonical permissions matrix for HOA Nexus.

IMPORTANT: This is the single source of truth for server-side permission
checks. The frontend mirrors these rules for UX only.

Permissions are derived from the stakeholder classification carried in the
JWT (type, subType, accessLevel) and the action being performed. Unlike a
role/permission table, the rules are positional: each stakeholder type has a
small decision ladder.

Matrix:
- Company Employee: Admin -> everything; Full -> all but delete/admin;
  Partial -> view/create; anything else -> nothing
- Community Employee: Full -> all but delete/admin; otherwise view
- Board Member: President -> all but admin; otherwise view/create
- Resident: Owner -> view/create; otherwise view
- Vendor: view of own tickets only
- Unknown types: nothing
"""

from enum import Enum
from typing import Optional, Protocol


class StakeholderType(str, Enum):
    """Stakeholder types as stored in cor_Stakeholders.Type."""
    COMPANY_EMPLOYEE = "Company Employee"
    COMMUNITY_EMPLOYEE = "Community Employee"
    BOARD_MEMBER = "Board Member"
    RESIDENT = "Resident"
    VENDOR = "Vendor"


class AccessLevel(str, Enum):
    ADMIN = "Admin"
    FULL = "Full"
    PARTIAL = "Partial"
    NONE = "None"


class StakeholderSubType(str, Enum):
    """Sub types that change the permission ladder."""
    PRESIDENT = "President"
    OWNER = "Owner"


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    ADMIN = "admin"


# Resource name vendors are limited to
OWN_TICKETS_RESOURCE = "own-tickets"

# Actions withheld from "Full" access levels
_RESTRICTED_ACTIONS = frozenset({Action.DELETE.value, Action.ADMIN.value})
_VIEW_OR_CREATE = frozenset({Action.VIEW.value, Action.CREATE.value})


class PermissionSubject(Protocol):
    """Anything carrying the stakeholder classification (TenantContext, claims)."""
    stakeholder_type: Optional[str]
    sub_type: Optional[str]
    access_level: Optional[str]


def check_permission(
    stakeholder_type: Optional[str],
    sub_type: Optional[str],
    access_level: Optional[str],
    action,
    resource: Optional[str] = None,
) -> bool:
    """
    Decide whether a stakeholder classification may perform an action.

    Args:
        stakeholder_type: cor_Stakeholders.Type
        sub_type: cor_Stakeholders.SubType
        access_level: cor_Stakeholders.AccessLevel
        action: Action (or its string value)
        resource: Optional resource name; only vendors are resource-scoped

    Returns:
        True if the action is allowed
    """
    act = action.value if isinstance(action, Action) else str(action)

    if stakeholder_type == StakeholderType.COMPANY_EMPLOYEE.value:
        if access_level == AccessLevel.ADMIN.value:
            return True
        if access_level == AccessLevel.FULL.value:
            return act not in _RESTRICTED_ACTIONS
        if access_level == AccessLevel.PARTIAL.value:
            return act in _VIEW_OR_CREATE
        return False

    if stakeholder_type == StakeholderType.COMMUNITY_EMPLOYEE.value:
        if access_level == AccessLevel.FULL.value:
            return act not in _RESTRICTED_ACTIONS
        return act == Action.VIEW.value

    if stakeholder_type == StakeholderType.BOARD_MEMBER.value:
        if sub_type == StakeholderSubType.PRESIDENT.value:
            return act != Action.ADMIN.value
        return act in _VIEW_OR_CREATE

    if stakeholder_type == StakeholderType.RESIDENT.value:
        if sub_type == StakeholderSubType.OWNER.value:
            return act in _VIEW_OR_CREATE
        return act == Action.VIEW.value

    if stakeholder_type == StakeholderType.VENDOR.value:
        return act == Action.VIEW.value and resource == OWN_TICKETS_RESOURCE

    return False


def check_user_permission(user: PermissionSubject, action, resource: Optional[str] = None) -> bool:
    """Permission check for an authenticated user (TenantContext or claims)."""
    return check_permission(
        user.stakeholder_type,
        user.sub_type,
        user.access_level,
        action,
        resource,
    )
