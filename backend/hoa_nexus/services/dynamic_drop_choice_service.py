"""
Dynamic drop choice service.

Dropdown values are configured per group. Some groups are system-managed:
new choices cannot be added to them, and choices flagged IsSystemManaged
cannot be edited or toggled. Each group has at most one default choice.

Older clients address a group by table and column name
("cor_Communities" / "ClientType"); COLUMN_GROUPS maps those to group IDs.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hoa_nexus.models.dynamic_drop_choice import DynamicDropChoice
from hoa_nexus.platform.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from hoa_nexus.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)

COLUMN_GROUPS = {
    "cor_Communities": {
        "ClientType": "client-types",
        "ServiceType": "service-types",
        "ManagementType": "management-types",
        "DevelopmentStage": "development-stages",
        "AcquisitionType": "acquisition-types",
    },
    "cor_Stakeholders": {
        "Type": "stakeholder-types",
        "SubType": "stakeholder-subtypes",
        "AccessLevel": "access-levels",
        "PreferredContactMethod": "preferred-contact-methods",
        "Status": "status",
    },
}

# Groups the permission matrix and login depend on
SYSTEM_MANAGED_GROUPS = frozenset({"stakeholder-types", "access-levels"})

SYSTEM_MANAGED_CHOICE_MESSAGE = (
    "Cannot modify system-managed choices. These are protected for system functionality."
)


def group_for_column(table_name: Optional[str], column_name: Optional[str]) -> Optional[str]:
    """Group ID for a legacy table/column pair, or None if unmapped."""
    if not table_name or not column_name:
        return None
    return COLUMN_GROUPS.get(table_name, {}).get(column_name)


class DynamicDropChoiceRepository(BaseRepository[DynamicDropChoice]):
    entity_name = "Choice"

    def _get_model_class(self) -> type:
        return DynamicDropChoice

    def _has_soft_delete(self) -> bool:
        # IsActive only hides a choice from pickers
        return False


class DynamicDropChoiceService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = DynamicDropChoiceRepository(session)

    def _group_query(self, group_id: str, include_inactive: bool = False):
        query = self.session.query(DynamicDropChoice).filter(DynamicDropChoice.group_id == group_id)
        if not include_inactive:
            query = query.filter(DynamicDropChoice.is_active == True)
        return query

    def get_by_group(self, group_id: str, include_inactive: bool = False) -> List[Dict[str, Any]]:
        choices = (
            self._group_query(group_id, include_inactive)
            .order_by(DynamicDropChoice.display_order, DynamicDropChoice.choice_value)
            .all()
        )
        return [choice.to_dict() for choice in choices]

    def get_groups(self, group_ids: Iterable[str], include_inactive: bool = False) -> Dict[str, List[Dict[str, Any]]]:
        """Choices for several groups, keyed by group ID."""
        return {group_id: self.get_by_group(group_id, include_inactive) for group_id in group_ids}

    def get_columns(
        self, table_name: str, column_names: Iterable[str], include_inactive: bool = False
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        Choices keyed by legacy column name.

        Raises:
            ValidationError: A column has no group mapping
        """
        result = {}
        for column_name in column_names:
            group_id = group_for_column(table_name, column_name)
            if group_id is None:
                raise ValidationError(f"No GroupID mapping found for {table_name}.{column_name}")
            result[column_name] = self.get_by_group(group_id, include_inactive)
        return result

    def resolve_choice_id(self, group_id: str, choice_value: Optional[str], field: str) -> Optional[int]:
        """
        ChoiceID of an active choice, looked up by its display value.

        Empty values resolve to None.

        Raises:
            ValidationError: No active choice with that value in the group
        """
        if choice_value is None or choice_value == "":
            return None
        choice = (
            self._group_query(group_id)
            .filter(DynamicDropChoice.choice_value == choice_value)
            .first()
        )
        if choice is None:
            raise ValidationError(f"Invalid {field}: {choice_value} not found in dropdown choices")
        return choice.id

    def choice_value(self, group_id: str, choice_id: Optional[int]) -> Optional[str]:
        """Display value of an active choice; None when unset or inactive."""
        if choice_id is None:
            return None
        choice = self._group_query(group_id).filter(DynamicDropChoice.id == choice_id).first()
        return choice.choice_value if choice else None

    def _clear_other_defaults(self, group_id: str, keep_choice_id: Optional[int]) -> None:
        query = self.session.query(DynamicDropChoice).filter(
            DynamicDropChoice.group_id == group_id,
            DynamicDropChoice.is_default == True,
        )
        if keep_choice_id is not None:
            query = query.filter(DynamicDropChoice.id != keep_choice_id)
        for choice in query.all():
            choice.is_default = False

    def create_choice(
        self,
        group_id: Optional[str],
        choice_value: Optional[str],
        created_by: Optional[int],
        display_order: Optional[int] = None,
        is_default: bool = False,
        is_active: bool = True,
    ) -> Dict[str, Any]:
        """
        Add a choice to a group. Without a display order it goes last.

        Raises:
            ValidationError: Group or value missing
            UnauthorizedError: No acting stakeholder
            ForbiddenError: Group is system-managed
        """
        if not group_id or not choice_value:
            raise ValidationError("groupId (or tableName/columnName) and choiceValue are required")
        if not created_by:
            raise UnauthorizedError("User authentication required")
        if group_id in SYSTEM_MANAGED_GROUPS:
            raise ForbiddenError(
                f"Cannot create new choices for {group_id}. This group is system-managed "
                "and required for core functionality."
            )

        if display_order is None:
            current_max = (
                self.session.query(func.max(DynamicDropChoice.display_order))
                .filter(DynamicDropChoice.group_id == group_id)
                .scalar()
            )
            display_order = (current_max or 0) + 1

        if is_default:
            self._clear_other_defaults(group_id, None)

        choice = self.repo.create({
            "group_id": group_id,
            "choice_value": choice_value,
            "display_order": display_order,
            "is_default": is_default,
            "is_active": is_active,
            "is_system_managed": False,
            "created_by": created_by,
        })
        return choice.to_dict()

    def _editable_choice(self, choice_id: int, modified_by: Optional[int]) -> DynamicDropChoice:
        if not modified_by:
            raise UnauthorizedError("User authentication required")
        choice = self.repo.get_by_id(choice_id)
        if choice is None:
            raise NotFoundError("Choice", choice_id, message="Choice not found")
        if choice.is_system_managed:
            raise ForbiddenError(SYSTEM_MANAGED_CHOICE_MESSAGE)
        return choice

    def update_choice(self, choice_id: int, data: Dict[str, Any], modified_by: Optional[int]) -> Dict[str, Any]:
        """
        Change value, order, default or active flag.

        Making a choice the default clears the default flag on the rest of
        its group.

        Raises:
            UnauthorizedError: No acting stakeholder
            NotFoundError: Unknown choice
            ForbiddenError: Choice is system-managed
        """
        choice = self._editable_choice(choice_id, modified_by)
        data = dict(data, modified_by=modified_by)
        if data.get("is_default"):
            self._clear_other_defaults(choice.group_id, choice.id)
        # the repository never writes IsActive itself
        if data.get("is_active") is not None:
            choice.is_active = data.pop("is_active")
        return self.repo.update(choice_id, data).to_dict()

    def set_active(self, choice_id: int, is_active: Optional[bool], modified_by: Optional[int]) -> Dict[str, Any]:
        if is_active is None:
            raise ValidationError("isActive is required")
        choice = self._editable_choice(choice_id, modified_by)
        choice.is_active = is_active
        return self.repo.update(choice_id, {"modified_by": modified_by}).to_dict()

    def reorder_group(self, group_id: Optional[str], choice_ids: Optional[List[int]], modified_by: Optional[int]) -> None:
        """
        Renumber a group's choices 1..n in the given order, in one commit.

        IDs from other groups are ignored.
        """
        if not group_id or choice_ids is None:
            raise ValidationError("groupId (or tableName/columnName) and choices array are required")
        if not modified_by:
            raise UnauthorizedError("User authentication required")

        choices = {
            choice.id: choice
            for choice in self.session.query(DynamicDropChoice)
            .filter(DynamicDropChoice.group_id == group_id, DynamicDropChoice.id.in_(choice_ids))
            .all()
        }
        for position, choice_id in enumerate(choice_ids, start=1):
            choice = choices.get(choice_id)
            if choice is not None:
                choice.display_order = position
                choice.modified_by = modified_by
        self.session.commit()

        logger.info(
            "Choice order updated",
            extra={"group_id": group_id, "choice_count": len(choices)},
        )
