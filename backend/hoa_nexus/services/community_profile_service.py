"""
Per-community contract details: management fee, billing information and
board information.

The three share one shape. A community has at most one active record of
each, looked up by community or by ID. Some fields are dropdowns: clients
send and receive the choice's display value ("Monthly"), the row stores
its ChoiceID.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from hoa_nexus.models.community import Community
from hoa_nexus.models.community_profile import BillingInformation, BoardInformation, ManagementFee
from hoa_nexus.platform.errors import ConflictError, NotFoundError, ValidationError
from hoa_nexus.repositories.base_repo import BaseRepository
from hoa_nexus.services.dynamic_drop_choice_service import DynamicDropChoiceService

logger = logging.getLogger(__name__)


class CommunityRecordRepository(BaseRepository):
    """Repository for a table holding one active row per community."""

    def get_for_community(self, community_id: int):
        return (
            self.active_query()
            .filter(self._model_class.community_id == community_id)
            .order_by(self._model_class.id)
            .first()
        )


class ManagementFeeRepository(CommunityRecordRepository):
    entity_name = "Management fee"

    def _get_model_class(self) -> type:
        return ManagementFee


class BillingInformationRepository(CommunityRecordRepository):
    entity_name = "Billing information"

    def _get_model_class(self) -> type:
        return BillingInformation


class BoardInformationRepository(CommunityRecordRepository):
    entity_name = "Board information"

    def _get_model_class(self) -> type:
        return BoardInformation


class CommunityRecordService:
    """
    Subclasses set:
        repository_class: CommunityRecordRepository for the table
        dropdown_fields: stored attribute -> (request field, response key, choice group)
    """

    repository_class: type = None
    dropdown_fields: Dict[str, Tuple[str, str, str]] = {}

    def __init__(self, session: Session):
        self.session = session
        self.choices = DynamicDropChoiceService(session)
        self.repo = self.repository_class(session)
        self.entity_name = self.repo.entity_name

    def _to_dict(self, record) -> Dict[str, Any]:
        data = record.to_dict()
        for attribute, (_, key, group_id) in self.dropdown_fields.items():
            data[key] = self.choices.choice_value(group_id, getattr(record, attribute))
        return data

    def _resolve_dropdowns(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace dropdown display values with ChoiceIDs."""
        resolved = dict(data)
        for attribute, (field, key, group_id) in self.dropdown_fields.items():
            if field in resolved:
                resolved[attribute] = self.choices.resolve_choice_id(group_id, resolved.pop(field), key)
        return resolved

    def get_by_community(self, community_id: int) -> Dict[str, Any]:
        record = self.repo.get_for_community(community_id)
        if record is None:
            raise NotFoundError(
                self.entity_name,
                community_id,
                message=f"{self.entity_name} not found for this community",
            )
        return self._to_dict(record)

    def get(self, record_id: int) -> Dict[str, Any]:
        return self._to_dict(self.repo.get_or_raise(record_id))

    def create(self, data: Dict[str, Any], created_by: Optional[int]) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: CommunityID missing or a dropdown value unknown
            NotFoundError: Community does not exist
            ConflictError: The community already has an active record
        """
        community_id = data.get("community_id")
        if not community_id:
            raise ValidationError("CommunityID is required")
        community = (
            self.session.query(Community)
            .filter(Community.id == community_id, Community.is_active == True)
            .first()
        )
        if community is None:
            raise NotFoundError("Community", community_id)
        if self.repo.get_for_community(community_id) is not None:
            raise ConflictError(f"{self.entity_name} already exists for this community")

        values = self._resolve_dropdowns(data)
        values["created_by"] = created_by
        return self._to_dict(self.repo.create(values))

    def update(self, record_id: int, data: Dict[str, Any], modified_by: Optional[int]) -> Dict[str, Any]:
        """Partial update; an empty body returns the record unchanged."""
        if not data:
            return self.get(record_id)
        values = self._resolve_dropdowns(data)
        values.pop("community_id", None)
        values["modified_by"] = modified_by
        return self._to_dict(self.repo.update(record_id, values))


class ManagementFeeService(CommunityRecordService):
    repository_class = ManagementFeeRepository
    dropdown_fields = {"fee_type_id": ("fee_type", "FeeType", "fee-types")}


class BillingInformationService(CommunityRecordService):
    repository_class = BillingInformationRepository
    dropdown_fields = {
        "billing_frequency_id": ("billing_frequency", "BillingFrequency", "billing-frequency"),
        "notice_requirement_id": ("notice_requirement", "NoticeRequirement", "notice-requirements"),
    }


class BoardInformationService(CommunityRecordService):
    repository_class = BoardInformationRepository
