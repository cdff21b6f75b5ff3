"""
Commitment fee service.

Entries are grouped by commitment type, a choice in the commitment-types
group. Compensation entries carry a Value; Commitment entries never do.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from hoa_nexus.models.community import Community
from hoa_nexus.models.dynamic_drop_choice import DynamicDropChoice
from hoa_nexus.models.fee import CommitmentFee, EntryType
from hoa_nexus.platform.errors import NotFoundError, ValidationError
from hoa_nexus.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)

COMMITMENT_TYPE_GROUP = "commitment-types"
ENTRY_TYPES = [entry.value for entry in EntryType]


def _valid_value(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        amount = None
    if amount is None or not amount.is_finite() or amount < 0:
        raise ValidationError("Value must be a valid number greater than or equal to 0")
    return amount


class CommitmentFeeRepository(BaseRepository[CommitmentFee]):
    entity_name = "Commitment fee"

    def _get_model_class(self) -> type:
        return CommitmentFee


class CommitmentFeeService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = CommitmentFeeRepository(session)

    def _commitment_type(self, choice_id: Optional[int]) -> Optional[DynamicDropChoice]:
        if choice_id is None:
            return None
        return (
            self.session.query(DynamicDropChoice)
            .filter(
                DynamicDropChoice.id == choice_id,
                DynamicDropChoice.group_id == COMMITMENT_TYPE_GROUP,
            )
            .first()
        )

    def _fee_row(self, fee: CommitmentFee, commitment_type: Optional[DynamicDropChoice] = None) -> Dict[str, Any]:
        if commitment_type is None:
            commitment_type = self._commitment_type(fee.commitment_type_id)
        data = fee.to_dict()
        data["CommitmentTypeName"] = commitment_type.choice_value if commitment_type else None
        data["CommitmentTypeDisplayOrder"] = commitment_type.display_order if commitment_type else None
        return data

    def list_for_community(self, community_id: int) -> List[Dict[str, Any]]:
        """Active entries ordered by commitment type, then entry type and fee name."""
        rows = (
            self.session.query(CommitmentFee, DynamicDropChoice)
            .join(DynamicDropChoice, DynamicDropChoice.id == CommitmentFee.commitment_type_id)
            .filter(CommitmentFee.community_id == community_id, CommitmentFee.is_active == True)
            .order_by(
                DynamicDropChoice.display_order,
                DynamicDropChoice.choice_value,
                CommitmentFee.entry_type,
                CommitmentFee.fee_name,
            )
            .all()
        )
        return [self._fee_row(fee, commitment_type) for fee, commitment_type in rows]

    def get_fee(self, fee_id: int) -> Dict[str, Any]:
        return self._fee_row(self.repo.get_or_raise(fee_id))

    @staticmethod
    def _check_entry_type(entry_type: str) -> None:
        if entry_type not in ENTRY_TYPES:
            raise ValidationError("Invalid EntryType. Must be Compensation or Commitment")

    def create_fee(self, data: Dict[str, Any], created_by: Optional[int]) -> Dict[str, Any]:
        """
        EntryType defaults to Compensation.

        Raises:
            ValidationError: Required field missing, unknown commitment type
                or a bad Value
            NotFoundError: Unknown community
        """
        community_id = data.get("community_id")
        if not community_id:
            raise ValidationError("CommunityID is required")
        if not data.get("commitment_type_id"):
            raise ValidationError("CommitmentTypeID is required")
        if not data.get("fee_name"):
            raise ValidationError("FeeName is required")

        values = dict(data, created_by=created_by)
        entry_type = values.get("entry_type") or EntryType.COMPENSATION.value
        self._check_entry_type(entry_type)
        values["entry_type"] = entry_type
        if entry_type == EntryType.COMPENSATION.value:
            if values.get("value") is None:
                raise ValidationError("Value is required for Compensation entries")
            values["value"] = _valid_value(values["value"])
        else:
            values["value"] = None

        community = (
            self.session.query(Community)
            .filter(Community.id == community_id, Community.is_active == True)
            .first()
        )
        if community is None:
            raise NotFoundError("Community", community_id)
        commitment_type = self._commitment_type(values["commitment_type_id"])
        if commitment_type is None:
            raise ValidationError("Invalid CommitmentTypeID: not a commitment type")

        return self._fee_row(self.repo.create(values), commitment_type)

    def update_fee(self, fee_id: int, data: Dict[str, Any], modified_by: Optional[int]) -> Dict[str, Any]:
        """
        Switching to Commitment clears Value; staying on or switching to
        Compensation needs one.
        """
        fee = self.repo.get_or_raise(fee_id)
        values = dict(data)
        values.pop("community_id", None)

        entry_type = values.get("entry_type") or fee.entry_type
        self._check_entry_type(entry_type)
        values["entry_type"] = entry_type
        if entry_type == EntryType.COMPENSATION.value:
            value = values.get("value", fee.value)
            if value is None:
                raise ValidationError("Value is required when EntryType is Compensation")
            values["value"] = _valid_value(value)
        else:
            values["value"] = None

        commitment_type_id = values.get("commitment_type_id")
        if commitment_type_id is not None and self._commitment_type(commitment_type_id) is None:
            raise ValidationError("Invalid CommitmentTypeID: not a commitment type")

        values["modified_by"] = modified_by
        return self._fee_row(self.repo.update(fee_id, values))

    def delete_fee(self, fee_id: int, modified_by: Optional[int]) -> None:
        fee = self.repo.get_or_raise(fee_id)
        fee.modified_by = modified_by
        self.repo.soft_delete(fee_id)
