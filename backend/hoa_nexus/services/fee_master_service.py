"""
Fee master and community fee variance services.

The fee master is the organization's list of standard fees. A community
either bills a standard fee at its default amount, does not bill it, or
bills a custom amount; a variance row records which.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hoa_nexus.models.community import Community
from hoa_nexus.models.fee import CommunityFeeVariance, FeeMaster, VarianceType
from hoa_nexus.platform.errors import ConflictError, NotFoundError, ValidationError
from hoa_nexus.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)

VARIANCE_TYPES = [variance.value for variance in VarianceType]


class FeeMasterRepository(BaseRepository[FeeMaster]):
    entity_name = "Fee"

    def _get_model_class(self) -> type:
        return FeeMaster


class CommunityFeeVarianceRepository(BaseRepository[CommunityFeeVariance]):
    entity_name = "Community fee variance"

    def _get_model_class(self) -> type:
        return CommunityFeeVariance


class FeeMasterService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = FeeMasterRepository(session)

    def list_fees(self) -> List[Dict[str, Any]]:
        """Active fees by display order, then name."""
        fees = self.repo.get_all(order_by=[FeeMaster.display_order, FeeMaster.fee_name])
        return [fee.to_dict() for fee in fees]

    def get_fee(self, fee_id: int) -> Dict[str, Any]:
        return self.repo.get_or_raise(fee_id).to_dict()

    def create_fee(self, data: Dict[str, Any], created_by: Optional[int]) -> Dict[str, Any]:
        """
        Add a fee. Without a display order it goes after the last fee.

        Raises:
            ValidationError: FeeName or DefaultAmount missing
        """
        if not data.get("fee_name"):
            raise ValidationError("FeeName is required")
        if data.get("default_amount") is None:
            raise ValidationError("DefaultAmount is required")

        values = dict(data, created_by=created_by)
        if values.get("display_order") is None:
            current_max = (
                self.session.query(func.max(FeeMaster.display_order))
                .filter(FeeMaster.is_active == True)
                .scalar()
            )
            values["display_order"] = (current_max or 0) + 1
        return self.repo.create(values).to_dict()

    def update_fee(self, fee_id: int, data: Dict[str, Any], modified_by: Optional[int]) -> Dict[str, Any]:
        if not data:
            raise ValidationError("No fields provided for update")
        return self.repo.update(fee_id, dict(data, modified_by=modified_by)).to_dict()

    def delete_fee(self, fee_id: int, modified_by: Optional[int]) -> None:
        fee = self.repo.get_or_raise(fee_id)
        fee.modified_by = modified_by
        self.repo.soft_delete(fee_id)

    def update_order(self, fee_orders: Any, modified_by: Optional[int]) -> None:
        """
        Set DisplayOrder for several fees in one commit.

        Raises:
            ValidationError: fee_orders is not a list or an entry is incomplete
            NotFoundError: An entry names an unknown fee
        """
        if not isinstance(fee_orders, list):
            raise ValidationError("feeOrders must be an array")
        for entry in fee_orders:
            if not isinstance(entry, dict) or not isinstance(entry.get("feeMasterId"), int):
                raise ValidationError("Each feeOrder must have a valid feeMasterId")
            if entry.get("displayOrder") is None:
                raise ValidationError("Each feeOrder must have a displayOrder")

        fees = [self.repo.get_or_raise(entry["feeMasterId"]) for entry in fee_orders]
        for fee, entry in zip(fees, fee_orders):
            fee.display_order = entry["displayOrder"]
            fee.modified_by = modified_by
        self.session.commit()

        logger.info("Fee order updated", extra={"fee_count": len(fee_orders)})


class CommunityFeeVarianceService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = CommunityFeeVarianceRepository(session)
        self.fees = FeeMasterRepository(session)

    @staticmethod
    def _variance_row(variance: CommunityFeeVariance, fee: FeeMaster) -> Dict[str, Any]:
        data = variance.to_dict()
        data["FeeName"] = fee.fee_name
        data["DefaultAmount"] = float(fee.default_amount) if fee.default_amount is not None else None
        data["FeeDisplayOrder"] = fee.display_order
        return data

    def list_for_community(self, community_id: int) -> List[Dict[str, Any]]:
        """Active variances on active fees, in fee master order."""
        rows = (
            self.session.query(CommunityFeeVariance, FeeMaster)
            .join(FeeMaster, FeeMaster.id == CommunityFeeVariance.fee_master_id)
            .filter(
                CommunityFeeVariance.community_id == community_id,
                CommunityFeeVariance.is_active == True,
                FeeMaster.is_active == True,
            )
            .order_by(FeeMaster.display_order, FeeMaster.fee_name)
            .all()
        )
        return [self._variance_row(variance, fee) for variance, fee in rows]

    def get_variance(self, variance_id: int) -> Dict[str, Any]:
        variance = self.repo.get_or_raise(variance_id)
        return self._variance_row(variance, self.session.get(FeeMaster, variance.fee_master_id))

    @staticmethod
    def _check_variance_type(variance_type: str) -> None:
        if variance_type not in VARIANCE_TYPES:
            raise ValidationError("Invalid VarianceType. Must be Standard, Not Billed, or Custom")

    def create_variance(self, data: Dict[str, Any], created_by: Optional[int]) -> Dict[str, Any]:
        """
        Only Custom variances keep a CustomAmount; it is cleared otherwise.

        Raises:
            ValidationError: Required field missing or inconsistent amount
            NotFoundError: Unknown community or fee
            ConflictError: The community already has a variance for this fee
        """
        community_id = data.get("community_id")
        fee_master_id = data.get("fee_master_id")
        variance_type = data.get("variance_type")
        if not community_id:
            raise ValidationError("CommunityID is required")
        if not fee_master_id:
            raise ValidationError("FeeMasterID is required")
        if not variance_type:
            raise ValidationError("VarianceType is required")
        self._check_variance_type(variance_type)
        if variance_type == VarianceType.CUSTOM.value and data.get("custom_amount") is None:
            raise ValidationError("CustomAmount is required when VarianceType is Custom")

        community = (
            self.session.query(Community)
            .filter(Community.id == community_id, Community.is_active == True)
            .first()
        )
        if community is None:
            raise NotFoundError("Community", community_id)
        fee = self.fees.get_or_raise(fee_master_id)

        existing = (
            self.repo.active_query()
            .filter(
                CommunityFeeVariance.community_id == community_id,
                CommunityFeeVariance.fee_master_id == fee_master_id,
            )
            .first()
        )
        if existing is not None:
            raise ConflictError("Community fee variance already exists for this fee")

        values = dict(data, created_by=created_by)
        if variance_type != VarianceType.CUSTOM.value:
            values["custom_amount"] = None
        return self._variance_row(self.repo.create(values), fee)

    def update_variance(self, variance_id: int, data: Dict[str, Any], modified_by: Optional[int]) -> Dict[str, Any]:
        """
        Changing the type away from Custom clears CustomAmount.

        Raises:
            ValidationError: Bad type, or an amount without Custom
        """
        variance = self.repo.get_or_raise(variance_id)
        values = dict(data)
        values.pop("community_id", None)
        values.pop("fee_master_id", None)

        variance_type = values.get("variance_type", variance.variance_type)
        self._check_variance_type(variance_type)
        if variance_type == VarianceType.CUSTOM.value:
            custom_amount = values.get("custom_amount", variance.custom_amount)
            if custom_amount is None:
                raise ValidationError("CustomAmount is required when VarianceType is Custom")
        else:
            if values.get("custom_amount") is not None:
                raise ValidationError("Cannot set CustomAmount when VarianceType is not Custom")
            values["custom_amount"] = None

        values["modified_by"] = modified_by
        updated = self.repo.update(variance_id, values)
        return self._variance_row(updated, self.session.get(FeeMaster, updated.fee_master_id))

    def delete_variance(self, variance_id: int, modified_by: Optional[int]) -> None:
        variance = self.repo.get_or_raise(variance_id)
        variance.modified_by = modified_by
        self.repo.soft_delete(variance_id)
