"""
Fee catalogue and per-community fee settings, tenant database.

- FeeMaster: the organization's standard fees with default amounts
- CommunityFeeVariance: a community's deviation from a standard fee
- CommitmentFee: compensation and commitment entries per commitment type
"""

from enum import Enum

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import AuditMixin, SerializableMixin, SoftDeleteMixin


class VarianceType(str, Enum):
    STANDARD = "Standard"
    NOT_BILLED = "Not Billed"
    CUSTOM = "Custom"


class EntryType(str, Enum):
    COMPENSATION = "Compensation"
    COMMITMENT = "Commitment"


class FeeMaster(TenantBase, SerializableMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "cor_FeeMaster"

    id = Column("FeeMasterID", Integer, primary_key=True, autoincrement=True)
    fee_name = Column("FeeName", String(200), nullable=False)
    default_amount = Column("DefaultAmount", Numeric(12, 2), nullable=False)
    display_order = Column("DisplayOrder", Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<FeeMaster(id={self.id}, fee_name={self.fee_name})>"


class CommunityFeeVariance(TenantBase, SerializableMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "cor_CommunityFeeVariances"

    id = Column("CommunityFeeVarianceID", Integer, primary_key=True, autoincrement=True)
    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )
    fee_master_id = Column(
        "FeeMasterID",
        Integer,
        ForeignKey("cor_FeeMaster.FeeMasterID"),
        nullable=False,
    )
    variance_type = Column("VarianceType", String(50), nullable=False)
    custom_amount = Column(
        "CustomAmount",
        Numeric(12, 2),
        nullable=True,
        comment="Set only when VarianceType is Custom",
    )
    notes = Column("Notes", String(500), nullable=True)


class CommitmentFee(TenantBase, SerializableMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "cor_CommitmentFees"

    id = Column("CommitmentFeeID", Integer, primary_key=True, autoincrement=True)
    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )
    commitment_type_id = Column(
        "CommitmentTypeID",
        Integer,
        ForeignKey("cor_DynamicDropChoices.ChoiceID"),
        nullable=False,
    )
    entry_type = Column("EntryType", String(50), nullable=False, default=EntryType.COMPENSATION.value)
    fee_name = Column("FeeName", String(200), nullable=False)
    value = Column("Value", Numeric(12, 2), nullable=True, comment="NULL for Commitment entries")
    notes = Column("Notes", String(500), nullable=True)
