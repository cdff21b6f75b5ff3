"""
Per-community contract details, tenant database.

Each community has at most one active row in each table: its management
fee, billing information and board information.
"""

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import AuditMixin, SerializableMixin, SoftDeleteMixin


class ManagementFee(TenantBase, SerializableMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "cor_ManagementFees"

    id = Column("ManagementFeesID", Integer, primary_key=True, autoincrement=True)
    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )
    management_fee = Column("ManagementFee", Numeric(12, 2), nullable=True)
    per_unit_fee = Column("PerUnitFee", Numeric(12, 2), nullable=True)
    fee_type_id = Column(
        "FeeTypeID",
        Integer,
        ForeignKey("cor_DynamicDropChoices.ChoiceID"),
        nullable=True,
        comment="Choice in the fee-types group",
    )
    increase_type = Column("IncreaseType", String(50), nullable=True)
    increase_effective = Column("IncreaseEffective", Date, nullable=True)
    board_approval_required = Column("BoardApprovalRequired", Boolean, nullable=True)
    auto_increase = Column("AutoIncrease", String(50), nullable=True)
    fixed_cost = Column("FixedCost", Numeric(12, 2), nullable=True)


class BillingInformation(TenantBase, SerializableMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "cor_BillingInformation"

    id = Column("BillingInformationID", Integer, primary_key=True, autoincrement=True)
    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )
    billing_frequency_id = Column(
        "BillingFrequencyID",
        Integer,
        ForeignKey("cor_DynamicDropChoices.ChoiceID"),
        nullable=True,
    )
    billing_month = Column("BillingMonth", Integer, nullable=True)
    billing_day = Column("BillingDay", Integer, nullable=True)
    notice_requirement_id = Column(
        "NoticeRequirementID",
        Integer,
        ForeignKey("cor_DynamicDropChoices.ChoiceID"),
        nullable=True,
    )
    coupon = Column("Coupon", Boolean, nullable=True)


class BoardInformation(TenantBase, SerializableMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "cor_BoardInformation"

    id = Column("BoardInformationID", Integer, primary_key=True, autoincrement=True)
    community_id = Column(
        "CommunityID",
        Integer,
        ForeignKey("cor_Communities.ID"),
        nullable=False,
        index=True,
    )
    annual_meeting_frequency = Column("AnnualMeetingFrequency", String(100), nullable=True)
    regular_meeting_frequency = Column("RegularMeetingFrequency", String(100), nullable=True)
    board_members_required = Column("BoardMembersRequired", Integer, nullable=True)
    quorum = Column("Quorum", Integer, nullable=True)
    term_limits = Column("TermLimits", String(200), nullable=True)
