"""
Database models.

Master database models register on MasterBase; everything else lives in each
organization's tenant database and registers on TenantBase.
"""

from hoa_nexus.models.base import AuditMixin, SerializableMixin, SoftDeleteMixin
# Master database
from hoa_nexus.models.organization import Organization
from hoa_nexus.models.user_account import UserAccount
# Tenant databases
from hoa_nexus.models.community import Community
from hoa_nexus.models.property import Property, PropertyStakeholder
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.models.amenity import Amenity
from hoa_nexus.models.assignment_request import (
    AssignmentRequest,
    TicketNote,
    RequestedRoleType,
    TicketPriority,
    TicketStatus,
)
from hoa_nexus.models.community_assignment import CompanyCommunityAssignment
from hoa_nexus.models.dynamic_drop_choice import DynamicDropChoice
from hoa_nexus.models.community_profile import BillingInformation, BoardInformation, ManagementFee
from hoa_nexus.models.fee import (
    CommitmentFee,
    CommunityFeeVariance,
    EntryType,
    FeeMaster,
    VarianceType,
)

__all__ = [
    "SerializableMixin",
    "SoftDeleteMixin",
    "AuditMixin",
    "Organization",
    "UserAccount",
    "Community",
    "Property",
    "PropertyStakeholder",
    "Stakeholder",
    "Amenity",
    "AssignmentRequest",
    "TicketNote",
    "RequestedRoleType",
    "TicketPriority",
    "TicketStatus",
    "CompanyCommunityAssignment",
    "DynamicDropChoice",
    "ManagementFee",
    "BillingInformation",
    "BoardInformation",
    "FeeMaster",
    "CommunityFeeVariance",
    "CommitmentFee",
    "VarianceType",
    "EntryType",
]
