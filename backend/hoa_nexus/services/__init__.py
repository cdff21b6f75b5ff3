"""
Business logic services.
"""

from hoa_nexus.services.auth_service import AuthService
from hoa_nexus.services.commitment_fee_service import CommitmentFeeService
from hoa_nexus.services.community_profile_service import (
    BillingInformationService,
    BoardInformationService,
    ManagementFeeService,
)
from hoa_nexus.services.community_service import CommunityService
from hoa_nexus.services.dynamic_drop_choice_service import DynamicDropChoiceService
from hoa_nexus.services.fee_master_service import CommunityFeeVarianceService, FeeMasterService
from hoa_nexus.services.management_team_service import ManagementTeamService
from hoa_nexus.services.organization_service import OrganizationService
from hoa_nexus.services.stakeholder_service import StakeholderService
from hoa_nexus.services.ticket_service import TicketService
from hoa_nexus.services.user_account_service import UserAccountService

__all__ = [
    "AuthService",
    "BillingInformationService",
    "BoardInformationService",
    "CommitmentFeeService",
    "CommunityFeeVarianceService",
    "CommunityService",
    "DynamicDropChoiceService",
    "FeeMasterService",
    "ManagementFeeService",
    "ManagementTeamService",
    "OrganizationService",
    "StakeholderService",
    "TicketService",
    "UserAccountService",
]
