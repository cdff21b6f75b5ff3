"""
Management team service.

A community's management team is its active company assignments, joined
with the assigned stakeholders. Directors come first, then managers, then
assistants; ties go to the earlier start date.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import case
from sqlalchemy.orm import Session

from hoa_nexus.models.community_assignment import CompanyCommunityAssignment
from hoa_nexus.models.stakeholder import Stakeholder

logger = logging.getLogger(__name__)

ROLE_ORDER = {"Director": 1, "Manager": 2, "Assistant": 3}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


class ManagementTeamService:
    def __init__(self, session: Session):
        self.session = session

    def get_team(self, community_id: int) -> List[Dict[str, Any]]:
        """Team members for a community; an empty list when nobody is assigned."""
        role_rank = case(ROLE_ORDER, value=CompanyCommunityAssignment.role_type, else_=4)
        rows = (
            self.session.query(CompanyCommunityAssignment, Stakeholder)
            .join(Stakeholder, Stakeholder.id == CompanyCommunityAssignment.stakeholder_id)
            .filter(
                CompanyCommunityAssignment.community_id == community_id,
                CompanyCommunityAssignment.is_active == True,
                Stakeholder.is_active == True,
            )
            .order_by(role_rank, CompanyCommunityAssignment.start_date)
            .all()
        )
        return [
            {
                "id": assignment.id,
                "stakeholderId": stakeholder.id,
                "roleType": assignment.role_type,
                "roleTitle": assignment.role_title,
                "firstName": stakeholder.first_name,
                "lastName": stakeholder.last_name,
                "email": stakeholder.email,
                "mobilePhone": stakeholder.mobile_phone,
                "startDate": _iso(assignment.start_date),
                "endDate": _iso(assignment.end_date),
                "isActive": assignment.is_active,
            }
            for assignment, stakeholder in rows
        ]
