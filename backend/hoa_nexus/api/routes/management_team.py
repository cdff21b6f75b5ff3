"""
Management team routes, /api/management-team.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.services.management_team_service import ManagementTeamService

logger = logging.getLogger(__name__)

RESOURCE = "management-team"

router = APIRouter(prefix="/api/management-team", tags=["management-team"])


@router.get("/community/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_management_team(request: Request, community_id: int, db: Session = Depends(get_tenant_session)):
    team = ManagementTeamService(db).get_team(community_id)
    return {"success": True, "data": team, "count": len(team)}
