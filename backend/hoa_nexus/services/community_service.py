"""
Community service.

Communities are listed with the number of active properties they contain;
the stats view adds the number of active stakeholders.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from hoa_nexus.models.community import Community
from hoa_nexus.models.property import Property
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.platform.errors import ValidationError
from hoa_nexus.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class CommunityRepository(BaseRepository[Community]):
    entity_name = "Community"

    def _get_model_class(self) -> type:
        return Community


class CommunityService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = CommunityRepository(session)

    def _property_counts(self):
        return (
            self.session.query(
                Property.community_id.label("community_id"),
                func.count(Property.id).label("property_count"),
            )
            .filter(Property.is_active == True)
            .group_by(Property.community_id)
            .subquery()
        )

    def list_communities(self) -> List[Dict[str, Any]]:
        """Active communities ordered by name, each with PropertyCount."""
        counts = self._property_counts()
        rows = (
            self.session.query(Community, func.coalesce(counts.c.property_count, 0))
            .outerjoin(counts, counts.c.community_id == Community.id)
            .filter(Community.is_active == True)
            .order_by(Community.name)
            .all()
        )
        result = []
        for community, property_count in rows:
            data = community.to_dict()
            data["PropertyCount"] = int(property_count)
            result.append(data)
        return result

    def get_community(self, community_id: int) -> Dict[str, Any]:
        return self.repo.get_or_raise(community_id).to_dict()

    def get_community_with_stats(self, community_id: int) -> Dict[str, Any]:
        community = self.repo.get_or_raise(community_id)
        property_count = (
            self.session.query(func.count(Property.id))
            .filter(Property.community_id == community_id, Property.is_active == True)
            .scalar()
        )
        stakeholder_count = (
            self.session.query(func.count(Stakeholder.id))
            .filter(Stakeholder.community_id == community_id, Stakeholder.is_active == True)
            .scalar()
        )
        data = community.to_dict()
        data["PropertyCount"] = property_count or 0
        data["StakeholderCount"] = stakeholder_count or 0
        return data

    def create_community(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: Name missing
            ConflictError: Duplicate community
        """
        if not data.get("name"):
            raise ValidationError("Community name is required")
        data.setdefault("status", "Active")
        data.setdefault("time_zone", "UTC")
        return self.repo.create(data).to_dict()

    def update_community(self, community_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        if not data:
            raise ValidationError("No fields provided for update")
        if "name" in data and not data["name"]:
            raise ValidationError("Community name cannot be empty")
        return self.repo.update(community_id, data).to_dict()

    def delete_community(self, community_id: int) -> None:
        self.repo.soft_delete(community_id)
