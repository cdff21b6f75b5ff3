"""
Amenity service.
"""

import logging
import math
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from hoa_nexus.models.amenity import Amenity
from hoa_nexus.models.community import Community
from hoa_nexus.platform.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "Available"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _amenity_row(amenity: Amenity, community: Community) -> Dict[str, Any]:
    data = amenity.to_dict()
    data["CommunityName"] = community.name
    data["CommunityCode"] = community.pcode
    return data


class AmenityService:
    def __init__(self, session: Session):
        self.session = session

    def list_for_community(
        self,
        community_id: int,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        amenity_type: Optional[str] = None,
        status: Optional[str] = DEFAULT_STATUS,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        One page of a community's amenities ordered by name.

        Returns:
            {"data": [...], "pagination": {page, limit, total, pages}}

        Raises:
            ValidationError: page or limit out of range
            NotFoundError: Community does not exist
        """
        if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationError(
                f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}"
            )

        community = (
            self.session.query(Community)
            .filter(Community.id == community_id, Community.is_active == True)
            .first()
        )
        if community is None:
            raise NotFoundError("Community", community_id)

        query = self.session.query(Amenity).filter(Amenity.community_id == community_id)
        if amenity_type:
            query = query.filter(Amenity.amenity_type == amenity_type)
        if status:
            query = query.filter(Amenity.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Amenity.name.like(pattern), Amenity.description.like(pattern)))

        total = query.count()
        amenities = (
            query.order_by(Amenity.name, Amenity.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "data": [_amenity_row(a, community) for a in amenities],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    def get_amenity(self, amenity_id: int) -> Dict[str, Any]:
        row = (
            self.session.query(Amenity, Community)
            .join(Community, Community.id == Amenity.community_id)
            .filter(Amenity.id == amenity_id)
            .first()
        )
        if row is None:
            raise NotFoundError("Amenity", amenity_id)
        amenity, community = row
        return _amenity_row(amenity, community)
