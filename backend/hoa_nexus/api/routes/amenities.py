"""
Amenity routes, /api/amenities.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.services.amenity_service import DEFAULT_PAGE_SIZE, DEFAULT_STATUS, AmenityService

logger = logging.getLogger(__name__)

RESOURCE = "amenities"

router = APIRouter(prefix="/api/amenities", tags=["amenities"])


@router.get("/{community_id}/amenities")
@require_permission(Action.VIEW, RESOURCE)
def list_amenities(
    request: Request,
    community_id: int,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    amenity_type: Optional[str] = Query(None, alias="type"),
    status: Optional[str] = DEFAULT_STATUS,
    search: Optional[str] = None,
    db: Session = Depends(get_tenant_session),
):
    """Amenities of a community. Pass an empty status to include every status."""
    result = AmenityService(db).list_for_community(
        community_id,
        page=page,
        limit=limit,
        amenity_type=amenity_type,
        status=status,
        search=search,
    )
    return {"success": True, **result}


@router.get("/amenity/{amenity_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_amenity(request: Request, amenity_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": AmenityService(db).get_amenity(amenity_id)}
