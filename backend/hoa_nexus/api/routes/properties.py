"""
Property routes, /api/properties.
"""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.constants.permissions import Action
from hoa_nexus.database.session import get_tenant_session
from hoa_nexus.platform.rbac import require_permission
from hoa_nexus.services.property_service import PropertyService

logger = logging.getLogger(__name__)

RESOURCE = "properties"

router = APIRouter(prefix="/api/properties", tags=["properties"])


class PropertyFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    community_id: Optional[int] = Field(None, alias="CommunityID")
    address_line1: Optional[str] = Field(None, alias="AddressLine1")
    address_line2: Optional[str] = Field(None, alias="AddressLine2")
    city: Optional[str] = Field(None, alias="City")
    state: Optional[str] = Field(None, alias="State")
    postal_code: Optional[str] = Field(None, alias="PostalCode")
    country: Optional[str] = Field(None, alias="Country")
    latitude: Optional[float] = Field(None, alias="Latitude")
    longitude: Optional[float] = Field(None, alias="Longitude")
    property_type: Optional[str] = Field(None, alias="PropertyType")
    square_footage: Optional[int] = Field(None, alias="SquareFootage")
    bedrooms: Optional[int] = Field(None, alias="Bedrooms")
    bathrooms: Optional[Decimal] = Field(None, alias="Bathrooms")
    year_built: Optional[int] = Field(None, alias="YearBuilt")
    lot_size: Optional[Decimal] = Field(None, alias="LotSize")
    parcel_id: Optional[str] = Field(None, alias="ParcelID")
    assessment_percentage: Optional[Decimal] = Field(None, alias="AssessmentPercentage")
    is_active_development: Optional[bool] = Field(None, alias="IsActiveDevelopment")
    voting_interest: Optional[Decimal] = Field(None, alias="VotingInterest")
    status: Optional[str] = Field(None, alias="Status")


@router.get("")
@require_permission(Action.VIEW, RESOURCE)
def list_properties(request: Request, db: Session = Depends(get_tenant_session)):
    properties = PropertyService(db).list_properties()
    return {"success": True, "data": properties, "count": len(properties)}


@router.get("/community/{community_id}")
@require_permission(Action.VIEW, RESOURCE)
def list_properties_by_community(
    request: Request,
    community_id: int,
    db: Session = Depends(get_tenant_session),
):
    properties = PropertyService(db).list_by_community(community_id)
    return {"success": True, "data": properties, "count": len(properties)}


@router.get("/{property_id}")
@require_permission(Action.VIEW, RESOURCE)
def get_property(request: Request, property_id: int, db: Session = Depends(get_tenant_session)):
    return {"success": True, "data": PropertyService(db).get_property(property_id)}


@router.get("/{property_id}/stakeholders")
@require_permission(Action.VIEW, RESOURCE)
def get_property_stakeholders(
    request: Request,
    property_id: int,
    db: Session = Depends(get_tenant_session),
):
    return {"success": True, "data": PropertyService(db).get_property_with_stakeholders(property_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
@require_permission(Action.CREATE, RESOURCE)
def create_property(request: Request, body: PropertyFields, db: Session = Depends(get_tenant_session)):
    prop = PropertyService(db).create_property(body.model_dump(exclude_unset=True))
    return {"success": True, "message": "Property created successfully", "data": prop}


@router.put("/{property_id}")
@require_permission(Action.EDIT, RESOURCE)
def update_property(
    request: Request,
    property_id: int,
    body: PropertyFields,
    db: Session = Depends(get_tenant_session),
):
    prop = PropertyService(db).update_property(property_id, body.model_dump(exclude_unset=True))
    return {"success": True, "message": "Property updated successfully", "data": prop}


@router.delete("/{property_id}")
@require_permission(Action.DELETE, RESOURCE)
def delete_property(request: Request, property_id: int, db: Session = Depends(get_tenant_session)):
    PropertyService(db).delete_property(property_id)
    return {"success": True, "message": "Property deleted successfully"}
