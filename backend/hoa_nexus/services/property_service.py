"""
Property service.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from hoa_nexus.models.community import Community
from hoa_nexus.models.property import Property, PropertyStakeholder
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.platform.errors import NotFoundError, ValidationError
from hoa_nexus.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    entity_name = "Property"

    def _get_model_class(self) -> type:
        return Property


class PropertyService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = PropertyRepository(session)

    def _ordering(self):
        return [Property.address_line1, Property.id]

    def list_properties(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.repo.get_all(order_by=self._ordering())]

    def list_by_community(self, community_id: int) -> List[Dict[str, Any]]:
        properties = (
            self.repo.active_query()
            .filter(Property.community_id == community_id)
            .order_by(*self._ordering())
            .all()
        )
        return [p.to_dict() for p in properties]

    def get_property(self, property_id: int) -> Dict[str, Any]:
        return self.repo.get_or_raise(property_id).to_dict()

    def get_property_with_stakeholders(self, property_id: int) -> Dict[str, Any]:
        """Property plus its active linked stakeholders under "stakeholders"."""
        prop = self.repo.get_or_raise(property_id)
        rows = (
            self.session.query(Stakeholder, PropertyStakeholder.relationship_type)
            .join(PropertyStakeholder, PropertyStakeholder.stakeholder_id == Stakeholder.id)
            .filter(
                PropertyStakeholder.property_id == property_id,
                Stakeholder.is_active == True,
            )
            .order_by(Stakeholder.last_name, Stakeholder.first_name)
            .all()
        )
        data = prop.to_dict()
        data["stakeholders"] = [
            {
                "StakeholderID": s.id,
                "StakeholderType": s.type,
                "FirstName": s.first_name,
                "LastName": s.last_name,
                "Email": s.email,
                "Phone": s.phone,
                "RelationshipType": relationship_type,
            }
            for s, relationship_type in rows
        ]
        return data

    def _require_community(self, community_id: Any) -> None:
        exists = (
            self.session.query(Community.id)
            .filter(Community.id == community_id, Community.is_active == True)
            .first()
        )
        if exists is None:
            raise NotFoundError("Community", community_id)

    def create_property(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: Community or address missing
            NotFoundError: Community does not exist
        """
        if not data.get("community_id") or not data.get("address_line1"):
            raise ValidationError("CommunityID and AddressLine1 are required")
        self._require_community(data["community_id"])
        return self.repo.create(data).to_dict()

    def update_property(self, property_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        if not data:
            raise ValidationError("No fields provided for update")
        if data.get("community_id") is not None:
            self._require_community(data["community_id"])
        return self.repo.update(property_id, data).to_dict()

    def delete_property(self, property_id: int) -> None:
        self.repo.soft_delete(property_id)
