"""
Base repository for tenant database tables.

Tenant isolation is physical: every organization has its own database and
the session handed to a repository is bound to the engine the registry
resolved for the current request. Repositories therefore never filter by a
tenant column; they only have to respect soft deletes.

Rows with IsActive = 0 are invisible to get/list/update/delete.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from hoa_nexus.platform.errors import NotFoundError, handle_integrity_error

logger = logging.getLogger(__name__)

# Type variable for repository models
T = TypeVar("T")


def _database_of(session: Session) -> Optional[str]:
    bind = session.get_bind()
    return bind.url.database if bind is not None else None


class BaseRepository(Generic[T], ABC):
    """
    CRUD with soft delete for one model.

    Subclasses name the model and a human readable entity name used in
    error messages ("Community not found with identifier: 4").
    """

    entity_name: str = "Record"

    def __init__(self, db_session: Session):
        """
        Args:
            db_session: Session bound to the tenant database
        """
        self.db_session = db_session
        self._model_class = self._get_model_class()

    @abstractmethod
    def _get_model_class(self) -> type:
        """Return the SQLAlchemy model class for this repository."""

    def _has_soft_delete(self) -> bool:
        return hasattr(self._model_class, "is_active")

    def active_query(self) -> Query:
        """Query over active rows only."""
        query = self.db_session.query(self._model_class)
        if self._has_soft_delete():
            query = query.filter(self._model_class.is_active == True)
        return query

    def get_by_id(self, entity_id: Any) -> Optional[T]:
        return self.active_query().filter(self._model_class.id == entity_id).first()

    def get_or_raise(self, entity_id: Any) -> T:
        """
        Raises:
            NotFoundError: Missing or soft deleted
        """
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    def get_all(self, order_by: Optional[List[Any]] = None) -> List[T]:
        query = self.active_query()
        if order_by:
            query = query.order_by(*order_by)
        return query.all()

    def _commit(self, operation: str, entity_id: Any = None) -> None:
        try:
            self.db_session.commit()
        except IntegrityError as e:
            self.db_session.rollback()
            raise handle_integrity_error(e, self.entity_name) from e
        except SQLAlchemyError as e:
            self.db_session.rollback()
            logger.error(
                f"Failed to {operation} entity",
                extra={
                    "database_name": _database_of(self.db_session),
                    "entity_type": self._model_class.__name__,
                    "entity_id": entity_id,
                    "error": str(e),
                },
            )
            raise

    def create(self, entity_data: dict) -> T:
        """
        Insert a row from attribute names to values.

        Raises:
            ConflictError / ValidationError: Constraint violations
        """
        entity = self._model_class(**entity_data)
        if self._has_soft_delete() and entity.is_active is None:
            entity.is_active = True
        self.db_session.add(entity)
        self._commit("create")
        self.db_session.refresh(entity)

        logger.info(
            "Entity created",
            extra={
                "database_name": _database_of(self.db_session),
                "entity_id": entity.id,
                "entity_type": self._model_class.__name__,
            },
        )
        return entity

    def update(self, entity_id: Any, entity_data: dict) -> T:
        """
        Apply a partial update. Only keys present in entity_data change.

        Raises:
            NotFoundError: Missing or soft deleted
        """
        entity = self.get_or_raise(entity_id)
        for key, value in entity_data.items():
            if hasattr(entity, key) and key not in ("id", "is_active"):
                setattr(entity, key, value)
        self._commit("update", entity_id)
        self.db_session.refresh(entity)

        logger.info(
            "Entity updated",
            extra={
                "database_name": _database_of(self.db_session),
                "entity_id": entity_id,
                "entity_type": self._model_class.__name__,
                "fields": sorted(entity_data),
            },
        )
        return entity

    def soft_delete(self, entity_id: Any) -> T:
        """
        Mark a row inactive.

        Raises:
            NotFoundError: Missing or already deleted
        """
        entity = self.get_or_raise(entity_id)
        entity.is_active = False
        self._commit("delete", entity_id)

        logger.info(
            "Entity soft deleted",
            extra={
                "database_name": _database_of(self.db_session),
                "entity_id": entity_id,
                "entity_type": self._model_class.__name__,
            },
        )
        return entity

    def count(self) -> int:
        return self.active_query().count()
