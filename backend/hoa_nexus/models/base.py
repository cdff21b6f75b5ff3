"""
Base mixins for database models.

Provides common functionality:
- SerializableMixin: to_dict() keyed by database column names
- SoftDeleteMixin: IsActive flag used instead of physical deletes
- AuditMixin: CreatedOn/CreatedBy/ModifiedOn/ModifiedBy on the fee and
  configuration tables

Column names follow the existing SQL Server schema (PascalCase), while
Python attributes are snake_case.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, func, inspect
from sqlalchemy.orm import declared_attr


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


class SerializableMixin:
    """Mixin that renders a row as a JSON-ready dict."""

    def to_dict(self, exclude: Optional[Iterable[str]] = None) -> dict:
        """
        Convert the row to a dict keyed by column name (e.g. "FirstName").

        Args:
            exclude: Column names to leave out (e.g. "PasswordHash")
        """
        skip = set(exclude or ())
        mapper = inspect(type(self))
        result = {}
        for attr in mapper.column_attrs:
            column = attr.columns[0]
            if column.name in skip:
                continue
            result[column.name] = _json_value(getattr(self, attr.key))
        return result


class SoftDeleteMixin:
    """
    Mixin that adds the IsActive flag.

    Records are never deleted; delete operations set IsActive to False and
    list/get operations only return active rows.
    """

    @declared_attr
    def is_active(cls):
        return Column(
            "IsActive",
            Boolean,
            nullable=False,
            default=True,
            comment="False when the record is soft deleted",
        )


class AuditMixin:
    """
    Who created or last changed a row, and when.

    CreatedBy and ModifiedBy hold the acting stakeholder's ID from the JWT.
    """

    created_on = Column("CreatedOn", DateTime, nullable=False, server_default=func.now())
    created_by = Column("CreatedBy", Integer, nullable=True)
    modified_on = Column("ModifiedOn", DateTime, nullable=True, onupdate=func.now())
    modified_by = Column("ModifiedBy", Integer, nullable=True)
