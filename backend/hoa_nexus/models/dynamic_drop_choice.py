"""
Configurable dropdown values, tenant database.

Choices are grouped by GroupID ("fee-types", "billing-frequency", ...).
Other tables store the ChoiceID and show the ChoiceValue.
"""

from sqlalchemy import Boolean, Column, Integer, String

from hoa_nexus.db_base import TenantBase
from hoa_nexus.models.base import AuditMixin, SerializableMixin


class DynamicDropChoice(TenantBase, SerializableMixin, AuditMixin):
    __tablename__ = "cor_DynamicDropChoices"

    id = Column("ChoiceID", Integer, primary_key=True, autoincrement=True)
    group_id = Column("GroupID", String(100), nullable=False, index=True)
    choice_value = Column("ChoiceValue", String(150), nullable=False)
    display_order = Column("DisplayOrder", Integer, nullable=False, default=0)
    is_default = Column("IsDefault", Boolean, nullable=False, default=False)
    # Hidden from pickers when False; not a soft delete, inactive choices stay editable
    is_active = Column("IsActive", Boolean, nullable=False, default=True)
    is_system_managed = Column(
        "IsSystemManaged",
        Boolean,
        nullable=False,
        default=False,
        comment="Protected choices the application depends on",
    )

    def __repr__(self) -> str:
        return f"<DynamicDropChoice(id={self.id}, group_id={self.group_id}, value={self.choice_value})>"
