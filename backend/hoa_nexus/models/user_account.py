"""
User account model (master database).

Login credentials live in the master database so a username can be resolved
to its organization (and therefore its tenant database) before any tenant
pool is chosen. StakeholderID refers to cor_Stakeholders.ID inside that
organization's tenant database.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from hoa_nexus.db_base import MasterBase
from hoa_nexus.models.base import SerializableMixin


class UserAccount(MasterBase, SerializableMixin):
    """Portal login for a stakeholder."""

    __tablename__ = "sec_UserAccounts"

    id = Column(
        "UserAccountID",
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    organization_id = Column(
        "OrganizationID",
        String(36),
        ForeignKey("cor_Organizations.OrganizationID"),
        nullable=False,
        index=True,
    )

    username = Column("Username", String(255), nullable=False, unique=True)
    password_hash = Column("PasswordHash", String(255), nullable=False)
    email = Column("Email", String(255), nullable=False, unique=True)
    first_name = Column("FirstName", String(100), nullable=True)
    last_name = Column("LastName", String(100), nullable=True)

    stakeholder_id = Column(
        "StakeholderID",
        Integer,
        nullable=True,
        index=True,
        comment="cor_Stakeholders.ID in the organization's tenant database",
    )

    must_change_password = Column("MustChangePassword", Boolean, nullable=False, default=False)
    temp_password_expiry = Column("TempPasswordExpiry", DateTime, nullable=True)
    password_last_changed = Column("PasswordLastChanged", DateTime, nullable=True)

    is_active = Column("IsActive", Boolean, nullable=False, default=True)
    account_locked = Column("AccountLocked", Boolean, nullable=False, default=False)
    failed_login_attempts = Column("FailedLoginAttempts", Integer, nullable=False, default=0)
    last_login_date = Column("LastLoginDate", DateTime, nullable=True)

    created_on = Column("CreatedOn", DateTime, nullable=False, server_default=func.now())
    modified_on = Column("ModifiedOn", DateTime, nullable=True, onupdate=func.now())

    def to_public_dict(self) -> dict:
        """Account fields safe to return to clients."""
        return self.to_dict(exclude=("PasswordHash",))

    def __repr__(self) -> str:
        return f"<UserAccount(id={self.id}, username={self.username})>"
