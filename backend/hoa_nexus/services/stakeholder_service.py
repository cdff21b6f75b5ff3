"""
Stakeholder service.

Besides CRUD on cor_Stakeholders (tenant database), this service keeps the
stakeholder's portal login in the master database in step:
- creating a stakeholder with portal access creates a user account
- enabling portal access creates, links or reactivates an account
- disabling portal access or deleting the stakeholder deactivates it
- changing the email of a portal user changes the account email

Account failures are logged and do not undo the stakeholder change; the
account can be fixed up later by an administrator.
"""

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hoa_nexus.database.session import master_session
from hoa_nexus.models.property import Property, PropertyStakeholder
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.platform.errors import AppError, ConflictError, ValidationError
from hoa_nexus.repositories.base_repo import BaseRepository
from hoa_nexus.services.organization_service import OrganizationService
from hoa_nexus.services.user_account_service import UserAccountService

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
EMAIL_IN_USE_MESSAGE = (
    "This email address is already in use by another stakeholder with portal access. "
    "Please use a different email address."
)


class StakeholderRepository(BaseRepository[Stakeholder]):
    entity_name = "Stakeholder"

    def _get_model_class(self) -> type:
        return Stakeholder


class StakeholderService:
    """
    Args:
        session: Session bound to the tenant database
        master_session_factory: Opens a master database session, only used
            when a portal account has to be touched
    """

    def __init__(
        self,
        session: Session,
        master_session_factory: Callable[[], AbstractContextManager] = master_session,
    ):
        self.session = session
        self.repo = StakeholderRepository(session)
        self._master_session_factory = master_session_factory

    def _ordering(self):
        return [Stakeholder.last_name, Stakeholder.first_name]

    def list_stakeholders(self) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in self.repo.get_all(order_by=self._ordering())]

    def list_by_type(self, stakeholder_type: str) -> List[Dict[str, Any]]:
        stakeholders = (
            self.repo.active_query()
            .filter(Stakeholder.type == stakeholder_type)
            .order_by(*self._ordering())
            .all()
        )
        return [s.to_dict() for s in stakeholders]

    def search(self, term: Optional[str]) -> List[Dict[str, Any]]:
        """
        Case-insensitive match on names, company and email.

        Raises:
            ValidationError: Term shorter than two characters
        """
        term = (term or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise ValidationError(
                f"Search term must be at least {MIN_SEARCH_LENGTH} characters long"
            )
        pattern = f"%{term.lower()}%"
        stakeholders = (
            self.repo.active_query()
            .filter(or_(
                func.lower(Stakeholder.first_name).like(pattern),
                func.lower(Stakeholder.last_name).like(pattern),
                func.lower(Stakeholder.company_name).like(pattern),
                func.lower(Stakeholder.email).like(pattern),
            ))
            .order_by(*self._ordering())
            .all()
        )
        return [s.to_dict() for s in stakeholders]

    def get_stakeholder(self, stakeholder_id: int) -> Dict[str, Any]:
        return self.repo.get_or_raise(stakeholder_id).to_dict()

    def get_stakeholder_with_properties(self, stakeholder_id: int) -> Dict[str, Any]:
        stakeholder = self.repo.get_or_raise(stakeholder_id)
        rows = (
            self.session.query(Property, PropertyStakeholder.relationship_type)
            .join(PropertyStakeholder, PropertyStakeholder.property_id == Property.id)
            .filter(
                PropertyStakeholder.stakeholder_id == stakeholder_id,
                Property.is_active == True,
            )
            .order_by(Property.address_line1)
            .all()
        )
        data = stakeholder.to_dict()
        data["properties"] = []
        for prop, relationship_type in rows:
            item = prop.to_dict()
            item["RelationshipType"] = relationship_type
            data["properties"].append(item)
        return data

    def _email_taken_in_tenant(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = self.repo.active_query().filter(
            func.lower(Stakeholder.email) == email.lower(),
            Stakeholder.portal_access_enabled == True,
        )
        if exclude_id is not None:
            query = query.filter(Stakeholder.id != exclude_id)
        return self.session.query(query.exists()).scalar()

    def create_stakeholder(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: Type missing, or portal access without email
            ConflictError: Email already used by a portal user
        """
        if not data.get("type"):
            raise ValidationError("Stakeholder type is required")
        if data.get("portal_access_enabled") and not data.get("email"):
            raise ValidationError("Email is required when portal access is enabled")
        if data.get("portal_access_enabled") and self._email_taken_in_tenant(data["email"]):
            raise ConflictError(EMAIL_IN_USE_MESSAGE)

        stakeholder = self.repo.create(data)
        if stakeholder.portal_access_enabled and stakeholder.email:
            self._run_account_sync(
                stakeholder.id,
                lambda accounts, organization_id: self._create_account(
                    accounts, organization_id, stakeholder
                ),
            )
        return stakeholder.to_dict()

    def update_stakeholder(self, stakeholder_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partial update that keeps the portal account in step.

        Raises:
            NotFoundError: Unknown stakeholder
            ValidationError: Empty update, or enabling portal access without email
            ConflictError: New email already used by another portal user
        """
        if not data:
            raise ValidationError("No fields provided for update")

        existing = self.repo.get_or_raise(stakeholder_id)
        old_email = existing.email
        old_portal = bool(existing.portal_access_enabled)

        new_email = data.get("email", old_email)
        new_portal = bool(data.get("portal_access_enabled", old_portal))
        email_changed = "email" in data and (new_email or "") != (old_email or "")
        portal_toggled = new_portal != old_portal

        if portal_toggled and new_portal and not new_email:
            raise ValidationError("Email is required when portal access is enabled")
        if email_changed and new_email and new_portal:
            if self._email_taken_in_tenant(new_email, exclude_id=stakeholder_id):
                raise ConflictError(EMAIL_IN_USE_MESSAGE)

        stakeholder = self.repo.update(stakeholder_id, data)

        if portal_toggled or (email_changed and new_portal):
            self._run_account_sync(
                stakeholder_id,
                lambda accounts, organization_id: self._sync_account(
                    accounts,
                    organization_id,
                    stakeholder,
                    portal_toggled=portal_toggled,
                    email_changed=email_changed,
                ),
            )
        return stakeholder.to_dict()

    def delete_stakeholder(self, stakeholder_id: int) -> None:
        stakeholder = self.repo.soft_delete(stakeholder_id)
        if stakeholder.portal_access_enabled:
            self._run_account_sync(stakeholder_id, self._deactivate_account(stakeholder_id))

    # --- Portal account synchronisation ---

    def _run_account_sync(self, stakeholder_id: int, operation: Callable) -> None:
        try:
            with self._master_session_factory() as master_db:
                organization_id = OrganizationService(master_db).get_current_organization_id()
                if not organization_id:
                    logger.warning(
                        "Could not find organization for tenant database; skipping account sync",
                        extra={"stakeholder_id": stakeholder_id},
                    )
                    return
                operation(UserAccountService(master_db), organization_id)
        except (AppError, SQLAlchemyError) as e:
            logger.error(
                "Failed to sync user account for stakeholder",
                extra={
                    "stakeholder_id": stakeholder_id,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )

    def _create_account(self, accounts: UserAccountService, organization_id: str, stakeholder) -> None:
        account, _ = accounts.create(
            organization_id=organization_id,
            email=stakeholder.email,
            stakeholder_id=stakeholder.id,
            first_name=stakeholder.first_name,
            last_name=stakeholder.last_name,
        )
        logger.info(
            "Auto-created user account for stakeholder",
            extra={"stakeholder_id": stakeholder.id, "user_account_id": account.id},
        )

    def _sync_account(
        self,
        accounts: UserAccountService,
        organization_id: str,
        stakeholder,
        portal_toggled: bool,
        email_changed: bool,
    ) -> None:
        account = accounts.find_by_stakeholder_id(
            organization_id, stakeholder.id, include_inactive=True
        )

        if portal_toggled and not stakeholder.portal_access_enabled:
            if account is not None:
                accounts.deactivate(account.id)
            return

        if account is not None:
            if portal_toggled:
                accounts.reactivate(account.id)
            if email_changed and stakeholder.email:
                accounts.update_email(account.id, stakeholder.email)
            return

        # No linked account yet: adopt an unlinked one with this email
        unlinked = accounts.find_by_email_including_inactive(stakeholder.email)
        if unlinked is not None and unlinked.stakeholder_id is None:
            accounts.link_to_stakeholder(unlinked.id, stakeholder.id)
            accounts.reactivate(unlinked.id)
            logger.info(
                "Linked existing user account to stakeholder",
                extra={"stakeholder_id": stakeholder.id, "user_account_id": unlinked.id},
            )
            return

        self._create_account(accounts, organization_id, stakeholder)

    def _deactivate_account(self, stakeholder_id: int) -> Callable:
        def operation(accounts: UserAccountService, organization_id: str) -> None:
            account = accounts.find_by_stakeholder_id(organization_id, stakeholder_id)
            if account is not None:
                accounts.deactivate(account.id)
        return operation
