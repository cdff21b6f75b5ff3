"""
Login and session services.

Login spans two databases:
1. The master database holds the account (credentials, lockout state) and
   the organization, whose DatabaseName identifies the tenant database.
2. The tenant database holds the stakeholder profile (type, access level,
   portal access flag).

The issued JWT carries databaseName, which the auth middleware uses to route
every later request to the right tenant database.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from hoa_nexus.auth.jwt import create_access_token
from hoa_nexus.auth.passwords import verify_password
from hoa_nexus.database.session import tenant_session
from hoa_nexus.models.stakeholder import Stakeholder
from hoa_nexus.models.user_account import UserAccount
from hoa_nexus.platform.errors import NotFoundError, UnauthorizedError, ValidationError
from hoa_nexus.platform.tenant_context import TenantContext
from hoa_nexus.services.organization_service import OrganizationService
from hoa_nexus.services.user_account_service import UserAccountService, utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
MIN_PASSWORD_LENGTH = 8


def _user_payload(account: UserAccount, stakeholder: Stakeholder) -> Dict[str, Any]:
    return {
        "id": account.id,
        "username": account.username,
        "stakeholderId": stakeholder.id,
        "type": stakeholder.type,
        "subType": stakeholder.sub_type,
        "accessLevel": stakeholder.access_level,
        "firstName": stakeholder.first_name,
        "lastName": stakeholder.last_name,
        "email": stakeholder.email or account.email,
        "communityId": stakeholder.community_id,
        "portalAccessEnabled": bool(stakeholder.portal_access_enabled),
        "mustChangePassword": bool(account.must_change_password),
    }


class AuthService:
    """Authenticates accounts and issues session tokens."""

    def __init__(self, master_session: Session):
        """
        Args:
            master_session: Session bound to the master database. Tenant
                sessions are opened per login for the account's organization.
        """
        self.session = master_session
        self.accounts = UserAccountService(master_session)
        self.organizations = OrganizationService(master_session)

    def login(self, username: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """
        Verify credentials and issue a token.

        Returns:
            Dict with "token" and "user"

        Raises:
            ValidationError: Missing username or password
            UnauthorizedError: Bad credentials, locked or expired account,
                inactive organization or portal access disabled
        """
        if not username or not password:
            raise ValidationError("Username and password are required")

        account = self.accounts.find_by_username(username)
        if account is None:
            logger.warning("Login failed: unknown username")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if account.account_locked:
            logger.warning("Login rejected: account locked", extra={"user_account_id": account.id})
            raise UnauthorizedError("Account is locked. Please contact administrator.")

        if not verify_password(password, account.password_hash):
            self.accounts.record_failed_login(account)
            logger.warning(
                "Login failed: bad password",
                extra={
                    "user_account_id": account.id,
                    "failed_login_attempts": account.failed_login_attempts,
                },
            )
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        if (
            account.must_change_password
            and account.temp_password_expiry is not None
            and account.temp_password_expiry < utcnow()
        ):
            raise UnauthorizedError("Temporary password has expired. Please contact administrator.")

        organization = self.organizations.get_active_by_id(account.organization_id)
        if organization is None:
            logger.warning(
                "Login rejected: organization inactive",
                extra={"user_account_id": account.id, "organization_id": account.organization_id},
            )
            raise UnauthorizedError("Organization is not active")

        database_name = organization.database_name
        with tenant_session(database_name) as tenant_db:
            stakeholder = tenant_db.query(Stakeholder).filter(
                Stakeholder.id == account.stakeholder_id,
                Stakeholder.is_active == True,
            ).first()

            if stakeholder is None:
                logger.warning(
                    "Login rejected: no stakeholder profile",
                    extra={"user_account_id": account.id, "database_name": database_name},
                )
                raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

            if not stakeholder.portal_access_enabled:
                raise UnauthorizedError("Portal access is not enabled for this account.")

            stakeholder.last_login_date = utcnow()
            tenant_db.commit()
            user = _user_payload(account, stakeholder)

        self.accounts.record_successful_login(account)

        token = create_access_token({
            "userId": account.id,
            "stakeholderId": user["stakeholderId"],
            "username": account.username,
            "type": user["type"],
            "subType": user["subType"],
            "accessLevel": user["accessLevel"],
            "databaseName": database_name,
            "organizationId": organization.id,
        })

        logger.info(
            "Login successful",
            extra={
                "user_account_id": account.id,
                "stakeholder_id": user["stakeholderId"],
                "database_name": database_name,
            },
        )
        return {"token": token, "user": user}

    def get_current_user(self, context: TenantContext, tenant_db: Session) -> Dict[str, Any]:
        """
        Reload the caller's account and stakeholder profile.

        Args:
            context: Authenticated caller
            tenant_db: Session on the caller's tenant database

        Raises:
            NotFoundError: Account or stakeholder no longer active
        """
        account = self.accounts.get_by_id(context.user_id)
        if account is None or not account.is_active:
            raise NotFoundError("User")

        stakeholder = tenant_db.query(Stakeholder).filter(
            Stakeholder.id == account.stakeholder_id,
            Stakeholder.is_active == True,
        ).first()
        if stakeholder is None:
            raise NotFoundError("User")

        return _user_payload(account, stakeholder)

    def change_password(
        self,
        account_id: str,
        current_password: Optional[str],
        new_password: Optional[str],
    ) -> None:
        """
        Replace the caller's password after verifying the current one.

        Raises:
            ValidationError: Missing or too short new password
            NotFoundError: Account not found
            UnauthorizedError: Current password is wrong
        """
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        account = self.accounts.get_by_id(account_id)
        if account is None or not account.is_active:
            raise NotFoundError("User")

        if not verify_password(current_password, account.password_hash):
            raise UnauthorizedError("Current password is incorrect")

        self.accounts.update_password(account_id, new_password)
