"""
User account service (master database).

This service handles:
- Creating portal accounts for stakeholders with a temporary password
- Looking accounts up by email, username or stakeholder
- Email changes, stakeholder linking, activation and deactivation
- Password updates and login bookkeeping

Usernames are email addresses; changing the email changes the username.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hoa_nexus.auth.passwords import hash_password
from hoa_nexus.models.user_account import UserAccount
from hoa_nexus.platform.errors import ConflictError, NotFoundError, ValidationError
from hoa_nexus.utils.password_generator import generate_temp_password

logger = logging.getLogger(__name__)

TEMP_PASSWORD_VALID_DAYS = 7


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DATETIME columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserAccountService:
    """Manages sec_UserAccounts rows in the master database."""

    def __init__(self, session: Session):
        """
        Args:
            session: Session bound to the master database
        """
        self.session = session

    def get_by_id(self, account_id: str) -> Optional[UserAccount]:
        return self.session.get(UserAccount, account_id)

    def find_by_username(self, username: str) -> Optional[UserAccount]:
        return self.session.query(UserAccount).filter(
            UserAccount.username == username,
            UserAccount.is_active == True,
        ).first()

    def find_by_email(self, email: str) -> Optional[UserAccount]:
        """Active account with this email, or None."""
        return self.session.query(UserAccount).filter(
            UserAccount.email == email,
            UserAccount.is_active == True,
        ).first()

    def find_by_email_including_inactive(self, email: str) -> Optional[UserAccount]:
        return self.session.query(UserAccount).filter(UserAccount.email == email).first()

    def find_by_stakeholder_id(
        self,
        organization_id: str,
        stakeholder_id: int,
        include_inactive: bool = False,
    ) -> Optional[UserAccount]:
        """
        Account linked to a stakeholder of the given organization.

        Stakeholder IDs are only unique within one tenant database, so the
        organization is part of the key.
        """
        query = self.session.query(UserAccount).filter(
            UserAccount.organization_id == organization_id,
            UserAccount.stakeholder_id == stakeholder_id,
        )
        if not include_inactive:
            query = query.filter(UserAccount.is_active == True)
        return query.first()

    def create(
        self,
        organization_id: str,
        email: str,
        stakeholder_id: Optional[int] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        temp_password: Optional[str] = None,
    ) -> Tuple[UserAccount, str]:
        """
        Create an account that must change its password on first login.

        Args:
            organization_id: Owning organization
            email: Email address, also used as the username
            stakeholder_id: Stakeholder in the organization's tenant database
            first_name: Optional first name
            last_name: Optional last name
            temp_password: Temporary password (generated when omitted)

        Returns:
            Tuple of (account, plaintext temporary password)

        Raises:
            ValidationError: If email is missing
            ConflictError: If the email is already registered
        """
        if not email:
            raise ValidationError("Email is required to create a user account")

        password = temp_password or generate_temp_password()
        account = UserAccount(
            organization_id=organization_id,
            username=email,
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            stakeholder_id=stakeholder_id,
            must_change_password=True,
            temp_password_expiry=utcnow() + timedelta(days=TEMP_PASSWORD_VALID_DAYS),
            is_active=True,
        )
        self.session.add(account)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError("Email address is already in use") from e

        logger.info(
            "User account created",
            extra={
                "user_account_id": account.id,
                "organization_id": organization_id,
                "stakeholder_id": stakeholder_id,
            },
        )
        return account, password

    def _require(self, account_id: str) -> UserAccount:
        account = self.get_by_id(account_id)
        if account is None:
            raise NotFoundError("User account", account_id)
        return account

    def update_email(self, account_id: str, new_email: str) -> UserAccount:
        """
        Change the email (and username) of an account.

        Raises:
            NotFoundError: Unknown account
            ConflictError: Email already used by another account
        """
        account = self._require(account_id)
        account.email = new_email
        account.username = new_email
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError("Email address is already in use") from e
        return account

    def link_to_stakeholder(self, account_id: str, stakeholder_id: int) -> UserAccount:
        account = self._require(account_id)
        account.stakeholder_id = stakeholder_id
        self.session.commit()
        return account

    def deactivate(self, account_id: str) -> UserAccount:
        account = self._require(account_id)
        account.is_active = False
        self.session.commit()
        logger.info("User account deactivated", extra={"user_account_id": account_id})
        return account

    def reactivate(self, account_id: str) -> UserAccount:
        """Re-enable an account and clear any lockout."""
        account = self._require(account_id)
        account.is_active = True
        account.account_locked = False
        account.failed_login_attempts = 0
        self.session.commit()
        logger.info("User account reactivated", extra={"user_account_id": account_id})
        return account

    def update_password(self, account_id: str, new_password: str) -> UserAccount:
        """Set a permanent password, ending any temporary password period."""
        account = self._require(account_id)
        account.password_hash = hash_password(new_password)
        account.must_change_password = False
        account.temp_password_expiry = None
        account.password_last_changed = utcnow()
        self.session.commit()
        logger.info("User account password changed", extra={"user_account_id": account_id})
        return account

    def record_failed_login(self, account: UserAccount) -> None:
        account.failed_login_attempts = (account.failed_login_attempts or 0) + 1
        self.session.commit()

    def record_successful_login(self, account: UserAccount) -> None:
        account.last_login_date = utcnow()
        account.failed_login_attempts = 0
        self.session.commit()
