"""
JWT issuing and verification for HOA Nexus sessions.

Tokens are HS256-signed with JWT_SECRET and carry the caller's identity plus
the tenant database name that every request will be routed to.

JWT Claims:
- userId: UserAccountID in the master database
- stakeholderId: cor_Stakeholders.ID in the tenant database
- username: Login name
- type / subType / accessLevel: Stakeholder classification (permissions)
- databaseName: Tenant database for this session (absent = default tenant)
- organizationId: Owning organization
- exp / iat: Expiration / issued at timestamps
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hoa_nexus.config.settings import AuthSettings, get_auth_settings

logger = logging.getLogger(__name__)


class HoaJWTClaims(BaseModel):
    """
    Pydantic model for HOA Nexus JWT claims.

    Field names are snake_case; the wire format uses the camelCase aliases.
    """

    user_id: str = Field(..., alias="userId", description="UserAccountID (master DB)")
    username: str = Field(..., description="Login name")
    stakeholder_id: Optional[int] = Field(
        None, alias="stakeholderId", description="Stakeholder ID in the tenant DB"
    )
    stakeholder_type: Optional[str] = Field(None, alias="type", description="Stakeholder type")
    sub_type: Optional[str] = Field(None, alias="subType")
    access_level: Optional[str] = Field(None, alias="accessLevel")
    database_name: Optional[str] = Field(
        None, alias="databaseName", description="Tenant database for this session"
    )
    organization_id: Optional[str] = Field(None, alias="organizationId")

    exp: int = Field(..., description="Expiration timestamp (Unix)")
    iat: int = Field(..., description="Issued at timestamp (Unix)")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @property
    def expiration_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.exp, tz=timezone.utc)

    def to_log_dict(self) -> Dict[str, Any]:
        """Identity fields that are safe to log."""
        return {
            "user_id": self.user_id,
            "stakeholder_id": self.stakeholder_id,
            "database_name": self.database_name,
        }


def create_access_token(
    claims: Dict[str, Any],
    expires_in: Optional[int] = None,
    settings: Optional[AuthSettings] = None,
) -> str:
    """
    Sign a session token.

    Args:
        claims: Payload using the wire (camelCase) claim names
        expires_in: Lifetime in seconds (defaults to JWT_EXPIRES_IN)
        settings: Auth settings (defaults to environment settings)

    Returns:
        Encoded JWT string
    """
    settings = settings or get_auth_settings()
    lifetime = settings.jwt_expires_in if expires_in is None else expires_in

    now = datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = int(now.timestamp())
    payload["exp"] = int((now + timedelta(seconds=lifetime)).timestamp())

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Optional[AuthSettings] = None) -> HoaJWTClaims:
    """
    Verify a session token and parse its claims.

    Raises:
        InvalidTokenError: Bad signature, expired, or malformed claims.
            ExpiredSignatureError is a subclass.
    """
    settings = settings or get_auth_settings()
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["exp", "iat"]},
    )
    try:
        return HoaJWTClaims.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            "JWT has malformed claims",
            extra={"payload_keys": list(payload.keys()), "error_count": e.error_count()},
        )
        raise InvalidTokenError("Malformed token claims") from e
