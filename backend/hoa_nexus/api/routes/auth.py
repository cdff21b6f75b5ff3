"""
Authentication routes.

POST /api/auth/login and /api/auth/logout are public; /me and
/change-password need a token. Tokens are stateless, so logout only
acknowledges; the client discards the token.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hoa_nexus.database.session import get_master_session, get_tenant_session
from hoa_nexus.platform.tenant_context import get_tenant_context
from hoa_nexus.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# --- Request Models ---


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(None, alias="currentPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")


# --- API Endpoints ---


@router.post("/login")
def login(body: LoginRequest, master_db: Session = Depends(get_master_session)):
    result = AuthService(master_db).login(body.username, body.password)
    return {
        "success": True,
        "message": "Login successful",
        "token": result["token"],
        "user": result["user"],
    }


@router.post("/logout")
async def logout():
    return {"success": True, "message": "Logout successful"}


@router.get("/me")
def get_current_user(
    request: Request,
    master_db: Session = Depends(get_master_session),
    tenant_db: Session = Depends(get_tenant_session),
):
    tenant_context = get_tenant_context(request)
    user = AuthService(master_db).get_current_user(tenant_context, tenant_db)
    return {"success": True, "user": user}


@router.put("/change-password")
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    master_db: Session = Depends(get_master_session),
):
    tenant_context = get_tenant_context(request)
    AuthService(master_db).change_password(
        tenant_context.user_id, body.current_password, body.new_password
    )
    logger.info("Password changed", extra={"user_id": tenant_context.user_id})
    return {"success": True, "message": "Password changed successfully"}
