"""
Authentication Routes

POST /auth/login - Login with userID/password and get JWT token
GET /auth/me - Get current account info
PUT /auth/change-password - Change own password (current password required)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from placement_crm.core.auth import (
    PasswordHasher, create_access_token, get_app_settings, get_current_account, get_hasher
)
from placement_crm.core.config import Settings
from placement_crm.db.database import get_db
from placement_crm.services.account_service import authenticate, change_password
from placement_crm.schemas.schemas import ApiResponse, LoginRequest, PasswordChange, TokenResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    settings: Settings = Depends(get_app_settings),
):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    account = authenticate(db, hasher, request.userID, request.password)
    token = create_access_token(
        data={"sub": str(account["id"]), "role": account["role_name"]},
        settings=settings,
    )
    return TokenResponse(access_token=token, account=account)


@router.get("/me", response_model=ApiResponse)
def get_me(account: dict = Depends(get_current_account)):
    """Get current authenticated account's info."""
    return ApiResponse(message="Success", data=account)


@router.put("/change-password", response_model=ApiResponse)
def change_own_password(
    data: PasswordChange,
    account: dict = Depends(get_current_account),
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
):
    """Existing tokens stay valid; the new password applies to the next login."""
    updated = change_password(db, hasher, account["id"], data.current_password, data.new_password)
    return ApiResponse(message="Password changed successfully", data=updated)
