"""
Authentication Utility - Password hashing and JWT handling.

Provides:
- Password hashing with bcrypt (salted, cost factor from settings)
- JWT token creation/verification
- FastAPI dependency for protected routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from placement_crm.core.config import Settings
from placement_crm.core.errors import AuthError, NotFoundError, ValidationError
from placement_crm.db.database import get_db
from placement_crm.services.account_service import get_account


class PasswordHasher:
    """
    One-way credential provisioner.

    The stored string is self-describing ($2b$<cost>$<salt><digest>), so
    verification needs nothing but the plaintext and the stored value.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        if not password or not password.strip():
            raise ValidationError("Password cannot be empty")
        return self._context.hash(password)

    def verify(self, password: str, hashed_password: str) -> bool:
        """Constant-time check. A mismatch or a malformed hash is just False."""
        if not password or not hashed_password:
            return False
        try:
            return self._context.verify(password, hashed_password)
        except ValueError:
            return False


# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db),
) -> dict:
    """
    FastAPI dependency - Get current authenticated account.

    Usage:
        @router.get("/protected")
        def route(account: dict = Depends(get_current_account)):
            return account
    """
    if credentials is None:
        raise AuthError("Not authenticated")

    payload = decode_token(credentials.credentials, settings)
    if not payload or not payload.get("sub"):
        raise AuthError("Invalid or expired token")

    try:
        account = get_account(db, int(payload["sub"]))
    except NotFoundError:
        raise AuthError("Invalid or expired token")
    if account["status"] != "active":
        raise AuthError("Account deactivated", status_code=403)
    return account


def require_role(*role_names: str):
    """
    Dependency factory: the current account must hold one of `role_names`.

    Usage:
        @router.delete("/{id}/permanent", dependencies=[Depends(require_role("Admin"))])
    """
    def check_role(account: dict = Depends(get_current_account)) -> dict:
        if account["role_name"] not in role_names:
            raise AuthError(f"{' or '.join(role_names)} access required", status_code=403)
        return account
    return check_role


require_admin = require_role("Admin")
