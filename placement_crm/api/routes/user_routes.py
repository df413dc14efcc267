"""
User (login account) Routes

GET /users - List accounts, filter by role name and status
GET /users/{id} - Get one account
PATCH /users/{id}/status - Activate / deactivate an account

Admin only. Passwords are never returned.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from placement_crm.api.deps import ListParams
from placement_crm.core.auth import require_admin
from placement_crm.db.database import get_db
from placement_crm.services.account_service import get_account, list_accounts, set_status
from placement_crm.schemas.schemas import AccountStatus, AccountStatusUpdate, ApiResponse

router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(require_admin)])


@router.get("", response_model=ApiResponse)
def list_users(
    role_name: Optional[str] = Query(None),
    status: Optional[AccountStatus] = Query(None),
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
):
    users, pagination = list_accounts(
        db,
        role_name=role_name,
        status=status.value if status else None,
        page=params.page,
        limit=params.limit,
    )
    return ApiResponse(message="Users retrieved successfully", data=users, pagination=pagination)


@router.get("/{account_id}", response_model=ApiResponse)
def get_user(account_id: int, db: Session = Depends(get_db)):
    return ApiResponse(message="Success", data=get_account(db, account_id))


@router.patch("/{account_id}/status", response_model=ApiResponse)
def update_user_status(account_id: int, data: AccountStatusUpdate, db: Session = Depends(get_db)):
    """Deactivated accounts can no longer log in."""
    account = set_status(db, account_id, data.status)
    return ApiResponse(message=f"User status set to {account['status']}", data=account)
