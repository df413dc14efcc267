"""
Role Routes

GET /roles - List active roles
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from placement_crm.core.auth import get_current_account
from placement_crm.db.database import get_db
from placement_crm.services.role_service import RoleResolver
from placement_crm.schemas.schemas import ApiResponse

router = APIRouter(prefix="/roles", tags=["Roles"], dependencies=[Depends(get_current_account)])


@router.get("", response_model=ApiResponse)
def list_roles(db: Session = Depends(get_db)):
    return ApiResponse(message="Roles retrieved successfully", data=RoleResolver().list_roles(db))
