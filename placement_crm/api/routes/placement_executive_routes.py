"""
Placement Executive Routes

POST /placement-executives - Create executive together with its login
GET /placement-executives - List with keyword / employment type filters
GET /placement-executives/{id} - Get executive and linked account
PUT /placement-executives/{id} - Update
DELETE /placement-executives/{id} - Soft delete
DELETE /placement-executives/{id}/permanent - Permanent delete (Admin only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from placement_crm.api.deps import ListParams
from placement_crm.core.auth import PasswordHasher, get_current_account, get_hasher, require_admin
from placement_crm.db.database import get_db
from placement_crm.services.aggregates import AggregateService, placement_executive_service
from placement_crm.schemas.schemas import (
    ApiResponse, EmploymentType, PlacementExecutiveCreate, PlacementExecutiveUpdate
)

router = APIRouter(
    prefix="/placement-executives",
    tags=["Placement Executives"],
    dependencies=[Depends(get_current_account)],
)


def get_service(hasher: PasswordHasher = Depends(get_hasher)) -> AggregateService:
    return placement_executive_service(hasher)


@router.post("", response_model=ApiResponse, status_code=201)
def create_executive(
    data: PlacementExecutiveCreate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    """Create a placement executive. A login (userID + password) is required."""
    executive = service.create(db, data)
    return ApiResponse(message="Placement Executive created successfully", data=executive)


@router.get("", response_model=ApiResponse)
def list_executives(
    employment_type: Optional[EmploymentType] = Query(None),
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    executives, pagination = service.list(
        db, params.to_query(employment_type=employment_type.value if employment_type else None)
    )
    return ApiResponse(message="Placement Executives retrieved successfully", data=executives, pagination=pagination)


@router.get("/{executive_id}", response_model=ApiResponse)
def get_executive(executive_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    return ApiResponse(message="Success", data=service.detail(db, executive_id))


@router.put("/{executive_id}", response_model=ApiResponse)
def update_executive(
    executive_id: int,
    data: PlacementExecutiveUpdate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    executive = service.update(db, executive_id, data)
    return ApiResponse(message="Placement Executive updated successfully", data=executive)


@router.delete("/{executive_id}", response_model=ApiResponse)
def delete_executive(executive_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    service.remove(db, executive_id)
    return ApiResponse(message="Placement Executive deleted successfully")


@router.delete(
    "/{executive_id}/permanent",
    response_model=ApiResponse,
    dependencies=[Depends(require_admin)],
)
def permanently_delete_executive(
    executive_id: int,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    service.permanently_delete(db, executive_id)
    return ApiResponse(message="Placement Executive permanently deleted")
