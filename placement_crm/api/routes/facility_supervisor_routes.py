"""
Facility Supervisor Routes

POST /facility-supervisors - Create supervisor (facility must exist) with login
GET /facility-supervisors - List, optionally for one facility
GET /facility-supervisors/{id} - Get supervisor and linked account
PUT /facility-supervisors/{id} - Update
DELETE /facility-supervisors/{id} - Soft delete
DELETE /facility-supervisors/{id}/permanent - Permanent delete (Admin only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from placement_crm.api.deps import ListParams
from placement_crm.core.auth import PasswordHasher, get_current_account, get_hasher, require_admin
from placement_crm.db.database import get_db
from placement_crm.services.aggregates import AggregateService, facility_supervisor_service
from placement_crm.schemas.schemas import ApiResponse, FacilitySupervisorCreate, FacilitySupervisorUpdate

router = APIRouter(
    prefix="/facility-supervisors",
    tags=["Facility Supervisors"],
    dependencies=[Depends(get_current_account)],
)


def get_service(hasher: PasswordHasher = Depends(get_hasher)) -> AggregateService:
    return facility_supervisor_service(hasher)


@router.post("", response_model=ApiResponse, status_code=201)
def create_supervisor(
    data: FacilitySupervisorCreate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    supervisor = service.create(db, data)
    return ApiResponse(message="Facility Supervisor created successfully", data=supervisor)


@router.get("", response_model=ApiResponse)
def list_supervisors(
    facility_id: Optional[int] = Query(None, ge=1),
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    supervisors, pagination = service.list(db, params.to_query(facility_id=facility_id))
    return ApiResponse(message="Facility Supervisors retrieved successfully", data=supervisors, pagination=pagination)


@router.get("/{supervisor_id}", response_model=ApiResponse)
def get_supervisor(supervisor_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    return ApiResponse(message="Success", data=service.detail(db, supervisor_id))


@router.put("/{supervisor_id}", response_model=ApiResponse)
def update_supervisor(
    supervisor_id: int,
    data: FacilitySupervisorUpdate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    supervisor = service.update(db, supervisor_id, data)
    return ApiResponse(message="Facility Supervisor updated successfully", data=supervisor)


@router.delete("/{supervisor_id}", response_model=ApiResponse)
def delete_supervisor(supervisor_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    service.remove(db, supervisor_id)
    return ApiResponse(message="Facility Supervisor deleted successfully")


@router.delete(
    "/{supervisor_id}/permanent",
    response_model=ApiResponse,
    dependencies=[Depends(require_admin)],
)
def permanently_delete_supervisor(
    supervisor_id: int,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    service.permanently_delete(db, supervisor_id)
    return ApiResponse(message="Facility Supervisor permanently deleted")
