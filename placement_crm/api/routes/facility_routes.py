"""
Facility Routes

POST /facilities - Create facility with child records and optional login
GET /facilities - List facilities with filters
GET /facilities/{id} - Facility with all child records and linked account
PUT /facilities/{id} - Update facility fields
DELETE /facilities/{id} - Soft delete
DELETE /facilities/{id}/permanent - Permanent delete (Admin only)

Child records (attributes, organization, branches, agreements, documents, rules):
POST|GET /facilities/{id}/{group}, GET|PUT|DELETE /facilities/{group}/{record_id}
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from placement_crm.api.deps import ListParams
from placement_crm.api.routes.child_routes import add_child_routes
from placement_crm.core.auth import PasswordHasher, get_current_account, get_hasher, require_admin
from placement_crm.db.database import get_db
from placement_crm.services.aggregates import AggregateService, facility_service
from placement_crm.schemas.schemas import ApiResponse, FacilityCreate, FacilityUpdate

router = APIRouter(
    prefix="/facilities",
    tags=["Facilities"],
    dependencies=[Depends(get_current_account)],
)


def get_service(hasher: PasswordHasher = Depends(get_hasher)) -> AggregateService:
    return facility_service(hasher)


@router.post("", response_model=ApiResponse, status_code=201)
def create_facility(
    data: FacilityCreate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    """
    Create a facility, its child record groups and (optionally) its login.

    All rows are written in one transaction: either everything exists
    afterwards or nothing does.
    """
    facility = service.create(db, data)
    return ApiResponse(message="Facility created successfully", data=facility)


@router.get("", response_model=ApiResponse)
def list_facilities(
    source_of_data: Optional[str] = Query(None),
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    """List facilities. Keyword matches organization name, business name or ABN."""
    facilities, pagination = service.list(db, params.to_query(source_of_data=source_of_data))
    return ApiResponse(message="Facilities retrieved successfully", data=facilities, pagination=pagination)


@router.get("/{facility_id}", response_model=ApiResponse)
def get_facility(facility_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    return ApiResponse(message="Success", data=service.detail(db, facility_id))


@router.put("/{facility_id}", response_model=ApiResponse)
def update_facility(
    facility_id: int,
    data: FacilityUpdate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    """Update facility fields. Child records are managed separately."""
    facility = service.update(db, facility_id, data)
    return ApiResponse(message="Facility updated successfully", data=facility)


@router.delete("/{facility_id}", response_model=ApiResponse)
def delete_facility(facility_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    service.remove(db, facility_id)
    return ApiResponse(message="Facility deleted successfully")


@router.delete(
    "/{facility_id}/permanent",
    response_model=ApiResponse,
    dependencies=[Depends(require_admin)],
)
def permanently_delete_facility(
    facility_id: int,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    service.permanently_delete(db, facility_id)
    return ApiResponse(message="Facility permanently deleted")


add_child_routes(router, get_service, (
    ("attributes", "attributes", "Facility attribute"),
    ("organization", "organization_structures", "Organization structure"),
    ("branches", "branches", "Branch site"),
    ("agreements", "agreements", "Agreement"),
    ("documents", "documents_required", "Required document"),
    ("rules", "rules", "Facility rule"),
))
