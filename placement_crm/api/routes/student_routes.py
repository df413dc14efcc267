"""
Student Routes

POST /students - Create student with its child record groups and an optional login
GET /students - List students (status / type / nationality filters)
GET /students/{id} - Student with all child records and linked account
PUT /students/{id} - Update student fields
DELETE /students/{id} - Soft delete (child records and login deactivated too)
DELETE /students/{id}/permanent - Permanent delete (Admin only)

Child records (contact-details, visa-details, addresses, eligibility-status,
job-status-updates, lifestyle, placement-preferences, facility-records,
address-change-requests):
POST|GET /students/{id}/{group}, GET|PUT|DELETE /students/{group}/{record_id}
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from placement_crm.api.deps import ListParams
from placement_crm.api.routes.child_routes import add_child_routes
from placement_crm.core.auth import PasswordHasher, get_current_account, get_hasher, require_admin
from placement_crm.db.database import get_db
from placement_crm.services.aggregates import AggregateService, student_service
from placement_crm.schemas.schemas import (
    ApiResponse, StudentCreate, StudentStatus, StudentType, StudentUpdate
)

router = APIRouter(
    prefix="/students",
    tags=["Students"],
    dependencies=[Depends(get_current_account)],
)


def get_service(hasher: PasswordHasher = Depends(get_hasher)) -> AggregateService:
    return student_service(hasher)


@router.post("", response_model=ApiResponse, status_code=201)
def create_student(data: StudentCreate, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    """
    Create a student profile.

    Child record groups are optional lists. If `login` is given the account
    is created in the same transaction with the Student role.
    """
    student = service.create(db, data)
    return ApiResponse(message="Student created successfully", data=student)


@router.get("", response_model=ApiResponse)
def list_students(
    status: Optional[StudentStatus] = Query(None),
    student_type: Optional[StudentType] = Query(None),
    nationality: Optional[str] = Query(None),
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    students, pagination = service.list(
        db,
        params.to_query(
            status=status.value if status else None,
            student_type=student_type.value if student_type else None,
            nationality=nationality,
        ),
    )
    return ApiResponse(message="Students retrieved successfully", data=students, pagination=pagination)


@router.get("/{student_id}", response_model=ApiResponse)
def get_student(student_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    return ApiResponse(message="Success", data=service.detail(db, student_id))


@router.put("/{student_id}", response_model=ApiResponse)
def update_student(
    student_id: int,
    data: StudentUpdate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    student = service.update(db, student_id, data)
    return ApiResponse(message="Student updated successfully", data=student)


@router.delete("/{student_id}", response_model=ApiResponse)
def delete_student(student_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    service.remove(db, student_id)
    return ApiResponse(message="Student deleted successfully")


@router.delete(
    "/{student_id}/permanent",
    response_model=ApiResponse,
    dependencies=[Depends(require_admin)],
)
def permanently_delete_student(
    student_id: int,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    service.permanently_delete(db, student_id)
    return ApiResponse(message="Student permanently deleted")


add_child_routes(router, get_service, (
    ("contact-details", "contact_details", "Contact details"),
    ("visa-details", "visa_details", "Visa details"),
    ("addresses", "addresses", "Address"),
    ("eligibility-status", "eligibility_status", "Eligibility status"),
    ("job-status-updates", "job_status_updates", "Job status update"),
    ("lifestyle", "lifestyle", "Lifestyle record"),
    ("placement-preferences", "placement_preferences", "Placement preference"),
    ("facility-records", "facility_records", "Facility record"),
    ("address-change-requests", "address_change_requests", "Address change request"),
))
