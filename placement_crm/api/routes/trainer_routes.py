"""
Trainer Routes

POST /trainers - Create trainer together with its login
GET /trainers - List trainers
GET /trainers/{id} - Get trainer and linked account
PUT /trainers/{id} - Update
DELETE /trainers/{id} - Soft delete
DELETE /trainers/{id}/permanent - Permanent delete (Admin only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from placement_crm.api.deps import ListParams
from placement_crm.core.auth import PasswordHasher, get_current_account, get_hasher, require_admin
from placement_crm.db.database import get_db
from placement_crm.services.aggregates import AggregateService, trainer_service
from placement_crm.schemas.schemas import ApiResponse, TrainerCreate, TrainerUpdate

router = APIRouter(
    prefix="/trainers",
    tags=["Trainers"],
    dependencies=[Depends(get_current_account)],
)


def get_service(hasher: PasswordHasher = Depends(get_hasher)) -> AggregateService:
    return trainer_service(hasher)


@router.post("", response_model=ApiResponse, status_code=201)
def create_trainer(data: TrainerCreate, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    trainer = service.create(db, data)
    return ApiResponse(message="Trainer created successfully", data=trainer)


@router.get("", response_model=ApiResponse)
def list_trainers(
    trainer_type: Optional[str] = Query(None),
    gender: Optional[str] = Query(None),
    params: ListParams = Depends(),
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    trainers, pagination = service.list(db, params.to_query(trainer_type=trainer_type, gender=gender))
    return ApiResponse(message="Trainers retrieved successfully", data=trainers, pagination=pagination)


@router.get("/{trainer_id}", response_model=ApiResponse)
def get_trainer(trainer_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    return ApiResponse(message="Success", data=service.detail(db, trainer_id))


@router.put("/{trainer_id}", response_model=ApiResponse)
def update_trainer(
    trainer_id: int,
    data: TrainerUpdate,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    trainer = service.update(db, trainer_id, data)
    return ApiResponse(message="Trainer updated successfully", data=trainer)


@router.delete("/{trainer_id}", response_model=ApiResponse)
def delete_trainer(trainer_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
    service.remove(db, trainer_id)
    return ApiResponse(message="Trainer deleted successfully")


@router.delete(
    "/{trainer_id}/permanent",
    response_model=ApiResponse,
    dependencies=[Depends(require_admin)],
)
def permanently_delete_trainer(
    trainer_id: int,
    db: Session = Depends(get_db),
    service: AggregateService = Depends(get_service),
):
    service.permanently_delete(db, trainer_id)
    return ApiResponse(message="Trainer permanently deleted")
