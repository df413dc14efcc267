"""
Child Record Routes - one record of an aggregate's child group at a time.

For every group registered on a root router (e.g. facilities/branches):

POST /{root_id}/{group} - Add a record to a live root
GET /{root_id}/{group} - Live records of the group
GET /{group}/{id} - One record
PUT /{group}/{id} - Partial update of one record
DELETE /{group}/{id} - Soft delete one record
"""

from typing import Any, Callable, Dict, Iterable, Tuple

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from placement_crm.db.database import get_db
from placement_crm.services.aggregates import AggregateService
from placement_crm.schemas.schemas import ApiResponse


def add_child_routes(
    router: APIRouter,
    get_service: Callable[..., AggregateService],
    groups: Iterable[Tuple[str, str, str]],
) -> None:
    """Register the five record routes for each (path, group name, label)."""
    for path, group_name, label in groups:
        _register(router, get_service, path, group_name, label)


def _register(router: APIRouter, get_service, path: str, group_name: str, label: str) -> None:
    tag = router.tags[0] if router.tags else None
    summary = label.lower()

    @router.post(
        f"/{{root_id}}/{path}",
        response_model=ApiResponse,
        status_code=201,
        summary=f"Add {summary}",
        operation_id=f"add_{tag}_{group_name}".replace(" ", "_").lower(),
    )
    def add_record(
        root_id: int,
        data: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        service: AggregateService = Depends(get_service),
    ):
        record = service.add_child(db, root_id, group_name, data)
        return ApiResponse(message=f"{label} added successfully", data=record)

    @router.get(
        f"/{{root_id}}/{path}",
        response_model=ApiResponse,
        summary=f"List {summary} records",
        operation_id=f"list_{tag}_{group_name}".replace(" ", "_").lower(),
    )
    def list_records(root_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
        return ApiResponse(message="Success", data=service.list_children(db, root_id, group_name))

    @router.get(
        f"/{path}/{{record_id}}",
        response_model=ApiResponse,
        summary=f"Get {summary}",
        operation_id=f"get_{tag}_{group_name}".replace(" ", "_").lower(),
    )
    def get_record(record_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
        return ApiResponse(message="Success", data=service.get_child(db, group_name, record_id))

    @router.put(
        f"/{path}/{{record_id}}",
        response_model=ApiResponse,
        summary=f"Update {summary}",
        operation_id=f"update_{tag}_{group_name}".replace(" ", "_").lower(),
    )
    def update_record(
        record_id: int,
        data: Dict[str, Any] = Body(...),
        db: Session = Depends(get_db),
        service: AggregateService = Depends(get_service),
    ):
        record = service.update_child(db, group_name, record_id, data)
        return ApiResponse(message=f"{label} updated successfully", data=record)

    @router.delete(
        f"/{path}/{{record_id}}",
        response_model=ApiResponse,
        summary=f"Delete {summary}",
        operation_id=f"delete_{tag}_{group_name}".replace(" ", "_").lower(),
    )
    def delete_record(record_id: int, db: Session = Depends(get_db), service: AggregateService = Depends(get_service)):
        service.remove_child(db, group_name, record_id)
        return ApiResponse(message=f"{label} deleted successfully")
