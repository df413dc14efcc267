"""
Aggregate Services - one declarative descriptor per aggregate type.

Facility, Placement Executive, Trainer, Facility Supervisor and Student all
share the same create/read/update/delete flow. The differences (tables,
child groups, login role, unique keys) live in the descriptors below and the
generic AggregateWriter does the work. Services are composed, not subclassed.
"""

from typing import Any, Dict, List, Type, Union, get_args

from pydantic import BaseModel
from sqlalchemy.orm import Session

from placement_crm.core.errors import ValidationError
from placement_crm.db import tables
from placement_crm.schemas.schemas import (
    FacilityCreate, FacilityUpdate,
    PlacementExecutiveCreate, PlacementExecutiveUpdate,
    TrainerCreate, TrainerUpdate,
    FacilitySupervisorCreate, FacilitySupervisorUpdate,
    StudentCreate, StudentUpdate,
    parse_payload,
)
from placement_crm.services.aggregate_writer import (
    AccountLink, AggregateDescriptor, AggregateWriter, ChildGroup, Dependent,
    ListQuery, LoginCredentials, Reference,
)
from placement_crm.services.role_service import RoleResolver


# ============================================================
# DESCRIPTORS
# ============================================================

FACILITY = AggregateDescriptor(
    name="Facility",
    table=tables.facility,
    id_column="facility_id",
    child_groups=(
        ChildGroup("attributes", tables.facility_attributes, "facility_id"),
        ChildGroup("organization_structures", tables.facility_organization_structure, "facility_id"),
        ChildGroup("branches", tables.facility_branch_sites, "facility_id"),
        ChildGroup("agreements", tables.facility_agreements, "facility_id"),
        ChildGroup("documents_required", tables.facility_documents_required, "facility_id"),
        ChildGroup("rules", tables.facility_rules, "facility_id"),
    ),
    account=AccountLink(role_name="Facility", column="facility_id"),
    dependents=(Dependent(tables.facility_supervisors, "facility_id", "facility supervisor(s)"),),
    search_columns=("organization_name", "registered_business_name", "abn_registration_number"),
    filter_columns=("source_of_data",),
    sort_columns=("facility_id", "organization_name", "created_at", "updated_at"),
)

PLACEMENT_EXECUTIVE = AggregateDescriptor(
    name="Placement Executive",
    table=tables.placement_executives,
    id_column="executive_id",
    account=AccountLink(role_name="Placement Executive", column="executive_id", required=True),
    unique_fields=(("email", "Email"),),
    search_columns=("full_name", "email", "mobile_number"),
    filter_columns=("employment_type",),
    sort_columns=("executive_id", "full_name", "joining_date", "employment_type", "created_at"),
)

TRAINER = AggregateDescriptor(
    name="Trainer",
    table=tables.trainers,
    id_column="trainer_id",
    account=AccountLink(role_name="Trainer", column="trainer_id", required=True),
    unique_fields=(("email", "Email"),),
    search_columns=("first_name", "last_name", "email", "mobile_number"),
    filter_columns=("trainer_type", "gender"),
    sort_columns=("trainer_id", "first_name", "last_name", "yoe", "created_at"),
)

FACILITY_SUPERVISOR = AggregateDescriptor(
    name="Facility Supervisor",
    table=tables.facility_supervisors,
    id_column="supervisor_id",
    account=AccountLink(role_name="Supervisor", column="supervisor_id", required=True),
    unique_fields=(("email", "Email"),),
    references=(Reference("facility_id", tables.facility, "facility_id", "Facility"),),
    search_columns=("full_name", "email", "designation", "mobile_number"),
    filter_columns=("facility_id",),
    sort_columns=("supervisor_id", "full_name", "designation", "created_at"),
)

STUDENT = AggregateDescriptor(
    name="Student",
    table=tables.students,
    id_column="student_id",
    child_groups=(
        ChildGroup("contact_details", tables.student_contact_details, "student_id"),
        ChildGroup("visa_details", tables.student_visa_details, "student_id"),
        ChildGroup("addresses", tables.student_addresses, "student_id"),
        ChildGroup("eligibility_status", tables.student_eligibility_status, "student_id"),
        ChildGroup("job_status_updates", tables.student_job_status_updates, "student_id"),
        ChildGroup("lifestyle", tables.student_lifestyle, "student_id"),
        ChildGroup("placement_preferences", tables.student_placement_preferences, "student_id"),
        ChildGroup("facility_records", tables.student_facility_records, "student_id"),
        ChildGroup("address_change_requests", tables.student_address_change_requests, "student_id"),
    ),
    account=AccountLink(role_name="Student", column="student_id"),
    search_columns=("first_name", "last_name", "nationality"),
    filter_columns=("status", "student_type", "nationality"),
    sort_columns=("student_id", "first_name", "last_name", "dob", "created_at"),
)


# ============================================================
# SERVICE
# ============================================================

class AggregateService:
    """
    Validates payloads with the aggregate's schemas, splits them into
    root fields / child groups / login, and hands off to the writer.
    """

    def __init__(
        self,
        descriptor: AggregateDescriptor,
        create_model: Type[BaseModel],
        update_model: Type[BaseModel],
        hasher,
        roles: RoleResolver = None,
    ):
        self.descriptor = descriptor
        self.create_model = create_model
        self.update_model = update_model
        self.writer = AggregateWriter(descriptor, hasher, roles or RoleResolver())

    def create(self, db: Session, payload: Union[BaseModel, Dict[str, Any]]) -> dict:
        data = parse_payload(self.create_model, payload)
        group_names = [g.name for g in self.descriptor.child_groups]

        root = data.model_dump(exclude={"login", *group_names})
        children = {name: [row.model_dump() for row in getattr(data, name)] for name in group_names}
        login = None
        if getattr(data, "login", None) is not None:
            login = LoginCredentials(user_id=data.login.userID, password=data.login.password)

        return self.writer.create(db, root, children, login)

    def detail(self, db: Session, aggregate_id: int) -> dict:
        return self.writer.load(db, aggregate_id)

    def update(self, db: Session, aggregate_id: int, payload: Union[BaseModel, Dict[str, Any]]) -> dict:
        data = parse_payload(self.update_model, payload)
        return self.writer.update(db, aggregate_id, data.model_dump(exclude_unset=True))

    def list(self, db: Session, query: ListQuery):
        return self.writer.list(db, query)

    def remove(self, db: Session, aggregate_id: int) -> None:
        self.writer.soft_delete(db, aggregate_id)

    def permanently_delete(self, db: Session, aggregate_id: int) -> None:
        self.writer.permanently_delete(db, aggregate_id)

    # ---------------------------------------------------------- child records

    def child_model(self, group_name: str) -> Type[BaseModel]:
        """Row schema of a group, taken from the `List[...]` field of the create schema."""
        self.writer.child_group(group_name)
        return get_args(self.create_model.model_fields[group_name].annotation)[0]

    def list_children(self, db: Session, aggregate_id: int, group_name: str) -> List[dict]:
        return self.writer.list_children(db, aggregate_id, group_name)

    def get_child(self, db: Session, group_name: str, child_id: int) -> dict:
        return self.writer.get_child(db, group_name, child_id)

    def add_child(self, db: Session, aggregate_id: int, group_name: str, payload: Dict[str, Any]) -> dict:
        row = parse_payload(self.child_model(group_name), payload)
        return self.writer.add_child(db, aggregate_id, group_name, row.model_dump())

    def update_child(self, db: Session, group_name: str, child_id: int, payload: Dict[str, Any]) -> dict:
        """
        Partial update of one child row. The stored row merged with the patch
        must still satisfy the row schema; only the patched keys are written.
        """
        model = self.child_model(group_name)
        if not payload:
            raise ValidationError("No fields to update")
        current = self.writer.get_child(db, group_name, child_id)
        merged = {k: current[k] for k in model.model_fields if k in current}
        merged.update(payload)
        row = parse_payload(model, merged)
        return self.writer.update_child(db, group_name, child_id, row.model_dump(include=set(payload)))

    def remove_child(self, db: Session, group_name: str, child_id: int) -> None:
        self.writer.soft_delete_child(db, group_name, child_id)


def facility_service(hasher) -> AggregateService:
    return AggregateService(FACILITY, FacilityCreate, FacilityUpdate, hasher)


def placement_executive_service(hasher) -> AggregateService:
    return AggregateService(PLACEMENT_EXECUTIVE, PlacementExecutiveCreate, PlacementExecutiveUpdate, hasher)


def trainer_service(hasher) -> AggregateService:
    return AggregateService(TRAINER, TrainerCreate, TrainerUpdate, hasher)


def facility_supervisor_service(hasher) -> AggregateService:
    return AggregateService(FACILITY_SUPERVISOR, FacilitySupervisorCreate, FacilitySupervisorUpdate, hasher)


def student_service(hasher) -> AggregateService:
    return AggregateService(STUDENT, StudentCreate, StudentUpdate, hasher)
