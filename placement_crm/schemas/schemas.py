"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Optional, List, Any, Dict, Iterable, Type, TypeVar, Union
from datetime import date, datetime
from enum import Enum

from placement_crm.core.errors import ValidationError


# ============================================================
# ENUMS
# ============================================================

class EmploymentType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"


class AttributeType(str, Enum):
    category = "Category"
    state = "State"


class DealWithType(str, Enum):
    head_office = "Head Office"
    branch = "Branch"
    both = "Both"


class StudentType(str, Enum):
    domestic = "domestic"
    international = "international"


class StudentStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    graduated = "graduated"
    withdrawn = "withdrawn"


class ContactType(str, Enum):
    mobile = "mobile"
    landline = "landline"
    whatsapp = "whatsapp"


class VisaStatus(str, Enum):
    active = "active"
    expired = "expired"
    revoked = "revoked"
    pending = "pending"


class AddressType(str, Enum):
    current = "current"
    permanent = "permanent"
    temporary = "temporary"
    mailing = "mailing"


class EligibilityOutcome(str, Enum):
    eligible = "eligible"
    not_eligible = "not_eligible"
    pending = "pending"
    override = "override"


class UrgencyLevel(str, Enum):
    immediate = "immediate"
    within_month = "within_month"
    within_quarter = "within_quarter"
    flexible = "flexible"


class ApplicationStatus(str, Enum):
    applied = "applied"
    under_review = "under_review"
    accepted = "accepted"
    rejected = "rejected"
    confirmed = "confirmed"
    completed = "completed"


class AddressChangeStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    implemented = "implemented"


class AccountStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class Payload(BaseModel):
    """Base for request bodies: enums (defaults included) stored as plain values, unknown keys rejected."""
    model_config = ConfigDict(use_enum_values=True, extra="forbid", validate_default=True)


# ============================================================
# AUTH SCHEMAS
# ============================================================

class LoginPayload(Payload):
    """Credentials for the account created together with an aggregate."""
    userID: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("userID")
    @classmethod
    def strip_login(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("userID cannot be blank")
        return v


class LoginRequest(Payload):
    userID: str
    password: str


class AccountStatusUpdate(Payload):
    status: AccountStatus


class PasswordChange(Payload):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: Dict[str, Any]


# ============================================================
# FACILITY SCHEMAS
# ============================================================

class FacilityAttributeIn(Payload):
    attribute_type: AttributeType
    attribute_value: str = Field(..., min_length=1, max_length=255)

class OrganizationStructureIn(Payload):
    deal_with: DealWithType
    head_office_addr: Optional[str] = None
    contact_name: Optional[str] = None
    designation: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    alternate_contact: Optional[str] = None
    notes: Optional[str] = None

class BranchSiteIn(Payload):
    site_code: Optional[str] = None
    full_address: Optional[str] = None
    suburb: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    site_type: Optional[str] = None
    palliative_care: bool = False
    dementia_care: bool = False
    num_beds: Optional[int] = Field(None, ge=0)
    gender_rules: Optional[str] = None
    contact_name: Optional[str] = None
    contact_role: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_comments: Optional[str] = None

class AgreementIn(Payload):
    sent_students: Optional[bool] = None
    with_mou: Optional[bool] = None
    no_mou_but_taken: Optional[bool] = None
    mou_exists_no_spot: Optional[bool] = None
    total_students: Optional[int] = Field(None, ge=0)
    last_placement: Optional[date] = None
    has_mou: Optional[bool] = None
    signed_on: Optional[date] = None
    expiry_date: Optional[date] = None
    company_name: Optional[str] = None
    payment_required: Optional[bool] = None
    amount_per_spot: Optional[float] = Field(None, ge=0)
    payment_notes: Optional[str] = None
    mou_document: Optional[str] = None
    insurance_doc: Optional[str] = None

class DocumentRequiredIn(Payload):
    document_name: Optional[str] = None
    notice_period_days: Optional[int] = Field(None, ge=0)
    orientation_req: Optional[bool] = None
    facilitator_req: Optional[bool] = None

class FacilityRuleIn(Payload):
    obligations: Optional[str] = None
    obligations_univ: Optional[str] = None
    obligations_student: Optional[str] = None
    process_notes: Optional[str] = None
    shift_rules: Optional[str] = None
    attendance_policy: Optional[str] = None
    dress_code: Optional[str] = None
    behaviour_rules: Optional[str] = None
    special_instr: Optional[str] = None

class FacilityCreate(Payload):
    organization_name: str = Field(..., min_length=1, max_length=255)
    registered_business_name: Optional[str] = Field(None, max_length=255)
    website_url: Optional[str] = Field(None, max_length=255)
    abn_registration_number: Optional[str] = Field(None, max_length=50)
    source_of_data: Optional[str] = Field(None, max_length=255)
    states_covered: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    attributes: List[FacilityAttributeIn] = []
    organization_structures: List[OrganizationStructureIn] = []
    branches: List[BranchSiteIn] = []
    agreements: List[AgreementIn] = []
    documents_required: List[DocumentRequiredIn] = []
    rules: List[FacilityRuleIn] = []
    login: Optional[LoginPayload] = None

class FacilityUpdate(Payload):
    organization_name: Optional[str] = Field(None, min_length=1, max_length=255)
    registered_business_name: Optional[str] = Field(None, max_length=255)
    website_url: Optional[str] = Field(None, max_length=255)
    abn_registration_number: Optional[str] = Field(None, max_length=50)
    source_of_data: Optional[str] = Field(None, max_length=255)
    states_covered: Optional[List[str]] = None
    categories: Optional[List[str]] = None


# ============================================================
# PLACEMENT EXECUTIVE SCHEMAS
# ============================================================

class PlacementExecutiveCreate(Payload):
    full_name: str = Field(..., min_length=2, max_length=150)
    mobile_number: str = Field(..., min_length=5, max_length=20)
    email: Optional[EmailStr] = None
    photograph: Optional[str] = None
    joining_date: date
    employment_type: EmploymentType
    facility_types_handled: List[str] = []
    login: LoginPayload

class PlacementExecutiveUpdate(Payload):
    full_name: Optional[str] = Field(None, min_length=2, max_length=150)
    mobile_number: Optional[str] = Field(None, min_length=5, max_length=20)
    email: Optional[EmailStr] = None
    photograph: Optional[str] = None
    joining_date: Optional[date] = None
    employment_type: Optional[EmploymentType] = None
    facility_types_handled: Optional[List[str]] = None


# ============================================================
# TRAINER SCHEMAS
# ============================================================

class TrainerCreate(Payload):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    gender: str = Field(..., min_length=1, max_length=20)
    date_of_birth: date
    mobile_number: str = Field(..., min_length=5, max_length=20)
    alternate_contact: Optional[str] = None
    email: EmailStr
    trainer_type: Optional[str] = None
    yoe: Optional[int] = Field(None, ge=0, le=60)
    states_covered: List[str] = []
    cities_covered: List[str] = []
    available_days: List[str] = []
    surprise_visit: bool = False
    login: LoginPayload

class TrainerUpdate(Payload):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    mobile_number: Optional[str] = Field(None, min_length=5, max_length=20)
    alternate_contact: Optional[str] = None
    email: Optional[EmailStr] = None
    trainer_type: Optional[str] = None
    yoe: Optional[int] = Field(None, ge=0, le=60)
    states_covered: Optional[List[str]] = None
    cities_covered: Optional[List[str]] = None
    available_days: Optional[List[str]] = None
    surprise_visit: Optional[bool] = None


# ============================================================
# FACILITY SUPERVISOR SCHEMAS
# ============================================================

class FacilitySupervisorCreate(Payload):
    facility_id: int = Field(..., ge=1)
    full_name: str = Field(..., min_length=2, max_length=150)
    designation: str = Field(..., min_length=1, max_length=100)
    mobile_number: str = Field(..., min_length=5, max_length=20)
    email: Optional[EmailStr] = None
    branch_site: Optional[str] = None
    max_students_can_handle: Optional[int] = Field(None, ge=0)
    portal_access_enabled: bool = False
    login: LoginPayload

class FacilitySupervisorUpdate(Payload):
    facility_id: Optional[int] = Field(None, ge=1)
    full_name: Optional[str] = Field(None, min_length=2, max_length=150)
    designation: Optional[str] = Field(None, min_length=1, max_length=100)
    mobile_number: Optional[str] = Field(None, min_length=5, max_length=20)
    email: Optional[EmailStr] = None
    branch_site: Optional[str] = None
    max_students_can_handle: Optional[int] = Field(None, ge=0)
    portal_access_enabled: Optional[bool] = None


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class ContactDetailsIn(Payload):
    primary_mobile: Optional[str] = None
    email: Optional[EmailStr] = None
    emergency_contact: Optional[str] = None
    contact_type: ContactType = ContactType.mobile
    is_primary: bool = True
    verified_at: Optional[datetime] = None

class VisaDetailsIn(Payload):
    visa_type: Optional[str] = None
    visa_number: Optional[str] = None
    start_date: Optional[date] = None
    expiry_date: Optional[date] = None
    status: VisaStatus = VisaStatus.active
    issuing_country: Optional[str] = None
    document_path: Optional[str] = None
    work_limitation: Optional[str] = None

class AddressIn(Payload):
    line1: Optional[str] = None
    line2: Optional[str] = None
    suburb: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    address_type: AddressType = AddressType.current
    is_primary: bool = False

class EligibilityStatusIn(Payload):
    classes_completed: bool = False
    fees_paid: bool = False
    assignments_submitted: bool = False
    documents_submitted: bool = False
    trainer_consent: bool = False
    override_requested: bool = False
    requested_by: Optional[str] = None
    reason: Optional[str] = None
    comments: Optional[str] = None
    overall_status: EligibilityOutcome = EligibilityOutcome.not_eligible

class JobStatusUpdateIn(Payload):
    status: str = Field(..., min_length=1, max_length=50)
    last_updated_on: Optional[date] = None
    employer_name: Optional[str] = None
    job_role: Optional[str] = None
    start_date: Optional[date] = None
    employment_type: Optional[str] = None
    offer_letter_path: Optional[str] = None
    actively_applying: bool = False
    expected_timeline: Optional[str] = None
    searching_comments: Optional[str] = None

class LifestyleIn(Payload):
    currently_working: bool = False
    working_hours: Optional[str] = None
    has_dependents: bool = False
    married: bool = False
    driving_license: bool = False
    own_vehicle: bool = False
    public_transport_only: bool = False
    can_travel_long_distance: bool = False
    drop_support_available: bool = False
    fully_flexible: bool = False
    rush_placement_required: bool = False
    preferred_days: Optional[str] = None
    preferred_time_slots: Optional[str] = None
    additional_notes: Optional[str] = None

class PlacementPreferenceIn(Payload):
    preferred_states: Optional[str] = None
    preferred_cities: Optional[str] = None
    max_travel_distance_km: Optional[int] = Field(None, ge=0)
    morning_only: bool = False
    evening_only: bool = False
    night_shift: bool = False
    weekend_only: bool = False
    part_time: bool = False
    full_time: bool = False
    with_friend: bool = False
    friend_name_or_id: Optional[str] = None
    with_spouse: bool = False
    spouse_name_or_id: Optional[str] = None
    earliest_start_date: Optional[date] = None
    latest_start_date: Optional[date] = None
    specific_month_preference: Optional[str] = None
    urgency_level: UrgencyLevel = UrgencyLevel.flexible
    additional_preferences: Optional[str] = None

    @model_validator(mode="after")
    def start_window_in_order(self):
        if self.earliest_start_date and self.latest_start_date and self.latest_start_date < self.earliest_start_date:
            raise ValueError("latest_start_date must not be before earliest_start_date")
        return self

class FacilityRecordIn(Payload):
    facility_name: Optional[str] = Field(None, max_length=255)
    facility_type: Optional[str] = None
    branch_site: Optional[str] = None
    facility_address: Optional[str] = None
    contact_person_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=20)
    supervisor_name: Optional[str] = None
    distance_from_student_km: Optional[float] = Field(None, ge=0)
    slot_id: Optional[str] = None
    course_type: Optional[str] = None
    shift_timing: Optional[str] = None
    start_date: Optional[date] = None
    duration_hours: Optional[int] = Field(None, ge=0)
    gender_requirement: Optional[str] = None
    applied_on: Optional[date] = None
    student_confirmed: bool = False
    student_comments: Optional[str] = None
    document_type: Optional[str] = None
    file_path: Optional[str] = None
    application_status: ApplicationStatus = ApplicationStatus.applied

class AddressChangeRequestIn(Payload):
    current_address: Optional[str] = None
    new_address: str = Field(..., min_length=1, max_length=255)
    effective_date: Optional[date] = None
    change_reason: Optional[str] = None
    impact_acknowledged: bool = False
    status: AddressChangeStatus = AddressChangeStatus.pending
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    review_comments: Optional[str] = None

class StudentCreate(Payload):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    dob: date
    gender: Optional[str] = None
    nationality: Optional[str] = None
    student_type: StudentType = StudentType.domestic
    status: StudentStatus = StudentStatus.active
    contact_details: List[ContactDetailsIn] = []
    visa_details: List[VisaDetailsIn] = []
    addresses: List[AddressIn] = []
    eligibility_status: List[EligibilityStatusIn] = []
    job_status_updates: List[JobStatusUpdateIn] = []
    lifestyle: List[LifestyleIn] = []
    placement_preferences: List[PlacementPreferenceIn] = []
    facility_records: List[FacilityRecordIn] = []
    address_change_requests: List[AddressChangeRequestIn] = []
    login: Optional[LoginPayload] = None

    @field_validator("dob")
    @classmethod
    def dob_in_past(cls, v: date) -> date:
        if v >= date.today():
            raise ValueError("dob must be in the past")
        return v

class StudentUpdate(Payload):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    dob: Optional[date] = None
    gender: Optional[str] = None
    nationality: Optional[str] = None
    student_type: Optional[StudentType] = None
    status: Optional[StudentStatus] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    per_page: int
    current_page: int
    last_page: int
    from_: int = Field(0, alias="from")
    to: int = 0

class ApiResponse(BaseModel):
    success: bool = True
    message: str
    data: Any = None
    pagination: Optional[Pagination] = None


# ============================================================
# HELPERS
# ============================================================

M = TypeVar("M", bound=BaseModel)


def describe_errors(errors: Iterable[dict]) -> str:
    """One readable line per pydantic error, e.g. `login.password: Field required`."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def parse_payload(model: Type[M], payload: Union[M, Dict[str, Any]]) -> M:
    """Validate a raw payload against `model`, raising the domain ValidationError."""
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(describe_errors(exc.errors())) from exc
