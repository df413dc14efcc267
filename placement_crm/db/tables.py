"""
Table definitions (SQLAlchemy Core).

Every table follows the same convention:
- integer surrogate key generated by the database
- is_deleted soft-delete flag (default reads filter it out)
- created_at / updated_at timestamps

Child tables carry a foreign key to exactly one root aggregate.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, Date, DateTime, Float, ForeignKey, Integer,
    MetaData, String, Table, Text,
)

metadata = MetaData()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _audit_columns():
    return [
        Column("is_deleted", Boolean, nullable=False, default=False),
        Column("created_at", DateTime, nullable=False, default=utcnow),
        Column("updated_at", DateTime, nullable=False, default=utcnow, onupdate=utcnow),
    ]


def _child_of(parent_fk: str):
    return Column(parent_fk.split(".")[1], Integer, ForeignKey(parent_fk), nullable=False, index=True)


# ============================================================
# ROLES & ACCOUNTS
# ============================================================

roles = Table(
    "roles", metadata,
    Column("role_id", Integer, primary_key=True, autoincrement=True),
    Column("role_name", String(50), nullable=False, unique=True),
    *_audit_columns(),
)

facility = Table(
    "facility", metadata,
    Column("facility_id", Integer, primary_key=True, autoincrement=True),
    Column("organization_name", String(255), nullable=False),
    Column("registered_business_name", String(255)),
    Column("website_url", String(255)),
    Column("abn_registration_number", String(50)),
    Column("source_of_data", String(255)),
    Column("states_covered", JSON),
    Column("categories", JSON),
    *_audit_columns(),
)

placement_executives = Table(
    "placement_executives", metadata,
    Column("executive_id", Integer, primary_key=True, autoincrement=True),
    Column("full_name", String(150), nullable=False),
    Column("mobile_number", String(20), nullable=False),
    Column("email", String(150), unique=True),
    Column("photograph", String(255)),
    Column("joining_date", Date, nullable=False),
    Column("employment_type", String(20), nullable=False),
    Column("facility_types_handled", JSON),
    *_audit_columns(),
)

trainers = Table(
    "trainers", metadata,
    Column("trainer_id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("gender", String(20), nullable=False),
    Column("date_of_birth", Date, nullable=False),
    Column("mobile_number", String(20), nullable=False),
    Column("alternate_contact", String(20)),
    Column("email", String(150), nullable=False, unique=True),
    Column("trainer_type", String(50)),
    Column("yoe", Integer),
    Column("states_covered", JSON),
    Column("cities_covered", JSON),
    Column("available_days", JSON),
    Column("surprise_visit", Boolean, nullable=False, default=False),
    *_audit_columns(),
)

facility_supervisors = Table(
    "facility_supervisors", metadata,
    Column("supervisor_id", Integer, primary_key=True, autoincrement=True),
    Column("facility_id", Integer, ForeignKey("facility.facility_id"), nullable=False, index=True),
    Column("full_name", String(150), nullable=False),
    Column("designation", String(100), nullable=False),
    Column("mobile_number", String(20), nullable=False),
    Column("email", String(150), unique=True),
    Column("branch_site", String(255)),
    Column("max_students_can_handle", Integer),
    Column("portal_access_enabled", Boolean, nullable=False, default=False),
    *_audit_columns(),
)

students = Table(
    "students", metadata,
    Column("student_id", Integer, primary_key=True, autoincrement=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("dob", Date, nullable=False),
    Column("gender", String(20)),
    Column("nationality", String(100)),
    Column("student_type", String(20), nullable=False, default="domestic"),
    Column("status", String(20), nullable=False, default="active"),
    *_audit_columns(),
)

accounts = Table(
    "accounts", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    # Storage-level guarantee: two racing creations cannot both win
    Column("login_id", String(100), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("role_id", Integer, ForeignKey("roles.role_id"), nullable=False, index=True),
    Column("status", String(20), nullable=False, default="active"),
    Column("facility_id", Integer, ForeignKey("facility.facility_id"), index=True),
    Column("executive_id", Integer, ForeignKey("placement_executives.executive_id"), index=True),
    Column("trainer_id", Integer, ForeignKey("trainers.trainer_id"), index=True),
    Column("supervisor_id", Integer, ForeignKey("facility_supervisors.supervisor_id"), index=True),
    Column("student_id", Integer, ForeignKey("students.student_id"), index=True),
    *_audit_columns(),
)


# ============================================================
# FACILITY CHILD TABLES
# ============================================================

facility_attributes = Table(
    "facility_attributes", metadata,
    Column("attribute_id", Integer, primary_key=True, autoincrement=True),
    _child_of("facility.facility_id"),
    Column("attribute_type", String(20), nullable=False),
    Column("attribute_value", String(255), nullable=False),
    *_audit_columns(),
)

facility_organization_structure = Table(
    "facility_organization_structure", metadata,
    Column("org_struct_id", Integer, primary_key=True, autoincrement=True),
    _child_of("facility.facility_id"),
    Column("deal_with", String(20), nullable=False),
    Column("head_office_addr", String(255)),
    Column("contact_name", String(150)),
    Column("designation", String(100)),
    Column("phone", String(20)),
    Column("email", String(150)),
    Column("alternate_contact", String(100)),
    Column("notes", Text),
    *_audit_columns(),
)

facility_branch_sites = Table(
    "facility_branch_sites", metadata,
    Column("branch_id", Integer, primary_key=True, autoincrement=True),
    _child_of("facility.facility_id"),
    Column("site_code", String(50)),
    Column("full_address", String(255)),
    Column("suburb", String(100)),
    Column("city", String(100)),
    Column("state", String(50)),
    Column("postcode", String(10)),
    Column("site_type", String(100)),
    Column("palliative_care", Boolean, nullable=False, default=False),
    Column("dementia_care", Boolean, nullable=False, default=False),
    Column("num_beds", Integer),
    Column("gender_rules", Text),
    Column("contact_name", String(150)),
    Column("contact_role", String(100)),
    Column("contact_phone", String(20)),
    Column("contact_email", String(150)),
    Column("contact_comments", Text),
    *_audit_columns(),
)

facility_agreements = Table(
    "facility_agreements", metadata,
    Column("agreement_id", Integer, primary_key=True, autoincrement=True),
    _child_of("facility.facility_id"),
    Column("sent_students", Boolean),
    Column("with_mou", Boolean),
    Column("no_mou_but_taken", Boolean),
    Column("mou_exists_no_spot", Boolean),
    Column("total_students", Integer),
    Column("last_placement", Date),
    Column("has_mou", Boolean),
    Column("signed_on", Date),
    Column("expiry_date", Date),
    Column("company_name", String(255)),
    Column("payment_required", Boolean),
    Column("amount_per_spot", Float),
    Column("payment_notes", Text),
    Column("mou_document", String(255)),
    Column("insurance_doc", String(255)),
    *_audit_columns(),
)

facility_documents_required = Table(
    "facility_documents_required", metadata,
    Column("doc_req_id", Integer, primary_key=True, autoincrement=True),
    _child_of("facility.facility_id"),
    Column("document_name", String(255)),
    Column("notice_period_days", Integer),
    Column("orientation_req", Boolean),
    Column("facilitator_req", Boolean),
    *_audit_columns(),
)

facility_rules = Table(
    "facility_rules", metadata,
    Column("rule_id", Integer, primary_key=True, autoincrement=True),
    _child_of("facility.facility_id"),
    Column("obligations", Text),
    Column("obligations_univ", Text),
    Column("obligations_student", Text),
    Column("process_notes", Text),
    Column("shift_rules", Text),
    Column("attendance_policy", Text),
    Column("dress_code", Text),
    Column("behaviour_rules", Text),
    Column("special_instr", Text),
    *_audit_columns(),
)


# ============================================================
# STUDENT CHILD TABLES
# ============================================================

student_contact_details = Table(
    "student_contact_details", metadata,
    Column("contact_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("primary_mobile", String(20)),
    Column("email", String(150)),
    Column("emergency_contact", String(100)),
    Column("contact_type", String(20), nullable=False, default="mobile"),
    Column("is_primary", Boolean, nullable=False, default=True),
    Column("verified_at", DateTime),
    *_audit_columns(),
)

student_visa_details = Table(
    "student_visa_details", metadata,
    Column("visa_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("visa_type", String(100)),
    Column("visa_number", String(100)),
    Column("start_date", Date),
    Column("expiry_date", Date),
    Column("status", String(20), nullable=False, default="active"),
    Column("issuing_country", String(100)),
    Column("document_path", String(255)),
    Column("work_limitation", String(255)),
    *_audit_columns(),
)

student_addresses = Table(
    "student_addresses", metadata,
    Column("address_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("line1", String(255)),
    Column("line2", String(255)),
    Column("suburb", String(100)),
    Column("city", String(100)),
    Column("state", String(50)),
    Column("country", String(100)),
    Column("postal_code", String(20)),
    Column("address_type", String(20), nullable=False, default="current"),
    Column("is_primary", Boolean, nullable=False, default=False),
    *_audit_columns(),
)

student_eligibility_status = Table(
    "student_eligibility_status", metadata,
    Column("eligibility_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("classes_completed", Boolean, nullable=False, default=False),
    Column("fees_paid", Boolean, nullable=False, default=False),
    Column("assignments_submitted", Boolean, nullable=False, default=False),
    Column("documents_submitted", Boolean, nullable=False, default=False),
    Column("trainer_consent", Boolean, nullable=False, default=False),
    Column("override_requested", Boolean, nullable=False, default=False),
    Column("requested_by", String(150)),
    Column("reason", Text),
    Column("comments", Text),
    Column("overall_status", String(20), nullable=False, default="not_eligible"),
    *_audit_columns(),
)

student_job_status_updates = Table(
    "student_job_status_updates", metadata,
    Column("job_status_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("status", String(50), nullable=False),
    Column("last_updated_on", Date),
    Column("employer_name", String(255)),
    Column("job_role", String(150)),
    Column("start_date", Date),
    Column("employment_type", String(50)),
    Column("offer_letter_path", String(255)),
    Column("actively_applying", Boolean, nullable=False, default=False),
    Column("expected_timeline", String(100)),
    Column("searching_comments", Text),
    *_audit_columns(),
)

student_lifestyle = Table(
    "student_lifestyle", metadata,
    Column("lifestyle_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("currently_working", Boolean, nullable=False, default=False),
    Column("working_hours", String(100)),
    Column("has_dependents", Boolean, nullable=False, default=False),
    Column("married", Boolean, nullable=False, default=False),
    Column("driving_license", Boolean, nullable=False, default=False),
    Column("own_vehicle", Boolean, nullable=False, default=False),
    Column("public_transport_only", Boolean, nullable=False, default=False),
    Column("can_travel_long_distance", Boolean, nullable=False, default=False),
    Column("drop_support_available", Boolean, nullable=False, default=False),
    Column("fully_flexible", Boolean, nullable=False, default=False),
    Column("rush_placement_required", Boolean, nullable=False, default=False),
    Column("preferred_days", String(255)),
    Column("preferred_time_slots", String(255)),
    Column("additional_notes", Text),
    *_audit_columns(),
)

student_placement_preferences = Table(
    "student_placement_preferences", metadata,
    Column("preference_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("preferred_states", String(255)),
    Column("preferred_cities", String(255)),
    Column("max_travel_distance_km", Integer),
    Column("morning_only", Boolean, nullable=False, default=False),
    Column("evening_only", Boolean, nullable=False, default=False),
    Column("night_shift", Boolean, nullable=False, default=False),
    Column("weekend_only", Boolean, nullable=False, default=False),
    Column("part_time", Boolean, nullable=False, default=False),
    Column("full_time", Boolean, nullable=False, default=False),
    Column("with_friend", Boolean, nullable=False, default=False),
    Column("friend_name_or_id", String(150)),
    Column("with_spouse", Boolean, nullable=False, default=False),
    Column("spouse_name_or_id", String(150)),
    Column("earliest_start_date", Date),
    Column("latest_start_date", Date),
    Column("specific_month_preference", String(50)),
    Column("urgency_level", String(20), nullable=False, default="flexible"),
    Column("additional_preferences", Text),
    *_audit_columns(),
)

student_facility_records = Table(
    "student_facility_records", metadata,
    Column("record_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("facility_name", String(255)),
    Column("facility_type", String(100)),
    Column("branch_site", String(255)),
    Column("facility_address", String(255)),
    Column("contact_person_name", String(150)),
    Column("contact_email", String(150)),
    Column("contact_phone", String(20)),
    Column("supervisor_name", String(150)),
    Column("distance_from_student_km", Float),
    Column("slot_id", String(50)),
    Column("course_type", String(100)),
    Column("shift_timing", String(100)),
    Column("start_date", Date),
    Column("duration_hours", Integer),
    Column("gender_requirement", String(50)),
    Column("applied_on", Date),
    Column("student_confirmed", Boolean, nullable=False, default=False),
    Column("student_comments", Text),
    Column("document_type", String(100)),
    Column("file_path", String(255)),
    Column("application_status", String(20), nullable=False, default="applied"),
    *_audit_columns(),
)

student_address_change_requests = Table(
    "student_address_change_requests", metadata,
    Column("acr_id", Integer, primary_key=True, autoincrement=True),
    _child_of("students.student_id"),
    Column("current_address", String(255)),
    Column("new_address", String(255)),
    Column("effective_date", Date),
    Column("change_reason", Text),
    Column("impact_acknowledged", Boolean, nullable=False, default=False),
    Column("status", String(20), nullable=False, default="pending"),
    Column("reviewed_at", DateTime),
    Column("reviewed_by", String(150)),
    Column("review_comments", Text),
    *_audit_columns(),
)
