"""
Tests for the generic aggregate writer.

Exercises the writer directly with already-validated values: atomic
creation, login uniqueness, the read projection, both delete paths and
single child-record operations.
"""
import pytest

from placement_crm.core.errors import ConflictError, NotFoundError, StorageError, ValidationError
from placement_crm.db import tables
from placement_crm.services import aggregate_writer
from placement_crm.services.aggregate_writer import AggregateWriter, ListQuery, LoginCredentials
from placement_crm.services.aggregates import FACILITY, FACILITY_SUPERVISOR, PLACEMENT_EXECUTIVE
from placement_crm.services.role_service import RoleResolver

from .helpers import EXECUTIVE_ROOT, FACILITY_ROOT, count_rows

FACILITY_CHILDREN = {
    "attributes": [
        {"attribute_type": "Category", "attribute_value": "Aged Care"},
        {"attribute_type": "State", "attribute_value": "NSW"},
    ],
    "branches": [{"city": "Springfield", "num_beds": 40}],
    "rules": [{"dress_code": "Navy scrubs"}],
}


@pytest.fixture
def facility_writer(hasher):
    return AggregateWriter(FACILITY, hasher, RoleResolver())


@pytest.fixture
def executive_writer(hasher):
    return AggregateWriter(PLACEMENT_EXECUTIVE, hasher, RoleResolver())


@pytest.fixture
def supervisor_writer(hasher):
    return AggregateWriter(FACILITY_SUPERVISOR, hasher, RoleResolver())


def _login(user_id="acme@x.com"):
    return LoginCredentials(user_id=user_id, password="Secret123")


def _assert_empty(db):
    assert count_rows(db, tables.facility) == 0
    assert count_rows(db, tables.facility_attributes) == 0
    assert count_rows(db, tables.facility_branch_sites) == 0
    assert count_rows(db, tables.accounts) == 0


class TestCreate:

    def test_round_trip(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        loaded = facility_writer.load(db, created["facility_id"])

        for key, value in FACILITY_ROOT.items():
            assert loaded[key] == value
        assert len(loaded["attributes"]) == 2
        assert len(loaded["branches"]) == 1
        assert len(loaded["rules"]) == 1
        assert loaded["agreements"] == []
        assert loaded["branches"][0]["facility_id"] == created["facility_id"]

    def test_account_linked_with_role_and_no_password(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT), {}, _login())

        account = created["account"]
        assert account["login_id"] == "acme@x.com"
        assert account["role_name"] == "Facility"
        assert account["facility_id"] == created["facility_id"]
        assert account["status"] == "active"
        assert "password" not in account

    def test_stored_password_is_hashed(self, db, facility_writer, hasher):
        facility_writer.create(db, dict(FACILITY_ROOT), {}, _login())

        stored = db.execute(tables.accounts.select()).mappings().one()["password"]
        assert stored != "Secret123"
        assert hasher.verify("Secret123", stored)

    def test_login_is_optional_for_facility(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN)

        assert created["account"] is None
        assert count_rows(db, tables.accounts) == 0

    def test_login_required_for_executive(self, db, executive_writer):
        with pytest.raises(ValidationError, match="login"):
            executive_writer.create(db, dict(EXECUTIVE_ROOT))

        assert count_rows(db, tables.placement_executives) == 0

    @pytest.mark.parametrize("user_id, password", [("acme", ""), ("", "Secret123")])
    def test_login_needs_both_fields(self, db, facility_writer, user_id, password):
        with pytest.raises(ValidationError, match="both userID and password"):
            facility_writer.create(db, dict(FACILITY_ROOT), {}, LoginCredentials(user_id, password))

        _assert_empty(db)

    def test_unknown_child_group(self, db, facility_writer):
        with pytest.raises(ValidationError, match="Unknown record group"):
            facility_writer.create(db, dict(FACILITY_ROOT), {"pets": [{"name": "Rex"}]})

        _assert_empty(db)


class TestAtomicity:

    def test_failure_after_root_insert_leaves_nothing(self, db, facility_writer, monkeypatch):
        """Root and account are written, then a child insert fails."""
        error = RuntimeError("disk full")

        def failing_insert(*args, **kwargs):
            raise error

        monkeypatch.setattr(facility_writer, "_insert_child", failing_insert)

        with pytest.raises(RuntimeError) as exc_info:
            facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        assert exc_info.value is error
        _assert_empty(db)

    def test_storage_failure_in_child_becomes_storage_error(self, db, facility_writer):
        children = {"branches": [{"city": "Springfield"}], "rules": [{"no_such_column": "x"}]}

        with pytest.raises(StorageError, match="no changes were saved"):
            facility_writer.create(db, dict(FACILITY_ROOT), children, _login())

        _assert_empty(db)

    def test_missing_role_aborts_before_any_write(self, db, facility_writer):
        db.execute(tables.roles.update().where(tables.roles.c.role_name == "Facility").values(is_deleted=True))
        db.commit()

        with pytest.raises(NotFoundError, match="Role 'Facility'"):
            facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        _assert_empty(db)

    def test_error_message_never_contains_secret(self, db, facility_writer):
        facility_writer.create(db, dict(FACILITY_ROOT), {}, _login())

        with pytest.raises(ConflictError) as exc_info:
            facility_writer.create(db, dict(FACILITY_ROOT), {}, _login())

        assert "Secret123" not in exc_info.value.message


class TestLoginUniqueness:

    def test_duplicate_login_rejected_before_writes(self, db, facility_writer):
        facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        with pytest.raises(ConflictError, match="Login ID 'acme@x.com' already exists"):
            facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        assert count_rows(db, tables.facility) == 1
        assert count_rows(db, tables.facility_attributes) == 2
        assert count_rows(db, tables.accounts) == 1

    def test_race_on_login_resolved_by_storage_constraint(self, db, facility_writer, monkeypatch):
        """
        Simulate a racer that passed the pre-check before the first commit:
        the UNIQUE constraint on accounts.login_id must still reject it.
        """
        monkeypatch.setattr(aggregate_writer, "login_exists", lambda session, login_id: False)

        first = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        with pytest.raises(ConflictError, match="Login ID 'acme@x.com' already exists"):
            facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        assert count_rows(db, tables.facility) == 1
        assert count_rows(db, tables.accounts) == 1
        assert count_rows(db, tables.facility_branch_sites) == 1
        assert facility_writer.load(db, first["facility_id"])["account"]["login_id"] == "acme@x.com"

    def test_duplicate_business_key(self, db, executive_writer):
        executive_writer.create(db, dict(EXECUTIVE_ROOT), login=_login("exec01"))

        with pytest.raises(ConflictError, match="Email 'priya@example.com' already exists"):
            executive_writer.create(db, dict(EXECUTIVE_ROOT), login=_login("exec02"))

        assert count_rows(db, tables.placement_executives) == 1
        assert count_rows(db, tables.accounts) == 1


class TestReadAndList:

    def test_load_missing_raises_not_found(self, db, facility_writer):
        with pytest.raises(NotFoundError, match="Facility does not exist"):
            facility_writer.load(db, 404)

    def test_list_keyword_filter_and_pagination(self, db, facility_writer):
        for name, source in [("Acme Care", "referral"), ("Bayside Aged Care", "web"), ("Coastal Health", "web")]:
            facility_writer.create(db, {"organization_name": name, "source_of_data": source})

        rows, pagination = facility_writer.list(db, ListQuery(keyword="CARE"))
        assert {r["organization_name"] for r in rows} == {"Acme Care", "Bayside Aged Care"}
        assert pagination["total"] == 2

        rows, _ = facility_writer.list(db, ListQuery(filters={"source_of_data": "web"}))
        assert len(rows) == 2

        rows, pagination = facility_writer.list(
            db, ListQuery(sort_by="organization_name", sort_order="asc", page=2, limit=2)
        )
        assert [r["organization_name"] for r in rows] == ["Coastal Health"]
        assert pagination == {
            "total": 3, "per_page": 2, "current_page": 2, "last_page": 2, "from": 3, "to": 3,
        }

    def test_list_rejects_unknown_filter(self, db, facility_writer):
        with pytest.raises(ValidationError, match="Cannot filter Facility by 'password'"):
            facility_writer.list(db, ListQuery(filters={"password": "x"}))

    def test_list_ignores_unknown_sort_column(self, db, facility_writer):
        facility_writer.create(db, dict(FACILITY_ROOT))

        rows, _ = facility_writer.list(db, ListQuery(sort_by="is_deleted; DROP TABLE facility"))

        assert len(rows) == 1
        assert "is_deleted" not in rows[0]


class TestUpdate:

    def test_updates_root_fields_only(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN)

        updated = facility_writer.update(db, created["facility_id"], {"organization_name": "Acme Care West"})

        assert updated["organization_name"] == "Acme Care West"
        assert updated["source_of_data"] == "referral"
        assert len(updated["attributes"]) == 2
        assert updated["updated_at"] >= created["updated_at"]

    def test_empty_update_rejected(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT))

        with pytest.raises(ValidationError, match="No fields to update"):
            facility_writer.update(db, created["facility_id"], {})

    def test_explicit_null_clears_nullable_column(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT, website_url="https://acme.example.com"))

        updated = facility_writer.update(db, created["facility_id"], {"website_url": None})

        assert updated["website_url"] is None
        assert updated["organization_name"] == "Acme Care"

    def test_null_for_required_column_rejected(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT))

        with pytest.raises(ValidationError, match="organization_name cannot be null"):
            facility_writer.update(db, created["facility_id"], {"organization_name": None})

        assert facility_writer.load(db, created["facility_id"])["organization_name"] == "Acme Care"

    def test_unique_violation_from_storage_becomes_conflict(self, db, executive_writer, monkeypatch):
        executive_writer.create(db, dict(EXECUTIVE_ROOT), login=_login("exec01"))
        other = executive_writer.create(
            db, dict(EXECUTIVE_ROOT, email="jo@example.com"), login=_login("exec02")
        )
        # Simulate a concurrent writer taking the email after the pre-check
        monkeypatch.setattr(executive_writer, "_ensure_unique", lambda *args, **kwargs: None)

        with pytest.raises(ConflictError, match="Placement Executive with the same Email already exists"):
            executive_writer.update(db, other["executive_id"], {"email": "priya@example.com"})

        assert executive_writer.load(db, other["executive_id"])["email"] == "jo@example.com"

    def test_audit_columns_not_updatable(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT))

        with pytest.raises(ValidationError, match="Cannot update is_deleted"):
            facility_writer.update(db, created["facility_id"], {"is_deleted": True})

    def test_unique_key_conflict_on_update(self, db, executive_writer):
        executive_writer.create(db, dict(EXECUTIVE_ROOT), login=_login("exec01"))
        other = executive_writer.create(
            db, dict(EXECUTIVE_ROOT, email="jo@example.com"), login=_login("exec02")
        )

        with pytest.raises(ConflictError, match="Email 'priya@example.com' already exists"):
            executive_writer.update(db, other["executive_id"], {"email": "priya@example.com"})

    def test_update_missing_raises_not_found(self, db, facility_writer):
        with pytest.raises(NotFoundError):
            facility_writer.update(db, 404, {"organization_name": "Nobody"})


class TestDelete:

    def test_soft_delete_hides_but_keeps_rows(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())
        facility_id = created["facility_id"]

        facility_writer.soft_delete(db, facility_id)

        with pytest.raises(NotFoundError):
            facility_writer.load(db, facility_id)
        raw = facility_writer.fetch_raw(db, facility_id)
        assert raw is not None
        assert raw["is_deleted"] is True
        assert count_rows(db, tables.facility_attributes, facility_id=facility_id, is_deleted=True) == 2
        account = db.execute(tables.accounts.select()).mappings().one()
        assert account["status"] == "inactive"
        assert facility_writer.list(db, ListQuery())[0] == []

    def test_soft_delete_twice_raises_not_found(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT))
        facility_writer.soft_delete(db, created["facility_id"])

        with pytest.raises(NotFoundError):
            facility_writer.soft_delete(db, created["facility_id"])

    def test_permanent_delete_removes_everything(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())

        facility_writer.permanently_delete(db, created["facility_id"])

        assert facility_writer.fetch_raw(db, created["facility_id"]) is None
        _assert_empty(db)
        assert count_rows(db, tables.facility_rules) == 0

    def test_permanent_delete_after_soft_delete(self, db, facility_writer):
        created = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN, _login())
        facility_writer.soft_delete(db, created["facility_id"])

        facility_writer.permanently_delete(db, created["facility_id"])

        _assert_empty(db)

    def test_permanent_delete_missing_raises_not_found(self, db, facility_writer):
        with pytest.raises(NotFoundError):
            facility_writer.permanently_delete(db, 404)

    def test_facility_with_supervisors_cannot_be_removed(self, db, facility_writer, supervisor_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT))
        supervisor_writer.create(
            db,
            {
                "facility_id": facility["facility_id"],
                "full_name": "Dana Wright",
                "designation": "Nurse Unit Manager",
                "mobile_number": "0400555666",
            },
            login=_login("super01"),
        )

        with pytest.raises(ConflictError, match="facility supervisor"):
            facility_writer.permanently_delete(db, facility["facility_id"])

        assert facility_writer.fetch_raw(db, facility["facility_id"]) is not None


class TestReferences:

    def test_supervisor_needs_existing_facility(self, db, supervisor_writer):
        root = {"facility_id": 999, "full_name": "Dana Wright", "designation": "NUM", "mobile_number": "0400555666"}

        with pytest.raises(NotFoundError, match="Facility 999 does not exist"):
            supervisor_writer.create(db, root, login=_login("super01"))

        assert count_rows(db, tables.facility_supervisors) == 0
        assert count_rows(db, tables.accounts) == 0

    def test_soft_deleted_facility_is_not_a_valid_reference(self, db, facility_writer, supervisor_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT))
        facility_writer.soft_delete(db, facility["facility_id"])
        root = {
            "facility_id": facility["facility_id"],
            "full_name": "Dana Wright",
            "designation": "NUM",
            "mobile_number": "0400555666",
        }

        with pytest.raises(NotFoundError):
            supervisor_writer.create(db, root, login=_login("super01"))


class TestChildRecords:

    def test_add_child_tags_root_id(self, db, facility_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN)

        branch = facility_writer.add_child(db, facility["facility_id"], "branches", {"city": "Shelbyville"})

        assert branch["branch_id"]
        assert branch["facility_id"] == facility["facility_id"]
        cities = [b["city"] for b in facility_writer.list_children(db, facility["facility_id"], "branches")]
        assert cities == ["Springfield", "Shelbyville"]

    def test_add_child_to_missing_root(self, db, facility_writer):
        with pytest.raises(NotFoundError, match="Facility does not exist"):
            facility_writer.add_child(db, 404, "branches", {"city": "Nowhere"})

        assert count_rows(db, tables.facility_branch_sites) == 0

    def test_add_child_to_soft_deleted_root(self, db, facility_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT))
        facility_writer.soft_delete(db, facility["facility_id"])

        with pytest.raises(NotFoundError):
            facility_writer.add_child(db, facility["facility_id"], "rules", {"dress_code": "Scrubs"})

    def test_unknown_group(self, db, facility_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT))

        with pytest.raises(ValidationError, match="Unknown record group for Facility: visa_details"):
            facility_writer.add_child(db, facility["facility_id"], "visa_details", {})

    def test_update_child(self, db, facility_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN)
        branch_id = facility["branches"][0]["branch_id"]

        branch = facility_writer.update_child(db, "branches", branch_id, {"num_beds": 55, "city": None})

        assert branch["num_beds"] == 55
        assert branch["city"] is None
        assert branch["facility_id"] == facility["facility_id"]

    def test_update_child_cannot_move_it_to_another_root(self, db, facility_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN)
        branch_id = facility["branches"][0]["branch_id"]

        with pytest.raises(ValidationError, match="Cannot update facility_id"):
            facility_writer.update_child(db, "branches", branch_id, {"facility_id": 2})

    def test_update_child_rejects_null_for_required_column(self, db, facility_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN)
        attribute_id = facility["attributes"][0]["attribute_id"]

        with pytest.raises(ValidationError, match="attribute_value cannot be null"):
            facility_writer.update_child(db, "attributes", attribute_id, {"attribute_value": None})

    def test_soft_delete_child(self, db, facility_writer):
        facility = facility_writer.create(db, dict(FACILITY_ROOT), FACILITY_CHILDREN)
        attribute_id = facility["attributes"][0]["attribute_id"]

        facility_writer.soft_delete_child(db, "attributes", attribute_id)

        assert len(facility_writer.load(db, facility["facility_id"])["attributes"]) == 1
        assert count_rows(db, tables.facility_attributes, is_deleted=True) == 1
        with pytest.raises(NotFoundError, match="Facility attributes record"):
            facility_writer.get_child(db, "attributes", attribute_id)
        with pytest.raises(NotFoundError):
            facility_writer.soft_delete_child(db, "attributes", attribute_id)
