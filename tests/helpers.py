"""Request payload builders and row counting shared by the tests."""
from datetime import date

from sqlalchemy import func, select


ADMIN_LOGIN = "admin"
ADMIN_PASSWORD = "AdminPass123"


def bearer(client, user_id, password="Secret123") -> dict:
    """Log in through the API and return the Authorization header."""
    response = client.post("/api/auth/login", json={"userID": user_id, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def count_rows(db, table, **where) -> int:
    query = select(func.count()).select_from(table)
    for column, value in where.items():
        query = query.where(table.c[column] == value)
    return db.execute(query).scalar_one()


def facility_payload(user_id="acme@x.com", **overrides):
    data = {
        "organization_name": "Acme Care",
        "registered_business_name": "Acme Care Pty Ltd",
        "source_of_data": "referral",
        "states_covered": ["NSW", "VIC"],
        "attributes": [{"attribute_type": "Category", "attribute_value": "Aged Care"}],
        "branches": [{"city": "Springfield"}],
        "login": {"userID": user_id, "password": "Secret123"},
    }
    data.update(overrides)
    return data


def executive_payload(user_id="exec01", **overrides):
    data = {
        "full_name": "Priya Shah",
        "mobile_number": "0400111222",
        "email": "priya@example.com",
        "joining_date": "2024-01-15",
        "employment_type": "full-time",
        "facility_types_handled": ["Aged Care"],
        "login": {"userID": user_id, "password": "Secret123"},
    }
    data.update(overrides)
    return data


def trainer_payload(user_id="trainer01", email="sam.lee@example.com", **overrides):
    data = {
        "first_name": "Sam",
        "last_name": "Lee",
        "gender": "male",
        "date_of_birth": "1985-06-01",
        "mobile_number": "0400333444",
        "email": email,
        "trainer_type": "clinical",
        "yoe": 8,
        "available_days": ["Mon", "Wed"],
        "login": {"userID": user_id, "password": "Secret123"},
    }
    data.update(overrides)
    return data


def supervisor_payload(facility_id, user_id="super01", **overrides):
    data = {
        "facility_id": facility_id,
        "full_name": "Dana Wright",
        "designation": "Nurse Unit Manager",
        "mobile_number": "0400555666",
        "email": "dana@acme.example.com",
        "login": {"userID": user_id, "password": "Secret123"},
    }
    data.update(overrides)
    return data


def student_payload(**overrides):
    data = {
        "first_name": "Mei",
        "last_name": "Chen",
        "dob": "2001-03-09",
        "nationality": "Singapore",
        "student_type": "international",
        "contact_details": [{"primary_mobile": "0400777888", "email": "mei@example.com"}],
        "visa_details": [{"visa_type": "Student 500", "expiry_date": "2027-02-01"}],
        "addresses": [
            {"line1": "1 Main St", "city": "Sydney", "is_primary": True},
            {"line1": "9 Side St", "city": "Perth", "address_type": "mailing"},
        ],
        "eligibility_status": [{"classes_completed": True}],
        "job_status_updates": [{"status": "searching", "actively_applying": True}],
    }
    data.update(overrides)
    return data


# Writer-level values (already validated, python types)
FACILITY_ROOT = {"organization_name": "Acme Care", "source_of_data": "referral", "states_covered": ["NSW"]}

EXECUTIVE_ROOT = {
    "full_name": "Priya Shah",
    "mobile_number": "0400111222",
    "email": "priya@example.com",
    "joining_date": date(2024, 1, 15),
    "employment_type": "full-time",
}
