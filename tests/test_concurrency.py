"""
Concurrent creation through the HTTP surface: two threads, one SQLite file.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

from placement_crm.db import tables

from .helpers import count_rows, facility_payload, trainer_payload


def _post_together(client, path, payloads):
    """Fire one POST per payload from its own thread, released at the same moment."""
    barrier = threading.Barrier(len(payloads))

    def post(payload):
        barrier.wait(timeout=10)
        return client.post(path, json=payload)

    with ThreadPoolExecutor(max_workers=len(payloads)) as pool:
        return list(pool.map(post, payloads))


class TestConcurrentCreation:

    def test_same_login_created_once(self, client, db):
        payloads = [
            facility_payload(organization_name="Acme Care North"),
            facility_payload(organization_name="Acme Care South"),
        ]

        responses = _post_together(client, "/api/facilities", payloads)

        assert sorted(r.status_code for r in responses) == [201, 409]
        conflict = next(r for r in responses if r.status_code == 409)
        assert conflict.json() == {"success": False, "message": "Login ID 'acme@x.com' already exists"}
        assert count_rows(db, tables.facility) == 1
        assert count_rows(db, tables.accounts, login_id="acme@x.com") == 1
        assert count_rows(db, tables.facility_branch_sites) == 1

        winner = next(r for r in responses if r.status_code == 201).json()["data"]
        assert winner["account"]["facility_id"] == winner["facility_id"]

    def test_distinct_logins_both_created(self, client, db):
        payloads = [
            trainer_payload(user_id="trainer01", email="sam.lee@example.com"),
            trainer_payload(user_id="trainer02", email="kim.ng@example.com"),
        ]

        responses = _post_together(client, "/api/trainers", payloads)

        assert [r.status_code for r in responses] == [201, 201]
        assert count_rows(db, tables.trainers) == 2
        assert count_rows(db, tables.accounts, role_id=responses[0].json()["data"]["account"]["role_id"]) == 2
