"""
Role Service - maps role names to the stable ids used by accounts.

A missing default role is a deployment defect, so lookups raise
NotFoundError instead of falling back to anything.
"""

from typing import Dict, List

from sqlalchemy import text
from sqlalchemy.orm import Session

from placement_crm.core.errors import NotFoundError
from placement_crm.db.tables import roles, utcnow

DEFAULT_ROLES = ["Admin", "Facility", "Supervisor", "Placement Executive", "Trainer", "Student"]


class RoleResolver:
    """Read-only role lookups. Safe to share between requests."""

    def get_role_id(self, db: Session, role_name: str) -> int:
        result = db.execute(
            text("SELECT role_id FROM roles WHERE role_name = :name AND is_deleted = :deleted"),
            {"name": role_name, "deleted": False}
        )
        row = result.fetchone()
        if not row:
            raise NotFoundError(f"Role '{role_name}' not found in database")
        return row[0]

    def get_role_name(self, db: Session, role_id: int) -> str:
        result = db.execute(
            text("SELECT role_name FROM roles WHERE role_id = :id AND is_deleted = :deleted"),
            {"id": role_id, "deleted": False}
        )
        row = result.fetchone()
        if not row:
            raise NotFoundError(f"Role with ID '{role_id}' not found in database")
        return row[0]

    def list_roles(self, db: Session) -> List[Dict]:
        result = db.execute(
            text("SELECT role_id, role_name FROM roles WHERE is_deleted = :deleted ORDER BY role_id"),
            {"deleted": False}
        )
        return [dict(row) for row in result.mappings()]


def ensure_default_roles(db: Session) -> int:
    """Insert any missing default role. Returns how many were added."""
    existing = {row[0] for row in db.execute(text("SELECT role_name FROM roles"))}
    missing = [name for name in DEFAULT_ROLES if name not in existing]
    now = utcnow()
    for name in missing:
        db.execute(roles.insert().values(role_name=name, is_deleted=False, created_at=now, updated_at=now))
    return len(missing)
