"""
Account Service - login accounts linked to aggregates.

The hashed password column never leaves this module: every query that
returns account data goes through `public_account_query`.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select, text, update
from sqlalchemy.orm import Session

from placement_crm.core.app_logger import get_logger
from placement_crm.core.errors import AuthError, NotFoundError, ValidationError
from placement_crm.db.database import unit_of_work
from placement_crm.db.tables import accounts, roles, utcnow
from placement_crm.utils.pagination import get_offset, get_pagination

ACCOUNT_STATUSES = ("active", "inactive")

OWNER_COLUMNS = ("facility_id", "executive_id", "trainer_id", "supervisor_id", "student_id")

logger = get_logger("accounts")


def public_account_query():
    """SELECT of the public account fields joined with the role name."""
    return (
        select(
            accounts.c.id,
            accounts.c.login_id,
            accounts.c.role_id,
            roles.c.role_name,
            accounts.c.status,
            *[accounts.c[c] for c in OWNER_COLUMNS],
            accounts.c.created_at,
            accounts.c.updated_at,
        )
        .select_from(accounts.join(roles, accounts.c.role_id == roles.c.role_id))
    )


def login_exists(db: Session, login_id: str) -> bool:
    result = db.execute(
        text("SELECT id FROM accounts WHERE login_id = :login_id"),
        {"login_id": login_id}
    )
    return result.fetchone() is not None


def get_account(db: Session, account_id: int) -> dict:
    row = db.execute(
        public_account_query().where(accounts.c.id == account_id, accounts.c.is_deleted.is_(False))
    ).mappings().first()
    if not row:
        raise NotFoundError("Account does not exist")
    return dict(row)


def list_accounts(
    db: Session,
    role_name: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Dict], Dict[str, int]]:
    conditions = [accounts.c.is_deleted.is_(False)]
    if role_name:
        conditions.append(roles.c.role_name == role_name)
    if status:
        conditions.append(accounts.c.status == status)

    count_query = (
        select(func.count())
        .select_from(accounts.join(roles, accounts.c.role_id == roles.c.role_id))
        .where(*conditions)
    )
    total = db.execute(count_query).scalar_one()

    rows = db.execute(
        public_account_query()
        .where(*conditions)
        .order_by(accounts.c.id.desc())
        .limit(limit)
        .offset(get_offset(limit, page))
    ).mappings().all()
    return [dict(r) for r in rows], get_pagination(total, limit, page)


def set_status(db: Session, account_id: int, status: str) -> dict:
    if status not in ACCOUNT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ACCOUNT_STATUSES)}")

    with unit_of_work(db, f"set account {account_id} status"):
        result = db.execute(
            update(accounts)
            .where(accounts.c.id == account_id, accounts.c.is_deleted.is_(False))
            .values(status=status, updated_at=utcnow())
        )
        if result.rowcount == 0:
            raise NotFoundError("Account does not exist")
    return get_account(db, account_id)


def authenticate(db: Session, hasher, login_id: str, password: str) -> dict:
    """
    Check a login. Unknown login and wrong password give the same error so
    callers cannot probe which login ids exist.
    """
    result = db.execute(
        text("SELECT id, password, status FROM accounts WHERE login_id = :login_id AND is_deleted = :deleted"),
        {"login_id": login_id, "deleted": False}
    )
    row = result.fetchone()

    if not row or not hasher.verify(password, row[1]):
        raise AuthError("Invalid login ID or password")

    if row[2] != "active":
        raise AuthError("Account deactivated", status_code=403)

    return get_account(db, row[0])


def change_password(db: Session, hasher, account_id: int, current_password: str, new_password: str) -> dict:
    """Replace an account's password after checking the current one."""
    row = db.execute(
        text("SELECT password FROM accounts WHERE id = :id AND is_deleted = :deleted"),
        {"id": account_id, "deleted": False}
    ).fetchone()
    if not row:
        raise NotFoundError("Account does not exist")
    if not hasher.verify(current_password, row[0]):
        raise ValidationError("Current password is incorrect")
    if current_password == new_password:
        raise ValidationError("New password must differ from the current password")

    hashed_password = hasher.hash(new_password)
    with unit_of_work(db, f"change password of account {account_id}"):
        db.execute(
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(password=hashed_password, updated_at=utcnow())
        )
    logger.info("Password changed for account %s", account_id)
    return get_account(db, account_id)


def ensure_admin_account(db: Session, hasher, resolver, login_id: str, password: str) -> bool:
    """
    Create the bootstrap Admin login if it is missing. Returns True when a
    new account was written. An Admin account owns no aggregate.
    """
    if login_exists(db, login_id):
        return False

    hashed_password = hasher.hash(password)
    with unit_of_work(db, "create admin account"):
        role_id = resolver.get_role_id(db, "Admin")
        db.execute(
            accounts.insert().values(login_id=login_id, password=hashed_password, role_id=role_id, status="active")
        )
    logger.info("Created admin account '%s'", login_id)
    return True
