"""
Aggregate Writer - generic create/read/update/delete for root aggregates.

An aggregate is a root row (Facility, Student, ...) plus its child record
groups and an optional linked login account. Each aggregate type is
described once by an AggregateDescriptor; the writer below does the rest:

    create  -> one unit of work: root, account, child groups
    load    -> root + live child groups + account public fields
    update  -> root scalar fields only (explicit nulls clear nullable columns)
    add_child / update_child / soft_delete_child -> one record of a child group
    list    -> keyword/filter/sort/paginate over live roots
    soft_delete / permanently_delete

Write ordering inside create:
    1. uniqueness pre-checks (login id, business keys) and references
    2. role id resolved
    3. root inserted, id captured
    4. account inserted with role id and owner column = root id
    5. child rows inserted, each tagged with the root id
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import Table, asc, delete, desc, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from placement_crm.core.app_logger import get_logger
from placement_crm.core.errors import ConflictError, NotFoundError, StorageError, ValidationError
from placement_crm.db.database import unit_of_work
from placement_crm.db.tables import accounts, utcnow
from placement_crm.services.account_service import login_exists, public_account_query
from placement_crm.services.role_service import RoleResolver
from placement_crm.utils.pagination import get_offset, get_pagination

logger = get_logger("aggregate")

AUDIT_COLUMNS = ("is_deleted", "created_at", "updated_at")


# ============================================================
# DESCRIPTORS
# ============================================================

@dataclass(frozen=True)
class ChildGroup:
    """A named list of child rows, e.g. a facility's `branches`."""
    name: str
    table: Table
    foreign_key: str

    @property
    def pk(self):
        return list(self.table.primary_key.columns)[0]

    @property
    def updatable_columns(self) -> set:
        fixed = (self.pk.name, self.foreign_key, *AUDIT_COLUMNS)
        return {c for c in self.table.c.keys() if c not in fixed}


@dataclass(frozen=True)
class AccountLink:
    """How a root links to its login: granted role and owner column on accounts."""
    role_name: str
    column: str
    required: bool = False


@dataclass(frozen=True)
class Reference:
    """A root column that must point at a live row of another table."""
    column: str
    table: Table
    id_column: str
    label: str


@dataclass(frozen=True)
class Dependent:
    """Rows elsewhere that block a permanent delete of the root."""
    table: Table
    foreign_key: str
    label: str


@dataclass(frozen=True)
class AggregateDescriptor:
    name: str
    table: Table
    id_column: str
    child_groups: Tuple[ChildGroup, ...] = ()
    account: Optional[AccountLink] = None
    unique_fields: Tuple[Tuple[str, str], ...] = ()  # (column, label)
    references: Tuple[Reference, ...] = ()
    dependents: Tuple[Dependent, ...] = ()
    search_columns: Tuple[str, ...] = ()
    filter_columns: Tuple[str, ...] = ()
    sort_columns: Tuple[str, ...] = ()
    default_sort: str = "created_at"

    @property
    def pk(self):
        return self.table.c[self.id_column]

    @property
    def updatable_columns(self) -> set:
        return {c for c in self.table.c.keys() if c != self.id_column and c not in AUDIT_COLUMNS}


@dataclass
class LoginCredentials:
    user_id: str
    password: str


@dataclass
class ListQuery:
    keyword: Optional[str] = None
    filters: Dict[str, Any] = field(default_factory=dict)
    sort_by: Optional[str] = None
    sort_order: str = "DESC"
    page: int = 1
    limit: int = 20


def is_unique_violation(exc: IntegrityError) -> bool:
    """True for UNIQUE violations on SQLite, PostgreSQL and MySQL."""
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


def _public(row: Mapping) -> dict:
    data = dict(row)
    data.pop("is_deleted", None)
    return data


def _check_fields(name: str, table: Table, fields: Dict[str, Any], allowed: set) -> None:
    if not fields:
        raise ValidationError("No fields to update")

    not_allowed = set(fields) - allowed
    if not_allowed:
        raise ValidationError(f"Cannot update {', '.join(sorted(not_allowed))} on {name}")

    cleared = sorted(k for k, v in fields.items() if v is None and not table.c[k].nullable)
    if cleared:
        raise ValidationError(f"{', '.join(cleared)} cannot be null")


@contextmanager
def storage_errors(action: str):
    """Report unexpected database failures as StorageError once the unit of work has rolled back."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage failure during %s: %s", action, exc)
        raise StorageError(f"Could not {action}; no changes were saved") from exc


# ============================================================
# WRITER
# ============================================================

class AggregateWriter:
    """
    Generic writer/reader for one aggregate type.

    Collaborators are injected: the password hasher (anything with
    `hash(str) -> str`) and the role resolver. The session is passed per
    call and owned by the caller's request scope.
    """

    def __init__(self, descriptor: AggregateDescriptor, hasher, roles: RoleResolver):
        self.descriptor = descriptor
        self.hasher = hasher
        self.roles = roles

    # ---------------------------------------------------------- create

    def create(
        self,
        db: Session,
        root: Dict[str, Any],
        children: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        login: Optional[LoginCredentials] = None,
    ) -> dict:
        d = self.descriptor
        children = children or {}

        unknown = set(children) - {g.name for g in d.child_groups}
        if unknown:
            raise ValidationError(f"Unknown record group(s) for {d.name}: {', '.join(sorted(unknown))}")

        if login is not None:
            if d.account is None:
                raise ValidationError(f"{d.name} records cannot have a login account")
            if not login.user_id or not login.password:
                raise ValidationError("login requires both userID and password")
        elif d.account is not None and d.account.required:
            raise ValidationError("login object with userID and password is required")

        # Hash before the transaction opens
        hashed_password = self.hasher.hash(login.password) if login else None

        label = f"create {d.name}"
        with storage_errors(label), unit_of_work(db, label):
            if login:
                if login_exists(db, login.user_id):
                    raise ConflictError.duplicate("Login ID", login.user_id)
            self._ensure_unique(db, root)
            self._ensure_references(db, root)

            role_id = self.roles.get_role_id(db, d.account.role_name) if login else None

            root_id = self._insert_root(db, root)

            if login:
                self._insert_account(db, login.user_id, hashed_password, role_id, root_id)

            for group in d.child_groups:
                for row in children.get(group.name) or []:
                    self._insert_child(db, group, row, root_id)

        logger.info(
            "Created %s %s (%s)", d.name, root_id,
            ", ".join(f"{g.name}={len(children.get(g.name) or [])}" for g in d.child_groups) or "no child records",
        )
        return self.load(db, root_id)

    def _insert_root(self, db: Session, root: Dict[str, Any]) -> int:
        d = self.descriptor
        values = {k: v for k, v in root.items() if v is not None}
        try:
            result = db.execute(d.table.insert().values(**values))
        except IntegrityError as exc:
            if is_unique_violation(exc) and d.unique_fields:
                raise self._unique_conflict(root) from exc
            raise
        return result.inserted_primary_key[0]

    def _unique_conflict(self, values: Dict[str, Any]) -> ConflictError:
        d = self.descriptor
        labels = ", ".join(label for column, label in d.unique_fields if values.get(column) is not None)
        return ConflictError(f"{d.name} with the same {labels or 'unique fields'} already exists")

    def _insert_account(self, db: Session, login_id: str, hashed_password: str, role_id: int, root_id: int) -> None:
        values = {
            "login_id": login_id,
            "password": hashed_password,
            "role_id": role_id,
            "status": "active",
            self.descriptor.account.column: root_id,
        }
        try:
            db.execute(accounts.insert().values(**values))
        except IntegrityError as exc:
            # Lost a race with a concurrent creation using the same login id
            if is_unique_violation(exc):
                raise ConflictError.duplicate("Login ID", login_id) from exc
            raise

    def _insert_child(self, db: Session, group: ChildGroup, row: Dict[str, Any], root_id: int) -> int:
        values = {k: v for k, v in row.items() if v is not None}
        values[group.foreign_key] = root_id
        return db.execute(group.table.insert().values(**values)).inserted_primary_key[0]

    def _ensure_unique(self, db: Session, values: Dict[str, Any], exclude_id: int = None) -> None:
        d = self.descriptor
        for column, label in d.unique_fields:
            value = values.get(column)
            if value is None:
                continue
            query = select(d.pk).where(d.table.c[column] == value)
            if exclude_id is not None:
                query = query.where(d.pk != exclude_id)
            if db.execute(query).first():
                raise ConflictError.duplicate(label, value)

    def _ensure_references(self, db: Session, values: Dict[str, Any]) -> None:
        for ref in self.descriptor.references:
            value = values.get(ref.column)
            if value is None:
                continue
            found = db.execute(
                select(ref.table.c[ref.id_column]).where(
                    ref.table.c[ref.id_column] == value,
                    ref.table.c.is_deleted.is_(False),
                )
            ).first()
            if not found:
                raise NotFoundError(f"{ref.label} {value} does not exist")

    # ---------------------------------------------------------- read

    def load(self, db: Session, aggregate_id: int) -> dict:
        """Full projection: root, live child groups and the account's public fields."""
        d = self.descriptor
        row = db.execute(
            select(d.table).where(d.pk == aggregate_id, d.table.c.is_deleted.is_(False))
        ).mappings().first()
        if not row:
            raise NotFoundError(f"{d.name} does not exist")

        data = _public(row)
        for group in d.child_groups:
            data[group.name] = self._live_children(db, group, aggregate_id)

        if d.account is not None:
            account = db.execute(
                public_account_query().where(
                    accounts.c[d.account.column] == aggregate_id,
                    accounts.c.is_deleted.is_(False),
                )
            ).mappings().first()
            data["account"] = dict(account) if account else None
        return data

    def fetch_raw(self, db: Session, aggregate_id: int) -> Optional[dict]:
        """Storage-level lookup that ignores the soft-delete flag."""
        d = self.descriptor
        row = db.execute(select(d.table).where(d.pk == aggregate_id)).mappings().first()
        return dict(row) if row else None

    def list(self, db: Session, query: ListQuery) -> Tuple[List[dict], Dict[str, int]]:
        d = self.descriptor
        t = d.table
        conditions = [t.c.is_deleted.is_(False)]

        if query.keyword and d.search_columns:
            pattern = f"%{query.keyword.lower()}%"
            conditions.append(or_(*[func.lower(t.c[c]).like(pattern) for c in d.search_columns]))

        for column, value in query.filters.items():
            if value is None:
                continue
            if column not in d.filter_columns:
                raise ValidationError(f"Cannot filter {d.name} by '{column}'")
            conditions.append(t.c[column] == value)

        total = db.execute(select(func.count()).select_from(t).where(*conditions)).scalar_one()

        sort_column = query.sort_by if query.sort_by in d.sort_columns else d.default_sort
        direction = asc if (query.sort_order or "").upper() == "ASC" else desc
        rows = db.execute(
            select(t)
            .where(*conditions)
            .order_by(direction(t.c[sort_column]), direction(d.pk))
            .limit(query.limit)
            .offset(get_offset(query.limit, query.page))
        ).mappings().all()

        return [_public(r) for r in rows], get_pagination(total, query.limit, query.page)

    # ---------------------------------------------------------- update / delete

    def update(self, db: Session, aggregate_id: int, fields: Dict[str, Any]) -> dict:
        """
        Touches the root's own scalar fields and updated_at, nothing else.

        Only the keys present are written. An explicit None clears a nullable
        column; None for a NOT NULL column is rejected.
        """
        d = self.descriptor
        _check_fields(d.name, d.table, fields, d.updatable_columns)

        label = f"update {d.name} {aggregate_id}"
        with storage_errors(label), unit_of_work(db, label):
            self._require_live(db, aggregate_id)
            self._ensure_unique(db, fields, exclude_id=aggregate_id)
            self._ensure_references(db, fields)
            try:
                db.execute(update(d.table).where(d.pk == aggregate_id).values(**fields, updated_at=utcnow()))
            except IntegrityError as exc:
                # A concurrent write took one of the unique values after the pre-check
                if is_unique_violation(exc) and d.unique_fields:
                    raise self._unique_conflict(fields) from exc
                raise

        return self.load(db, aggregate_id)

    def soft_delete(self, db: Session, aggregate_id: int) -> None:
        """Flag the root and its children deleted and deactivate the linked login."""
        d = self.descriptor
        label = f"delete {d.name} {aggregate_id}"
        with storage_errors(label), unit_of_work(db, label):
            self._require_live(db, aggregate_id)
            now = utcnow()
            db.execute(update(d.table).where(d.pk == aggregate_id).values(is_deleted=True, updated_at=now))
            for group in d.child_groups:
                db.execute(
                    update(group.table)
                    .where(group.table.c[group.foreign_key] == aggregate_id, group.table.c.is_deleted.is_(False))
                    .values(is_deleted=True, updated_at=now)
                )
            if d.account is not None:
                db.execute(
                    update(accounts)
                    .where(accounts.c[d.account.column] == aggregate_id)
                    .values(status="inactive", updated_at=now)
                )
        logger.info("Soft-deleted %s %s", d.name, aggregate_id)

    def permanently_delete(self, db: Session, aggregate_id: int) -> None:
        """Physically remove children, linked account and root. Works on soft-deleted rows too."""
        d = self.descriptor
        label = f"permanently delete {d.name} {aggregate_id}"
        with storage_errors(label), unit_of_work(db, label):
            if self.fetch_raw(db, aggregate_id) is None:
                raise NotFoundError(f"{d.name} does not exist")

            for dep in d.dependents:
                count = db.execute(
                    select(func.count()).select_from(dep.table).where(dep.table.c[dep.foreign_key] == aggregate_id)
                ).scalar_one()
                if count:
                    raise ConflictError(f"{d.name} {aggregate_id} still has {count} {dep.label}")

            for group in d.child_groups:
                db.execute(delete(group.table).where(group.table.c[group.foreign_key] == aggregate_id))
            if d.account is not None:
                db.execute(delete(accounts).where(accounts.c[d.account.column] == aggregate_id))
            db.execute(delete(d.table).where(d.pk == aggregate_id))
        logger.info("Permanently deleted %s %s", d.name, aggregate_id)

    # ---------------------------------------------------------- child records

    def child_group(self, name: str) -> ChildGroup:
        for group in self.descriptor.child_groups:
            if group.name == name:
                return group
        raise ValidationError(f"Unknown record group for {self.descriptor.name}: {name}")

    def list_children(self, db: Session, aggregate_id: int, group_name: str) -> List[dict]:
        group = self.child_group(group_name)
        self._require_live(db, aggregate_id)
        return self._live_children(db, group, aggregate_id)

    def get_child(self, db: Session, group_name: str, child_id: int) -> dict:
        group = self.child_group(group_name)
        row = db.execute(
            select(group.table).where(group.pk == child_id, group.table.c.is_deleted.is_(False))
        ).mappings().first()
        if not row:
            raise NotFoundError(f"{self.descriptor.name} {group.name} record {child_id} does not exist")
        return _public(row)

    def add_child(self, db: Session, aggregate_id: int, group_name: str, row: Dict[str, Any]) -> dict:
        """Insert one child row tagged with a live root's id."""
        group = self.child_group(group_name)
        label = f"add {group.name} to {self.descriptor.name} {aggregate_id}"
        with storage_errors(label), unit_of_work(db, label):
            self._require_live(db, aggregate_id)
            child_id = self._insert_child(db, group, row, aggregate_id)
        logger.info("Added %s %s to %s %s", group.name, child_id, self.descriptor.name, aggregate_id)
        return self.get_child(db, group_name, child_id)

    def update_child(self, db: Session, group_name: str, child_id: int, fields: Dict[str, Any]) -> dict:
        group = self.child_group(group_name)
        _check_fields(f"{self.descriptor.name} {group.name}", group.table, fields, group.updatable_columns)

        label = f"update {group.name} {child_id}"
        with storage_errors(label), unit_of_work(db, label):
            self.get_child(db, group_name, child_id)
            db.execute(update(group.table).where(group.pk == child_id).values(**fields, updated_at=utcnow()))
        return self.get_child(db, group_name, child_id)

    def soft_delete_child(self, db: Session, group_name: str, child_id: int) -> None:
        group = self.child_group(group_name)
        label = f"delete {group.name} {child_id}"
        with storage_errors(label), unit_of_work(db, label):
            self.get_child(db, group_name, child_id)
            db.execute(
                update(group.table).where(group.pk == child_id).values(is_deleted=True, updated_at=utcnow())
            )
        logger.info("Soft-deleted %s %s", group.name, child_id)

    def _live_children(self, db: Session, group: ChildGroup, aggregate_id: int) -> List[dict]:
        rows = db.execute(
            select(group.table)
            .where(group.table.c[group.foreign_key] == aggregate_id, group.table.c.is_deleted.is_(False))
            .order_by(group.pk)
        ).mappings().all()
        return [_public(r) for r in rows]

    def _require_live(self, db: Session, aggregate_id: int) -> None:
        d = self.descriptor
        found = db.execute(
            select(d.pk).where(d.pk == aggregate_id, d.table.c.is_deleted.is_(False))
        ).first()
        if not found:
            raise NotFoundError(f"{d.name} does not exist")
