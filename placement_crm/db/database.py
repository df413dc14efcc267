"""
Database handle and unit-of-work helpers.

One Database object owns the engine and session factory for a URL. It is
built once by the app factory and handed to request handlers through
`get_db`; nothing in the package holds a module-level connection.
"""

from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from placement_crm.core.app_logger import get_logger
from placement_crm.core.config import Settings
from placement_crm.db.tables import metadata

logger = get_logger("db")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    def __init__(self, url: str, echo: bool = False, pool_size: int = 5, max_overflow: int = 10):
        self.url = make_url(url)
        is_sqlite = self.url.get_backend_name() == "sqlite"

        engine_kwargs = {"echo": echo, "future": True}
        if is_sqlite:
            # Request handlers run in a threadpool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            # pool_size=5: maintain 5 connections ready
            # max_overflow=10: allow 10 extra connections under load
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_pre_ping=True)

        self.engine = create_engine(url, **engine_kwargs)
        if is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.sqlalchemy_url,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )

    def session(self) -> Session:
        return self.SessionLocal()

    def create_schema(self, seed_roles: bool = True) -> None:
        """Create all tables and make sure the default roles exist."""
        from placement_crm.services.role_service import ensure_default_roles

        metadata.create_all(self.engine)
        if seed_roles:
            session = self.session()
            try:
                with unit_of_work(session, "seed roles"):
                    ensure_default_roles(session)
            finally:
                session.close()

    def ping(self) -> bool:
        """
        Test if the database is reachable.
        Returns True if connection successful, False otherwise.
        """
        try:
            with self.engine.connect() as conn:
                return conn.execute(text("SELECT 1")).scalar() == 1
        except SQLAlchemyError as e:
            logger.warning("Database ping failed: %s", e)
            return False

    def dispose(self) -> None:
        self.engine.dispose()


@contextmanager
def unit_of_work(session: Session, label: str = "unit of work") -> Iterator[Session]:
    """
    All-or-nothing transactional scope on an existing session.

    Usage:
        with unit_of_work(session, "create facility"):
            session.execute(...)

    Commits when the block finishes. On any exception (cancellation
    included) every write since the block began is rolled back, the
    connection goes back to the pool and the original exception is
    re-raised as-is. A failing rollback is logged, never raised.
    """
    try:
        yield session
        session.commit()
    except BaseException as exc:
        try:
            session.rollback()
            logger.warning("Rolled back %s after %s", label, type(exc).__name__)
        except SQLAlchemyError:
            logger.exception("Rollback failed for %s", label)
        raise


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.get("/facilities")
        def list_facilities(db: Session = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
