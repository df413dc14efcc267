"""
Placement CRM - Main Application

FastAPI backend with:
- PostgreSQL (or SQLite for local runs) through SQLAlchemy
- One transaction per aggregate creation
- bcrypt password hashing and JWT authentication

Run: uvicorn placement_crm.main:app --reload
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from placement_crm import __version__
from placement_crm.api.routes import api_router
from placement_crm.core.app_logger import get_logger, setup_logging
from placement_crm.core.auth import PasswordHasher
from placement_crm.core.config import Settings, get_settings
from placement_crm.core.errors import CRMError
from placement_crm.db.database import Database
from placement_crm.schemas.schemas import describe_errors
from placement_crm.services.account_service import ensure_admin_account
from placement_crm.services.role_service import RoleResolver

logger = get_logger("app")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def bootstrap_admin(database: Database, hasher: PasswordHasher, settings: Settings) -> None:
    """Make sure the configured Admin login exists."""
    session = database.session()
    try:
        ensure_admin_account(session, hasher, RoleResolver(), settings.admin_login_id, settings.admin_password)
    finally:
        session.close()


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Tests pass their own settings and database; otherwise both come from the
    environment.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    database = database or Database.from_settings(settings)

    hasher = PasswordHasher(settings.bcrypt_rounds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_schema()
        logger.info("Database schema ready (%s)", database.url.get_backend_name())
        if settings.admin_password:
            bootstrap_admin(database, hasher, settings)
        else:
            logger.warning("ADMIN_PASSWORD not set; no admin account was bootstrapped")
        yield
        database.dispose()

    app = FastAPI(
        title="Placement CRM",
        description="""
        Student-placement CRM backend.

        ## Resources
        - **Facilities** with attributes, branches, agreements, required documents and rules
        - **Facility Supervisors**, **Placement Executives** and **Trainers**, each with a login
        - **Students** with contact, visa, address, eligibility, job status, lifestyle,
          placement preference, facility and address change records
        - **Users**: login accounts, roles and activation status
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.hasher = hasher

    # CORS middleware (allow all for development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CRMError)
    async def crm_error_handler(request: Request, exc: CRMError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(422, describe_errors(exc.errors()))

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return _error(500, "A storage error occurred; no changes were saved")

    # Include API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    def health_check():
        """Database connectivity check."""
        connected = database.ping()
        return {
            "status": "healthy" if connected else "degraded",
            "database": "connected" if connected else "disconnected",
        }

    return app


app = create_app()
