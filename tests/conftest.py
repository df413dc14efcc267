"""Pytest configuration: a fresh SQLite database file per test, bcrypt cost 4."""
import pytest
from fastapi.testclient import TestClient

from placement_crm.core.auth import PasswordHasher
from placement_crm.core.config import Settings
from placement_crm.db.database import Database
from placement_crm.main import create_app

from .helpers import ADMIN_LOGIN, ADMIN_PASSWORD, bearer


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'crm.db'}",
        bcrypt_rounds=4,
        jwt_secret_key="test_secret_key_for_pytest_only",
        admin_login_id=ADMIN_LOGIN,
        admin_password=ADMIN_PASSWORD,
        log_level="DEBUG",
    )


@pytest.fixture
def database(settings):
    database = Database.from_settings(settings)
    database.create_schema()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def hasher(settings):
    return PasswordHasher(settings.bcrypt_rounds)


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app):
    """Runs the app lifespan and sends every request as the bootstrap Admin."""
    with TestClient(app) as test_client:
        test_client.headers.update(bearer(test_client, ADMIN_LOGIN, ADMIN_PASSWORD))
        yield test_client


@pytest.fixture
def anonymous_client(app, client):
    """Same app, no Authorization header."""
    return TestClient(app)
