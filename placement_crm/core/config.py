"""
Configuration module - every setting comes from env vars / .env via pydantic-settings.

Nothing else in the package reads the environment; the app factory takes a
Settings object so tests can hand in their own.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Relational store: either the postgres_* parts or one full URL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "crm_user"
    postgres_password: str = "password"
    postgres_db: str = "crm_db"
    database_url: Optional[str] = Field(None, description="Full SQLAlchemy URL, e.g. sqlite:///./crm.db")

    # Connection pool (ignored for SQLite)
    db_pool_size: int = Field(5, ge=1)
    db_max_overflow: int = Field(10, ge=0)

    # Credentials: bcrypt cost factor, bounded so a login stays sub-second
    bcrypt_rounds: int = Field(12, ge=4, le=15)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = Field(1440, ge=1)

    # Bootstrap Admin login, created at startup when a password is set
    admin_login_id: str = "admin"
    admin_password: Optional[str] = None

    # List endpoints
    default_page_size: int = Field(20, ge=1)
    max_page_size: int = Field(100, ge=1)

    log_level: str = "INFO"
    debug: bool = False  # echoes SQL

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("log_level")
    @classmethod
    def known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v}")
        return v

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
