"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.

Variable names match the deployment environment:
DB_HOST, DB_PORT, DB_DATABASE, DB_USER, DB_PASSWORD, JWT_SECRET, JWT_EXPIRE, PORT
"""

import re
from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


_EXPIRE_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_EXPIRE_UNITS_IN_MINUTES = {"s": 1 / 60, "m": 1, "h": 60, "d": 1440, "": 1}


class Settings(BaseSettings):
    # PostgreSQL
    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "job_portal_db"
    db_user: str = "postgres"
    db_password: str = ""
    # Hosted Postgres (Render, Supabase) needs "require"
    db_sslmode: str = "prefer"
    db_connect_timeout: int = 5

    # JWT Auth
    jwt_secret: str = "change-this-secret"
    jwt_expire: str = "7d"
    jwt_algorithm: str = "HS256"

    # App
    port: int = 5000
    frontend_url: str = "http://localhost:3000"
    debug: bool = False
    log_level: str = "INFO"

    # Deployment
    sql_dir: str = "database"

    # Default admin account (scripts/create_admin.py)
    admin_email: str = "admin@jobportal.com"
    admin_password: str = "Admin@12345"

    @field_validator("jwt_expire")
    @classmethod
    def check_jwt_expire(cls, v: str) -> str:
        if not _EXPIRE_PATTERN.match(v):
            raise ValueError("JWT_EXPIRE must look like '7d', '12h', '30m', '90s' or a number of minutes")
        return v.strip()

    @property
    def postgres_url(self) -> str:
        """PostgreSQL connection URL; user and password are percent-escaped."""
        return URL.create(
            "postgresql",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        ).render_as_string(hide_password=False)

    @property
    def postgres_connect_args(self) -> dict:
        """psycopg2 connect() keyword arguments."""
        return {
            "sslmode": self.db_sslmode,
            "connect_timeout": self.db_connect_timeout,
        }

    @property
    def jwt_expire_minutes(self) -> int:
        """JWT_EXPIRE converted to whole minutes (at least 1)."""
        amount, unit = _EXPIRE_PATTERN.match(self.jwt_expire).groups()
        return max(1, int(int(amount) * _EXPIRE_UNITS_IN_MINUTES[unit]))

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
