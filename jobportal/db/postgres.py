import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from jobportal.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Create engine with connection pool
# pool_size=5: maintain 5 connections ready
# max_overflow=15: the API may hold up to 20 connections under load
# pool_pre_ping: hosted Postgres drops idle connections
engine = create_engine(
    settings.postgres_url,
    pool_size=5,
    max_overflow=15,
    pool_pre_ping=True,
    connect_args=settings.postgres_connect_args,
    echo=settings.debug  # Log SQL queries in debug mode
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM users"))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def test_postgres_connection() -> bool:
    """
    Test if PostgreSQL is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("PostgreSQL connection failed: %s", e)
        return False


def execute_raw_sql(sql: str, params: dict = None) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    This is useful for complex queries and views.
    """
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        # Convert rows to dicts
        columns = result.keys()
        return [dict(zip(columns, row)) for row in result.fetchall()]


def create_script_engine(url: str = None) -> Engine:
    """
    Engine for the deployment/verification scripts.

    Scripts hold exactly one connection for their whole run, so there is no
    pool, and every statement commits on its own (AUTOCOMMIT). Without
    autocommit one failed statement would abort the surrounding Postgres
    transaction and every later statement would fail with it.
    """
    if url is None:
        return create_engine(
            settings.postgres_url,
            poolclass=NullPool,
            isolation_level="AUTOCOMMIT",
            connect_args=settings.postgres_connect_args,
        )
    return create_engine(url, poolclass=NullPool, isolation_level="AUTOCOMMIT")


def connection_label() -> str:
    """host:port/database with the password left out, for log lines."""
    return f"{settings.db_host}:{settings.db_port}/{settings.db_database}"
