"""
Shared fixtures.

SQLite stands in for Postgres wherever the SQL under test is portable:
one in-memory connection per test, autocommit, like the scripts use.
"""
import pytest
from sqlalchemy import text

from jobportal.db.postgres import create_script_engine


@pytest.fixture
def sqlite_conn():
    """Fresh in-memory database on a single autocommit connection."""
    engine = create_script_engine("sqlite://")
    with engine.connect() as conn:
        yield conn
    engine.dispose()


@pytest.fixture
def portal_tables(sqlite_conn):
    """Minimal users/companies/jobs tables with a few rows."""
    for statement in (
        """CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            role TEXT DEFAULT 'candidate',
            phone TEXT,
            is_active BOOLEAN DEFAULT 1
        )""",
        "CREATE TABLE companies (id INTEGER PRIMARY KEY, name TEXT NOT NULL)",
        "CREATE TABLE jobs (id INTEGER PRIMARY KEY, company_id INTEGER, title TEXT, is_active BOOLEAN DEFAULT 1)",
        "INSERT INTO users (first_name, last_name, email, password_hash, role) "
        "VALUES ('Asha', 'Rao', 'asha@example.com', 'x', 'candidate')",
        "INSERT INTO companies (id, name) VALUES (1, 'TechCorp Solutions')",
        "INSERT INTO jobs (id, company_id, title, is_active) VALUES (1, 1, 'Backend Engineer', 1)",
        "INSERT INTO jobs (id, company_id, title, is_active) VALUES (2, 1, 'Frontend Engineer', 0)",
    ):
        sqlite_conn.execute(text(statement))
    return sqlite_conn
