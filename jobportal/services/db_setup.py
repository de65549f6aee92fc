"""
Minimal database bootstrap.

setup_database: create the users and companies tables (with indexes) when
they are missing, seeding three sample companies. Lighter than the full
deployment set in database/, for a fresh instance that only needs sign-up.

create_admin: insert the default admin account once.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from jobportal.core.auth import hash_password
from jobportal.db.introspection import list_public_tables
from jobportal.services.sql_deploy import execute_statements, split_sql_statements

logger = logging.getLogger(__name__)

USERS_DDL = """
CREATE TABLE users (
    id SERIAL PRIMARY KEY,
    first_name VARCHAR(255) NOT NULL,
    last_name VARCHAR(255) NOT NULL,
    email VARCHAR(255) UNIQUE NOT NULL,
    password_hash VARCHAR(255) NOT NULL,
    role VARCHAR(50) DEFAULT 'candidate' CHECK (role IN ('candidate', 'recruiter', 'admin')),
    phone VARCHAR(20),
    is_active BOOLEAN DEFAULT TRUE,
    last_login TIMESTAMP,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX idx_users_email ON users(email);
CREATE INDEX idx_users_role ON users(role);
CREATE INDEX idx_users_is_active ON users(is_active);
"""

COMPANIES_DDL = """
CREATE TABLE companies (
    id SERIAL PRIMARY KEY,
    name VARCHAR(255) NOT NULL UNIQUE,
    description TEXT,
    website VARCHAR(255),
    logo_url VARCHAR(500),
    size VARCHAR(50),
    industry VARCHAR(255),
    founded_year INTEGER,
    location_city VARCHAR(255),
    location_state VARCHAR(255),
    location_country VARCHAR(255),
    is_active BOOLEAN DEFAULT TRUE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX idx_companies_name ON companies(name);
CREATE INDEX idx_companies_is_active ON companies(is_active);
"""

SAMPLE_COMPANIES_SQL = """
INSERT INTO companies (name, description, website, size, industry) VALUES
('TechCorp Solutions', 'Leading technology solutions provider', 'https://techcorp.com', '1000-5000', 'Technology'),
('Innovate Labs', 'Innovation-driven software development', 'https://innovatelabs.com', '200-500', 'Technology'),
('StartupXYZ', 'Fintech startup revolutionizing payments', 'https://startupxyz.com', '50-200', 'Financial Technology')
ON CONFLICT (name) DO NOTHING
"""


def setup_database(conn: Connection) -> Dict[str, List[str]]:
    """
    Create users/companies if absent.

    Returns {"existing": tables found before, "created": tables created,
    "failed": tables whose DDL had failing statements}.
    """
    existing = list_public_tables(conn)
    created = []
    failed = []

    for table, ddl in (("users", USERS_DDL), ("companies", COMPANIES_DDL)):
        if table in existing:
            logger.info("%s table already exists", table)
            continue

        result = execute_statements(conn, split_sql_statements(ddl))
        if result["failed"]:
            logger.warning("%s table: %d statement(s) failed", table, result["failed"])
            failed.append(table)
            continue
        created.append(table)

        if table == "companies":
            execute_statements(conn, [SAMPLE_COMPANIES_SQL])

    return {"existing": existing, "created": created, "failed": failed}


def create_admin(conn: Connection, email: str, password: str) -> Dict[str, Optional[object]]:
    """
    Create the admin account unless a user with this email exists.

    Returns {"created": bool, "id": user id, "role": role of the account}.
    """
    row = conn.execute(
        text("SELECT id, role FROM users WHERE email = :email"),
        {"email": email}
    ).fetchone()
    if row:
        return {"created": False, "id": row[0], "role": row[1]}

    new_id = conn.execute(
        text("""
            INSERT INTO users (first_name, last_name, email, password_hash, role, phone)
            VALUES ('Super', 'Admin', :email, :password_hash, 'admin', '+1234567890')
            RETURNING id
        """),
        {"email": email, "password_hash": hash_password(password)}
    ).scalar()
    conn.commit()

    logger.info("Admin user %s created with id %s", email, new_id)
    return {"created": True, "id": new_id, "role": "admin"}
