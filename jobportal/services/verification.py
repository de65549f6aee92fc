"""
Deployment Verification Service

Runs a fixed battery of sanity queries against a deployed database:

1. Tables present in the public schema
2. Row counts against expected minimums (advisory)
3. Functional queries (roles, active jobs, statuses, skills, payments, resume JSON)
4. Relationship integrity (JOIN counts across the foreign keys)
5. Dry runs of the queries the API depends on

Every check catches its own SQLAlchemyError and records it; the result is a
report, not a gate. Only connection-level failures escape.

The quick variant (server time + table count) is meant to run under a
Watchdog so a hung connection cannot block a deploy pipeline.
"""

import logging
import os
import threading
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from jobportal.db.introspection import count_rows, list_public_tables, server_time

logger = logging.getLogger(__name__)


# ============================================================
# FIXED CHECK BATTERY
# ============================================================

# (table, expected minimum rows) - matches the sample data in database/
DATA_CHECKS: List[Tuple[str, int]] = [
    ("users", 20),
    ("companies", 10),
    ("jobs", 15),
    ("applications", 30),
    ("skills", 20),
    ("resumes", 5),
    ("resume_skills", 18),
    ("referrals", 3),
    ("payments", 5),
    ("resume_templates", 5),
]

RELATIONSHIP_CHECKS: List[Tuple[str, str]] = [
    ("Jobs → Companies", "SELECT COUNT(*) FROM jobs j JOIN companies c ON j.company_id = c.id"),
    ("Applications → Users", "SELECT COUNT(*) FROM applications a JOIN users u ON a.candidate_id = u.id"),
    ("Applications → Jobs", "SELECT COUNT(*) FROM applications a JOIN jobs j ON a.job_id = j.id"),
    ("Resumes → Users", "SELECT COUNT(*) FROM resumes r JOIN users u ON r.user_id = u.id"),
    ("Resume Skills → Skills", "SELECT COUNT(*) FROM resume_skills rs JOIN skills s ON rs.skill_id = s.id"),
    ("Job Skills → Skills", "SELECT COUNT(*) FROM job_skills js JOIN skills s ON js.skill_id = s.id"),
]

APPLICATION_QUERIES: List[Tuple[str, str, dict]] = [
    (
        "Authentication query",
        "SELECT id, email, role FROM users WHERE email = :email",
        {"email": "test@example.com"},
    ),
    (
        "Job search query",
        """
            SELECT j.*, c.name AS company_name
            FROM jobs j
            JOIN companies c ON j.company_id = c.id
            WHERE j.is_active = TRUE
            LIMIT 5
        """,
        {},
    ),
]

FUNCTIONAL_QUERIES: Dict[str, str] = {
    "user_roles": "SELECT role, COUNT(*) AS count FROM users GROUP BY role ORDER BY role",
    "application_statuses": """
        SELECT status, COUNT(*) AS count
        FROM applications
        GROUP BY status
        ORDER BY count DESC
        LIMIT 5
    """,
    "skills_by_category": """
        SELECT category, COUNT(*) AS skill_count
        FROM skills
        GROUP BY category
        ORDER BY skill_count DESC
    """,
    "top_payment_purposes": """
        SELECT purpose, COUNT(*) AS count, SUM(amount) AS total
        FROM payments
        GROUP BY purpose
        ORDER BY total DESC
        LIMIT 3
    """,
    "resume_skill_samples": """
        SELECT r.id, COUNT(rs.skill_id) AS skill_count
        FROM resumes r
        LEFT JOIN resume_skills rs ON r.id = rs.resume_id
        GROUP BY r.id
        ORDER BY r.id
        LIMIT 3
    """,
    "resume_json_integrity": """
        SELECT
            COUNT(*) AS total_resumes,
            COUNT(CASE WHEN resume_data->>'summary' IS NOT NULL THEN 1 END) AS with_summary,
            COUNT(CASE WHEN resume_data->'personal_info'->>'firstName' IS NOT NULL THEN 1 END) AS with_personal_info
        FROM resumes
    """,
}


def _fetch_dicts(conn: Connection, sql: str, params: dict = None) -> List[dict]:
    result = conn.execute(text(sql), params or {})
    columns = list(result.keys())
    return [dict(zip(columns, row)) for row in result.fetchall()]


# ============================================================
# INDIVIDUAL CHECKS
# ============================================================

def check_data_minimums(
    conn: Connection,
    checks: Sequence[Tuple[str, int]] = DATA_CHECKS
) -> List[Dict]:
    """
    Compare each table's row count with its expected minimum.

    Returns one dict per check: table, expected, actual, passed, error.
    A table that cannot be counted fails with actual=None.
    """
    results = []
    for table, expected in checks:
        try:
            actual = count_rows(conn, table)
            results.append({
                "table": table, "expected": expected, "actual": actual,
                "passed": actual >= expected, "error": None
            })
        except SQLAlchemyError as e:
            logger.warning("Data check failed for %s: %s", table, e.__class__.__name__)
            results.append({
                "table": table, "expected": expected, "actual": None,
                "passed": False, "error": str(getattr(e, "orig", e))
            })
    return results


def check_relationships(
    conn: Connection,
    checks: Sequence[Tuple[str, str]] = RELATIONSHIP_CHECKS
) -> List[Dict]:
    """JOIN counts per relationship; count is None when the query fails."""
    results = []
    for name, sql in checks:
        try:
            count = int(conn.execute(text(sql)).scalar())
            results.append({"name": name, "count": count, "error": None})
        except SQLAlchemyError as e:
            logger.warning("Relationship check failed for %s", name)
            results.append({"name": name, "count": None, "error": str(getattr(e, "orig", e))})
    return results


def functional_checks(conn: Connection) -> Dict:
    """
    Distribution queries used to eyeball the deployment.

    Returns:
        {check_name: rows} plus "active_jobs"; a failing check maps to
        {"error": message} instead of rows.
    """
    results = {}
    for name, sql in FUNCTIONAL_QUERIES.items():
        try:
            results[name] = _fetch_dicts(conn, sql)
        except SQLAlchemyError as e:
            logger.warning("Functional check %s failed", name)
            results[name] = {"error": str(getattr(e, "orig", e))}

    try:
        results["active_jobs"] = count_rows(conn, "jobs", "is_active = TRUE")
    except SQLAlchemyError as e:
        results["active_jobs"] = {"error": str(getattr(e, "orig", e))}

    return results


def application_query_checks(
    conn: Connection,
    queries: Sequence[Tuple[str, str, dict]] = APPLICATION_QUERIES
) -> List[Dict]:
    """Run the API's critical queries once to prove their structure is valid."""
    results = []
    for name, sql, params in queries:
        try:
            conn.execute(text(sql), params).fetchall()
            results.append({"name": name, "ok": True, "error": None})
        except SQLAlchemyError as e:
            results.append({"name": name, "ok": False, "error": str(getattr(e, "orig", e))})
    return results


# ============================================================
# FULL / QUICK RUNS
# ============================================================

def run_comprehensive_verification(conn: Connection) -> Dict:
    """
    Full post-deployment verification.

    Status is "operational" when every data minimum is met and
    "minor_issues" otherwise. Callers report it; they do not fail on it.
    """
    tables = list_public_tables(conn, base_tables_only=True)
    data = check_data_minimums(conn)

    return {
        "tables": tables,
        "data": data,
        "total_records": sum(d["actual"] or 0 for d in data),
        "functional": functional_checks(conn),
        "relationships": check_relationships(conn),
        "queries": application_query_checks(conn),
        "status": "operational" if all(d["passed"] for d in data) else "minor_issues",
    }


def run_quick_verification(conn: Connection) -> Dict:
    """Server time and number of base tables."""
    return {
        "server_time": server_time(conn),
        "table_count": len(list_public_tables(conn, base_tables_only=True)),
    }


# ============================================================
# WATCHDOG
# ============================================================

QUICK_VERIFICATION_TIMEOUT = 15


def exit_process_on_timeout(seconds: float):
    """Default watchdog action: log and terminate the process, status 1."""
    logger.error("Verification timed out after %s seconds", seconds)
    # os._exit: sys.exit from a timer thread would only end that thread
    os._exit(1)


class Watchdog:
    """
    Hard timeout for a block of synchronous work.

    When the timer fires before cancel(), on_timeout(seconds) runs on the
    timer thread. The default handler kills the process; the work in
    progress is not cancelled in any other way.

    Usage:
        with Watchdog(15):
            run_quick_verification(conn)
    """

    def __init__(self, seconds: float, on_timeout: Optional[Callable[[float], None]] = None):
        self.seconds = seconds
        self.on_timeout = on_timeout or exit_process_on_timeout
        self.fired = False
        self._timer: Optional[threading.Timer] = None

    def _fire(self):
        self.fired = True
        self.on_timeout(self.seconds)

    def start(self) -> "Watchdog":
        self._timer = threading.Timer(self.seconds, self._fire)
        self._timer.daemon = True
        self._timer.start()
        return self

    def cancel(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __enter__(self) -> "Watchdog":
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.cancel()
        return False
