"""
SQL Deploy Runner

PURPOSE:
Apply the ordered deployment set in database/ to a Postgres instance.

HOW IT WORKS:
1. For each file in the fixed order, skip it with a warning if it is missing
2. Split the file into statements on terminating semicolons
3. Execute each statement on ONE connection, in file order and in-file order
4. A failing statement is logged (truncated) and the run moves on
5. Finish with a summary: public tables plus row counts of the core tables

FAILURE POLICY:
- Per-statement errors: WARNING, counted in the file result, never abort.
  Re-running the set against a database that already holds the data is
  expected to produce "already exists" / duplicate-key failures.
- Connection loss or anything else: propagates to the caller (the CLI
  exits with status 1).

The connection must be in AUTOCOMMIT mode (see create_script_engine),
otherwise Postgres aborts the whole transaction on the first failure.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from jobportal.db.introspection import count_rows, list_public_tables

logger = logging.getLogger(__name__)


# ============================================================
# CONSTANTS
# ============================================================

# Applied in this order; 03 and 06 were folded into their neighbours.
DEFAULT_SQL_FILES = [
    "01_core_schema.sql",
    "02_sample_data.sql",
    "04_phase2_schema.sql",
    "05_phase2_sample_data.sql",
    "07_phase3_optimization.sql",
    "08_monitoring_maintenance.sql",
]

# Row counts reported after a deployment
SUMMARY_TABLES = ["users", "companies", "jobs", "applications", "skills", "resumes"]

# Fragments this short are leftovers ("\n", ")", "END"), not statements
MIN_STATEMENT_LENGTH = 6

ERROR_PREVIEW_LENGTH = 100

_DOLLAR_TAG = re.compile(r"\$(?:[A-Za-z_][A-Za-z0-9_]*)?\$")


# ============================================================
# STATEMENT SPLITTING
# ============================================================

def _quoted_end(sql_text: str, start: int, quote: str, backslash_escapes: bool = False) -> int:
    """
    Index just past the quote opened at `start`; doubled quotes are escapes.

    With backslash_escapes (Postgres E'...' strings) a backslash also
    escapes the next character.
    """
    i = start + 1
    n = len(sql_text)
    while i < n:
        ch = sql_text[i]
        if backslash_escapes and ch == "\\":
            i += 2
            continue
        if ch == quote:
            if sql_text.startswith(quote * 2, i):
                i += 2
                continue
            return i + 1
        i += 1
    return n


def _is_escape_string(sql_text: str, quote_index: int) -> bool:
    """True when the quote at quote_index opens an E'...' literal."""
    if quote_index == 0 or sql_text[quote_index - 1] not in "eE":
        return False
    before = sql_text[quote_index - 2] if quote_index >= 2 else ""
    return not (before.isalnum() or before == "_")


def split_sql_statements(sql_text: str) -> List[str]:
    """
    Split a SQL script into statements on terminating semicolons.

    Semicolons inside string literals, quoted identifiers, comments and
    dollar-quoted bodies ($$ ... $$, $fn$ ... $fn$) do not terminate a
    statement. Fragments that hold only comments or whitespace, or that are
    shorter than MIN_STATEMENT_LENGTH, are dropped.

    Example:
        >>> split_sql_statements("INSERT INTO x VALUES (1);\\n-- done\\n;")
        ['INSERT INTO x VALUES (1)']
    """
    statements = []
    buffer = []
    has_code = False

    def flush():
        statement = "".join(buffer).strip()
        if has_code and len(statement) >= MIN_STATEMENT_LENGTH:
            statements.append(statement)

    i = 0
    n = len(sql_text)
    while i < n:
        ch = sql_text[i]

        if sql_text.startswith("--", i):
            end = sql_text.find("\n", i)
            end = n if end == -1 else end
            buffer.append(sql_text[i:end])
            i = end
            continue

        if sql_text.startswith("/*", i):
            end = sql_text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            buffer.append(sql_text[i:end])
            i = end
            continue

        if ch in ("'", '"'):
            escapes = ch == "'" and _is_escape_string(sql_text, i)
            end = _quoted_end(sql_text, i, ch, backslash_escapes=escapes)
            buffer.append(sql_text[i:end])
            has_code = True
            i = end
            continue

        if ch == "$":
            match = _DOLLAR_TAG.match(sql_text, i)
            if match:
                tag = match.group(0)
                end = sql_text.find(tag, match.end())
                end = n if end == -1 else end + len(tag)
                buffer.append(sql_text[i:end])
                has_code = True
                i = end
                continue

        if ch == ";":
            flush()
            buffer = []
            has_code = False
            i += 1
            continue

        if not ch.isspace():
            has_code = True
        buffer.append(ch)
        i += 1

    flush()
    return statements


# ============================================================
# EXECUTION
# ============================================================

def _error_preview(error: Exception) -> str:
    """Driver message of a SQLAlchemy error, cut to ERROR_PREVIEW_LENGTH."""
    message = str(getattr(error, "orig", None) or error).strip().replace("\n", " ")
    if len(message) > ERROR_PREVIEW_LENGTH:
        return message[:ERROR_PREVIEW_LENGTH] + "..."
    return message


def execute_statements(conn: Connection, statements: Sequence[str]) -> Dict:
    """
    Execute statements one by one, continuing past failures.

    Returns:
        {"executed": int, "failed": int, "errors": [{"statement": n, "error": str}]}
        where n is the 1-based statement number.

    Raises:
        DBAPIError when the connection itself is lost; every later statement
        would fail the same way.
    """
    executed = 0
    errors = []

    for number, statement in enumerate(statements, start=1):
        try:
            # Raw driver SQL: no bind-parameter parsing, so "::jsonb" casts and
            # "%" in literals reach Postgres untouched.
            conn.exec_driver_sql(statement, execution_options={"no_parameters": True})
            executed += 1
        except DBAPIError as e:
            if e.connection_invalidated:
                raise
            preview = _error_preview(e)
            logger.warning("Warning in statement %d: %s", number, preview)
            errors.append({"statement": number, "error": preview})
        except SQLAlchemyError as e:
            preview = _error_preview(e)
            logger.warning("Warning in statement %d: %s", number, preview)
            errors.append({"statement": number, "error": preview})

    return {"executed": executed, "failed": len(errors), "errors": errors}


def run_sql_file(conn: Connection, path: Union[str, Path]) -> Optional[Dict]:
    """
    Execute one SQL file.

    Returns:
        Statement results plus "file" and "statements", or None when the file
        does not exist.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("File not found, skipping: %s", path)
        return None

    logger.info("Executing: %s", path.name)
    statements = split_sql_statements(path.read_text(encoding="utf-8"))
    result = execute_statements(conn, statements)
    result["file"] = path.name
    result["statements"] = len(statements)

    logger.info(
        "Completed: %s (%d ok, %d failed)",
        path.name, result["executed"], result["failed"]
    )
    return result


def resolve_sql_files(sql_dir: Union[str, Path], names: Iterable[str] = None) -> List[Path]:
    """Full paths of the deployment set inside sql_dir, in order."""
    sql_dir = Path(sql_dir)
    return [sql_dir / name for name in (names or DEFAULT_SQL_FILES)]


def deploy_sql_files(conn: Connection, paths: Iterable[Union[str, Path]]) -> Dict:
    """
    Run every SQL file in order on the same connection.

    Returns:
        {"files": [per-file result], "skipped": [missing paths],
         "executed": total ok, "failed": total failed}
    """
    files = []
    skipped = []

    for path in paths:
        result = run_sql_file(conn, path)
        if result is None:
            skipped.append(str(path))
        else:
            files.append(result)

    return {
        "files": files,
        "skipped": skipped,
        "executed": sum(f["executed"] for f in files),
        "failed": sum(f["failed"] for f in files),
    }


# ============================================================
# SUMMARY
# ============================================================

def collect_deployment_summary(conn: Connection, tables: Iterable[str] = None) -> Dict:
    """
    Public tables and row counts of the core tables.

    A count that cannot be taken (table missing) is reported as None.
    """
    counts = {}
    for table in tables or SUMMARY_TABLES:
        try:
            counts[table] = count_rows(conn, table)
        except SQLAlchemyError as e:
            logger.warning("Could not count %s: %s", table, _error_preview(e))
            counts[table] = None

    return {
        "tables": list_public_tables(conn),
        "counts": counts,
    }
