"""
Schema introspection helpers shared by the deployment and verification scripts.

Postgres is queried through information_schema; other dialects (SQLite in
the test-suite) go through the SQLAlchemy inspector.
"""

from typing import List, Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection


def list_public_tables(conn: Connection, base_tables_only: bool = False) -> List[str]:
    """Names of the tables in the public schema, sorted."""
    if conn.dialect.name == "postgresql":
        sql = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
        """
        if base_tables_only:
            sql += " AND table_type = 'BASE TABLE'"
        sql += " ORDER BY table_name"
        return [row[0] for row in conn.execute(text(sql))]

    inspector = inspect(conn)
    names = list(inspector.get_table_names())
    if not base_tables_only:
        names += inspector.get_view_names()
    return sorted(names)


def count_rows(conn: Connection, table: str, where: Optional[str] = None) -> int:
    """
    SELECT COUNT(*) on a table from the fixed table lists.

    Table names are never user input, so they are interpolated directly.
    """
    sql = f"SELECT COUNT(*) AS count FROM {table}"
    if where:
        sql += f" WHERE {where}"
    return int(conn.execute(text(sql)).scalar())


def server_time(conn: Connection):
    """Current timestamp as reported by the database server."""
    return conn.execute(text("SELECT CURRENT_TIMESTAMP AS server_time")).scalar()
