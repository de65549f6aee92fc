#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the Postgres connection and list the public tables.
Usage: python scripts/check_connection.py
"""
import logging
import sys
sys.path.insert(0, '.')

from jobportal.core.config import get_settings
from jobportal.core.logging_config import setup_logging, sanitize_log_data
from jobportal.db.introspection import list_public_tables, server_time
from jobportal.db.postgres import create_script_engine, connection_label

logger = logging.getLogger("check_connection")


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    print("=" * 50)
    print("JOB PORTAL - CONNECTION TEST")
    print("=" * 50)
    print("\n[1] Testing PostgreSQL...")
    print(f"    Target: {connection_label()} (sslmode={settings.db_sslmode})")
    logger.debug("Settings: %s", sanitize_log_data(settings.model_dump()))

    engine = create_script_engine()
    try:
        with engine.connect() as conn:
            print(f"    ✅ PostgreSQL: CONNECTED (server time {server_time(conn)})")
            tables = list_public_tables(conn)
    except Exception:
        logger.exception("    ❌ PostgreSQL: FAILED")
        sys.exit(1)
    finally:
        engine.dispose()

    print(f"\n[2] Public tables ({len(tables)}):")
    for table in tables:
        print(f"    - {table}")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
