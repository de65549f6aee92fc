#!/usr/bin/env python3
"""
Database Deployment Script

Applies the SQL files in database/ (in order) to the configured Postgres
instance, then prints a deployment summary.

Per-statement failures are logged and skipped; a connection failure
exits with status 1.

Usage: python scripts/deploy_database.py
"""
import logging
import sys
sys.path.insert(0, '.')

from jobportal.core.config import get_settings
from jobportal.core.logging_config import setup_logging
from jobportal.db.postgres import create_script_engine, connection_label
from jobportal.services.sql_deploy import (
    DEFAULT_SQL_FILES, collect_deployment_summary, deploy_sql_files, resolve_sql_files
)

logger = logging.getLogger("deploy_database")


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    print("=" * 50)
    print("JOB PORTAL - DATABASE DEPLOYMENT")
    print("=" * 50)
    print(f"\n🔌 Connecting to {connection_label()} ...")

    engine = create_script_engine()
    try:
        with engine.connect() as conn:
            print("✅ Connected")

            paths = resolve_sql_files(settings.sql_dir, DEFAULT_SQL_FILES)
            result = deploy_sql_files(conn, paths)

            print("\n📄 Files:")
            for file_result in result["files"]:
                print(
                    f"    {file_result['file']}: {file_result['executed']} executed, "
                    f"{file_result['failed']} failed ({file_result['statements']} statements)"
                )
            for skipped in result["skipped"]:
                print(f"    ⚠️  {skipped}: not found, skipped")

            print(f"\n    Total: {result['executed']} executed, {result['failed']} failed")

            summary = collect_deployment_summary(conn)
            print(f"\n📋 Tables ({len(summary['tables'])}): {', '.join(summary['tables'])}")
            print("\n📊 Row counts:")
            for table, count in summary["counts"].items():
                print(f"    {table}: {count if count is not None else 'table not found or error'}")
    except Exception:
        logger.exception("Deployment failed")
        sys.exit(1)
    finally:
        engine.dispose()

    print("\n" + "=" * 50)
    print("🎉 Deployment complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
