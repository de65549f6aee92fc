#!/usr/bin/env python3
"""
Comprehensive Database Verification

Runs the full check battery (tables, data minimums, functional queries,
relationships, API query dry runs) and prints a report.

Usage: python scripts/verify_database.py
"""
import logging
import sys
sys.path.insert(0, '.')

from jobportal.core.config import get_settings
from jobportal.core.logging_config import setup_logging
from jobportal.db.postgres import create_script_engine, connection_label
from jobportal.services.verification import run_comprehensive_verification

logger = logging.getLogger("verify_database")


def print_report(report: dict):
    print(f"\n📋 Tables ({len(report['tables'])}):")
    for table in report["tables"]:
        print(f"    - {table}")

    print("\n📊 Data:")
    for check in report["data"]:
        icon = "✅" if check["passed"] else "❌"
        actual = check["actual"] if check["actual"] is not None else "error"
        print(f"    {icon} {check['table']}: {actual} (expected >= {check['expected']})")
    print(f"    Total records: {report['total_records']}")

    print("\n🔍 Functional checks:")
    for name, rows in report["functional"].items():
        if isinstance(rows, dict) and "error" in rows:
            print(f"    ❌ {name}: {rows['error']}")
        else:
            print(f"    ✅ {name}: {rows}")

    print("\n🔗 Relationships:")
    for check in report["relationships"]:
        if check["error"]:
            print(f"    ❌ {check['name']}: {check['error']}")
        else:
            print(f"    ✅ {check['name']}: {check['count']} rows")

    print("\n🧪 Application queries:")
    for check in report["queries"]:
        print(f"    {'✅' if check['ok'] else '❌'} {check['name']}")


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    print("=" * 50)
    print("JOB PORTAL - DATABASE VERIFICATION")
    print("=" * 50)
    print(f"\n🔌 Connecting to {connection_label()} ...")

    engine = create_script_engine()
    try:
        with engine.connect() as conn:
            report = run_comprehensive_verification(conn)
    except Exception:
        logger.exception("Verification failed")
        sys.exit(1)
    finally:
        engine.dispose()

    print_report(report)

    print("\n" + "=" * 50)
    if report["status"] == "operational":
        print("🎉 Database is fully operational!")
    else:
        print("⚠️  Database is working with minor issues")
    print("=" * 50)


if __name__ == "__main__":
    main()
