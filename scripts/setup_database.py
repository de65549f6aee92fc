#!/usr/bin/env python3
"""
Minimal Database Setup

Creates the users and companies tables when missing (with three sample
companies). Use deploy_database.py for the full schema.

Usage: python scripts/setup_database.py
"""
import logging
import sys
sys.path.insert(0, '.')

from jobportal.core.config import get_settings
from jobportal.core.logging_config import setup_logging
from jobportal.db.postgres import create_script_engine
from jobportal.services.db_setup import setup_database

logger = logging.getLogger("setup_database")


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    print("🔍 Checking database tables...")
    engine = create_script_engine()
    try:
        with engine.connect() as conn:
            result = setup_database(conn)
    except Exception:
        logger.exception("❌ Database setup failed")
        sys.exit(1)
    finally:
        engine.dispose()

    print(f"📋 Existing tables: {result['existing']}")
    for table in ("users", "companies"):
        if table in result["created"]:
            print(f"✅ {table} table created")
        elif table in result["failed"]:
            print(f"❌ {table} table could not be created")
        else:
            print(f"✅ {table} table already exists")

    if result["failed"]:
        sys.exit(1)
    print("🎉 Database setup completed successfully")


if __name__ == "__main__":
    main()
