#!/usr/bin/env python3
"""
Quick Database Check

Server time + public table count, under a 15 second watchdog so a hung
connection cannot block a deploy pipeline.

Usage: python scripts/verify_database_quick.py
"""
import logging
import sys
sys.path.insert(0, '.')

from jobportal.core.config import get_settings
from jobportal.core.logging_config import setup_logging
from jobportal.db.postgres import create_script_engine, connection_label
from jobportal.services.verification import (
    QUICK_VERIFICATION_TIMEOUT, Watchdog, run_quick_verification
)

logger = logging.getLogger("verify_database_quick")


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    print(f"🔌 Quick check of {connection_label()} (timeout {QUICK_VERIFICATION_TIMEOUT}s)")

    engine = create_script_engine()
    try:
        with Watchdog(QUICK_VERIFICATION_TIMEOUT):
            with engine.connect() as conn:
                result = run_quick_verification(conn)
    except Exception:
        logger.exception("Quick verification failed")
        sys.exit(1)
    finally:
        engine.dispose()

    print(f"✅ Connected. Server time: {result['server_time']}")
    print(f"📋 Public tables: {result['table_count']}")


if __name__ == "__main__":
    main()
