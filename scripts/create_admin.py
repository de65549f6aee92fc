#!/usr/bin/env python3
"""
Create Default Admin

Creates the admin account (ADMIN_EMAIL / ADMIN_PASSWORD, default
admin@jobportal.com) unless it already exists.

Usage: python scripts/create_admin.py
"""
import logging
import sys
sys.path.insert(0, '.')

from jobportal.core.config import get_settings
from jobportal.core.logging_config import setup_logging
from jobportal.db.postgres import create_script_engine
from jobportal.services.db_setup import create_admin

logger = logging.getLogger("create_admin")


def main():
    settings = get_settings()
    setup_logging(settings.log_level)

    print("Connecting to database...")
    engine = create_script_engine()
    try:
        with engine.connect() as conn:
            result = create_admin(conn, settings.admin_email, settings.admin_password)
    except Exception:
        logger.exception("❌ Error creating admin user")
        sys.exit(1)
    finally:
        engine.dispose()

    if result["created"]:
        print("✅ Admin user created successfully!")
    else:
        print("Admin user already exists:")
    print(f"Email: {settings.admin_email}")
    print(f"Role: {result['role']}")
    print(f"User ID: {result['id']}")
    if result["created"]:
        print("\n🔐 Please change the default password after first login!")


if __name__ == "__main__":
    main()
