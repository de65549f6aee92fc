#!/usr/bin/env python3
"""
Hosted Database Verification

Same battery as verify_database.py, for the hosted (Render) instance:
forces sslmode=require unless DB_SSLMODE is set explicitly.

Usage: python scripts/verify_render_database.py
"""
import os
import sys
sys.path.insert(0, '.')

# Hosted Postgres only accepts TLS connections
os.environ.setdefault("DB_SSLMODE", "require")

from verify_database import main  # noqa: E402


if __name__ == "__main__":
    main()
