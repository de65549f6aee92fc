"""
Job Portal backend.

- PostgreSQL schema + deployment/verification scripts (scripts/, database/)
- FastAPI REST API over raw SQL (jobportal.main:app)
- Client-side state stores and form validation helpers
"""

__version__ = "1.0.0"
