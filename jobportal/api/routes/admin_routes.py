"""
Admin Routes - every endpoint requires the admin role.

GET /admin/dashboard/stats - Headline counts across the portal
GET /admin/analytics/applications - Per-job pipeline (application_pipeline view)
GET /admin/analytics/jobs - Most-applied active jobs (job_listings view)
GET /admin/system/health - Row and vacuum stats per table (table_health view)
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from jobportal.db.postgres import execute_raw_sql
from jobportal.core.auth import authorize
from jobportal.schemas.schemas import DashboardStats, JobListingStats, PipelineStats, TableHealth

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(authorize("admin"))])

DASHBOARD_SQL = """
    SELECT
        (SELECT COUNT(*) FROM users) AS total_users,
        (SELECT COUNT(*) FROM users WHERE role = 'candidate') AS candidates,
        (SELECT COUNT(*) FROM users WHERE role = 'recruiter') AS recruiters,
        (SELECT COUNT(*) FROM companies WHERE is_active = TRUE) AS companies,
        (SELECT COUNT(*) FROM jobs) AS total_jobs,
        (SELECT COUNT(*) FROM jobs WHERE is_active = TRUE AND status = 'active') AS active_jobs,
        (SELECT COUNT(*) FROM applications) AS total_applications,
        (SELECT COUNT(*) FROM applications
            WHERE applied_at >= CURRENT_TIMESTAMP - INTERVAL '7 days') AS new_applications,
        (SELECT COUNT(*) FROM referrals) AS total_referrals,
        (SELECT COALESCE(SUM(amount), 0) FROM payments WHERE status = 'completed') AS revenue
"""


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats():
    row = execute_raw_sql(DASHBOARD_SQL)[0]
    return DashboardStats(**{**row, "revenue": float(row["revenue"])})


@router.get("/analytics/applications", response_model=List[PipelineStats])
async def application_pipeline():
    """Applications per status for each job, busiest jobs first."""
    rows = execute_raw_sql("""
        SELECT * FROM application_pipeline
        ORDER BY pending + reviewed + shortlisted + interviewed + rejected + hired DESC, job_id
    """)
    return [PipelineStats(**r) for r in rows]


@router.get("/analytics/jobs", response_model=List[JobListingStats])
async def top_jobs(limit: int = Query(10, ge=1, le=50)):
    rows = execute_raw_sql("""
        SELECT id, title, company_name, location, application_count, created_at
        FROM job_listings
        ORDER BY application_count DESC, created_at DESC
        LIMIT :limit
    """, {"limit": limit})
    return [JobListingStats(**r) for r in rows]


@router.get("/system/health", response_model=List[TableHealth])
async def table_health():
    return [TableHealth(**r) for r in execute_raw_sql("SELECT * FROM table_health")]
