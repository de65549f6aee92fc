"""
Application Routes

GET /applications/me - Applications submitted by the current candidate
GET /applications/stats - Status breakdown for a recruiter's jobs (all jobs for admins)
DELETE /applications/{application_id}/withdraw - Candidate withdraws an application
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from jobportal.db.postgres import execute_raw_sql
from jobportal.core.auth import authorize
from jobportal.api.routes.job_routes import APPLICATION_COLUMNS
from jobportal.schemas.schemas import ApplicationResponse, ApplicationStats, ApplicationStatus, MessageResponse
from jobportal.services.stats import status_breakdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])

# Decided applications stay on record
NON_WITHDRAWABLE_STATUSES = {"hired"}


@router.get("/me", response_model=List[ApplicationResponse])
async def my_applications(
    status: Optional[str] = Query(None),
    user: dict = Depends(authorize("candidate"))
):
    """Current candidate's applications, newest first."""
    sql = f"""
        SELECT {APPLICATION_COLUMNS}
        FROM applications a
        JOIN jobs j ON a.job_id = j.id
        JOIN companies c ON j.company_id = c.id
        JOIN users u ON a.candidate_id = u.id
        WHERE a.candidate_id = :uid
    """
    params = {"uid": user["id"]}
    if status:
        sql += " AND a.status = :status"
        params["status"] = status
    sql += " ORDER BY a.applied_at DESC"

    return [ApplicationResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/stats", response_model=ApplicationStats)
async def application_stats(
    job_id: Optional[int] = Query(None),
    user: dict = Depends(authorize("recruiter", "admin"))
):
    """Applications per status, and how many arrived in the last 7 days."""
    sql = """
        SELECT a.status, COUNT(*) AS count,
               COUNT(*) FILTER (WHERE a.applied_at >= CURRENT_TIMESTAMP - INTERVAL '7 days') AS recent
        FROM applications a
        JOIN jobs j ON a.job_id = j.id
        WHERE TRUE
    """
    params = {}
    if user["role"] != "admin":
        sql += " AND j.posted_by_recruiter_id = :uid"
        params["uid"] = user["id"]
    if job_id is not None:
        sql += " AND a.job_id = :jid"
        params["jid"] = job_id
    sql += " GROUP BY a.status"

    rows = execute_raw_sql(sql, params)
    by_status = status_breakdown(rows, [s.value for s in ApplicationStatus])
    return ApplicationStats(
        total=sum(by_status.values()),
        new_last_7_days=sum(int(r["recent"] or 0) for r in rows),
        by_status=by_status
    )


@router.delete("/{application_id}/withdraw", response_model=MessageResponse)
async def withdraw_application(application_id: int, user: dict = Depends(authorize("candidate"))):
    """
    Withdraw one of the candidate's own applications.

    The row is deleted, so the candidate may apply to the job again later.
    """
    rows = execute_raw_sql(
        "SELECT id, candidate_id, status FROM applications WHERE id = :aid",
        {"aid": application_id}
    )
    if not rows:
        raise HTTPException(status_code=404, detail="Application not found")

    application = rows[0]
    if application["candidate_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to withdraw this application")
    if application["status"] in NON_WITHDRAWABLE_STATUSES:
        raise HTTPException(status_code=400, detail="Cannot withdraw application at this stage")

    execute_raw_sql("DELETE FROM applications WHERE id = :aid RETURNING id", {"aid": application_id})
    logger.info("Application %s withdrawn by candidate %s", application_id, user["id"])
    return MessageResponse(message="Application withdrawn successfully")
