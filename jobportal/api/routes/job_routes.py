"""
Job Routes

GET /jobs - List active jobs with search filters, sort and pagination
GET /jobs/{job_id} - Get job details
POST /jobs - Create job posting (recruiter/admin)
PUT /jobs/{job_id} - Update job (owner or admin)
DELETE /jobs/{job_id} - Delete job (owner or admin)
POST /jobs/{job_id}/apply - Apply to job (candidate only)
GET /jobs/{job_id}/applications - Applications for a job (owner or admin)
PUT /jobs/{job_id}/applications/{application_id} - Move an application through the pipeline
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from jobportal.db.postgres import get_db_session, execute_raw_sql
from jobportal.core.auth import authorize
from jobportal.core.validation import create_job_posting_validator, raise_for_errors
from jobportal.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobListResponse,
    ApplicationCreate, ApplicationResponse, ApplicationStatusUpdate, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

ALREADY_APPLIED = "You have already applied for this job"

JOB_COLUMNS = """
    j.id, j.company_id, c.name AS company_name, j.posted_by_recruiter_id, j.title, j.description,
    j.location, j.salary_min, j.salary_max, j.currency, j.experience_level, j.employment_type,
    j.category, j.remote_type, j.is_remote, j.status, j.application_deadline, j.created_at
"""

JOB_SORTS = {
    "newest": "j.created_at DESC",
    "oldest": "j.created_at ASC",
    "salary-high": "j.salary_max DESC NULLS LAST",
    "salary-low": "j.salary_min ASC NULLS LAST",
    # No ranking model; relevance falls back to recency
    "relevance": "j.created_at DESC",
}

# Labels used by the search store -> stored remote_type values
REMOTE_ALIASES = {
    "remote": "fully-remote",
    "fully-remote": "fully-remote",
    "hybrid": "hybrid",
    "on-site": "on-site",
    "onsite": "on-site",
}

APPLICATION_COLUMNS = """
    a.id, a.job_id, j.title AS job_title, c.name AS company_name, a.candidate_id,
    u.first_name || ' ' || u.last_name AS candidate_name, u.email AS candidate_email,
    a.resume_id, a.cover_letter, a.status, a.applied_at
"""


# ============================================================
# QUERY BUILDING
# ============================================================

def _parse_amount(value: str) -> int:
    value = value.strip().lower()
    if value.endswith("k"):
        return int(float(value[:-1]) * 1000)
    return int(float(value))


def parse_salary_range(value: Optional[str]) -> Optional[Tuple[int, Optional[int]]]:
    """
    "30k-50k" -> (30000, 50000), "120k+" -> (120000, None).
    Returns None for an empty or unreadable range.
    """
    if not value:
        return None
    try:
        if value.endswith("+"):
            return _parse_amount(value[:-1]), None
        low, high = value.split("-", 1)
        return _parse_amount(low), _parse_amount(high)
    except ValueError:
        return None


def build_job_search_query(filters: Dict, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Dict:
    """
    Build the list query for GET /jobs.

    filters uses the search store's keys: search, location, type, salary,
    experience, category, remote, sort. Returns {"sql", "count_sql", "params"}.
    """
    where = ["j.is_active = TRUE", "j.status = 'active'"]
    params = {}

    if filters.get("search"):
        where.append("(j.title ILIKE :search OR j.description ILIKE :search OR c.name ILIKE :search)")
        params["search"] = f"%{filters['search']}%"
    if filters.get("location"):
        where.append("j.location ILIKE :location")
        params["location"] = f"%{filters['location']}%"
    if filters.get("type"):
        where.append("LOWER(j.employment_type) = :employment_type")
        params["employment_type"] = filters["type"].lower()
    if filters.get("experience"):
        where.append("j.experience_level ILIKE :experience")
        params["experience"] = filters["experience"]
    if filters.get("category"):
        where.append("j.category ILIKE :category")
        params["category"] = filters["category"]
    if filters.get("remote"):
        remote = filters["remote"].lower()
        where.append("j.remote_type = :remote_type")
        params["remote_type"] = REMOTE_ALIASES.get(remote, remote)

    salary = parse_salary_range(filters.get("salary"))
    if salary:
        low, high = salary
        where.append("(j.salary_max IS NULL OR j.salary_max >= :salary_low)")
        params["salary_low"] = low
        if high is not None:
            where.append("(j.salary_min IS NULL OR j.salary_min <= :salary_high)")
            params["salary_high"] = high

    from_clause = f"""
        FROM jobs j
        JOIN companies c ON j.company_id = c.id
        WHERE {' AND '.join(where)}
    """
    order_by = JOB_SORTS.get(filters.get("sort") or "newest", JOB_SORTS["newest"])

    params["limit"] = limit
    params["offset"] = (page - 1) * limit

    return {
        "sql": f"SELECT {JOB_COLUMNS} {from_clause} ORDER BY {order_by} LIMIT :limit OFFSET :offset",
        "count_sql": f"SELECT COUNT(*) AS total {from_clause}",
        "params": params,
    }


def _skills_by_job(job_ids: List[int]) -> Dict[int, List[str]]:
    if not job_ids:
        return {}
    rows = execute_raw_sql("""
        SELECT js.job_id, s.name FROM job_skills js
        JOIN skills s ON js.skill_id = s.id
        WHERE js.job_id = ANY(:ids)
        ORDER BY s.name
    """, {"ids": list(job_ids)})
    skills: Dict[int, List[str]] = {}
    for r in rows:
        skills.setdefault(r["job_id"], []).append(r["name"])
    return skills


def _to_job_response(r: dict, skills: List[str]) -> JobResponse:
    return JobResponse(
        **{**r,
           "salary_min": float(r["salary_min"]) if r["salary_min"] is not None else None,
           "salary_max": float(r["salary_max"]) if r["salary_max"] is not None else None},
        skills=skills
    )


def _get_job_or_404(job_id: int) -> dict:
    results = execute_raw_sql(f"""
        SELECT {JOB_COLUMNS}
        FROM jobs j JOIN companies c ON j.company_id = c.id
        WHERE j.id = :jid
    """, {"jid": job_id})
    if not results:
        raise HTTPException(status_code=404, detail="Job not found")
    return results[0]


def _ensure_can_manage(job: dict, user: dict):
    if user["role"] != "admin" and job["posted_by_recruiter_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to manage this job")


def _attach_skills(db, job_id: int, skill_names: List[str]):
    for skill_name in skill_names:
        skill_name = skill_name.strip()
        if not skill_name:
            continue
        skill_result = db.execute(
            text("""
                INSERT INTO skills (name, category) VALUES (:name, 'General')
                ON CONFLICT (name) DO UPDATE SET name = EXCLUDED.name
                RETURNING id
            """),
            {"name": skill_name}
        )
        skill_id = skill_result.fetchone()[0]
        db.execute(
            text("INSERT INTO job_skills (job_id, skill_id, is_required) VALUES (:jid, :sid, TRUE) ON CONFLICT DO NOTHING"),
            {"jid": job_id, "sid": skill_id}
        )


# ============================================================
# JOBS
# ============================================================

@router.get("", response_model=JobListResponse)
async def list_jobs(
    search: Optional[str] = Query(None, description="Search title, description and company"),
    location: Optional[str] = Query(None),
    type_: Optional[str] = Query(None, alias="type", description="Employment type, e.g. Full-time"),
    salary: Optional[str] = Query(None, description="Salary range, e.g. 30k-50k or 120k+"),
    experience: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    remote: Optional[str] = Query(None, description="Remote, Hybrid or On-site"),
    sort: str = Query("newest"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """List active job postings with filters and pagination."""
    if sort not in JOB_SORTS:
        raise HTTPException(status_code=400, detail=f"Unknown sort '{sort}'")

    query = build_job_search_query(
        {
            "search": search, "location": location, "type": type_, "salary": salary,
            "experience": experience, "category": category, "remote": remote, "sort": sort,
        },
        page=page, limit=limit
    )

    total = execute_raw_sql(query["count_sql"], query["params"])[0]["total"]
    results = execute_raw_sql(query["sql"], query["params"])
    skills = _skills_by_job([r["id"] for r in results])

    return JobListResponse(
        jobs=[_to_job_response(r, skills.get(r["id"], [])) for r in results],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int):
    """Get details of a specific job."""
    job = _get_job_or_404(job_id)
    return _to_job_response(job, _skills_by_job([job_id]).get(job_id, []))


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, user: dict = Depends(authorize("recruiter", "admin"))):
    """Create a new job posting. Only recruiters and admins can create jobs."""
    raise_for_errors(create_job_posting_validator(salary_min=job.salary_min), job.model_dump())

    with get_db_session() as db:
        company = db.execute(
            text("SELECT id FROM companies WHERE id = :id AND is_active = TRUE"),
            {"id": job.company_id}
        ).fetchone()
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")

        result = db.execute(
            text("""
                INSERT INTO jobs (company_id, posted_by_recruiter_id, title, description, location,
                    salary_min, salary_max, currency, experience_level, employment_type, category,
                    remote_type, is_remote, application_deadline, status)
                VALUES (:company_id, :recruiter_id, :title, :description, :location,
                    :salary_min, :salary_max, :currency, :experience_level, :employment_type, :category,
                    :remote_type, :is_remote, :deadline, 'active')
                RETURNING id
            """),
            {
                "company_id": job.company_id, "recruiter_id": user["id"], "title": job.title.strip(),
                "description": job.description, "location": job.location,
                "salary_min": job.salary_min, "salary_max": job.salary_max, "currency": job.currency,
                "experience_level": job.experience_level, "employment_type": job.employment_type,
                "category": job.category, "remote_type": job.remote_type,
                "is_remote": job.remote_type == "fully-remote", "deadline": job.application_deadline
            }
        )
        job_id = result.fetchone()[0]
        _attach_skills(db, job_id, job.skills)

    logger.info("Job %s created by user %s", job_id, user["id"])
    return await get_job(job_id)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: int, update: JobUpdate, user: dict = Depends(authorize("recruiter", "admin"))):
    """Update a job posting. Only the posting recruiter or an admin can update."""
    job = _get_job_or_404(job_id)
    _ensure_can_manage(job, user)

    changes = update.model_dump(exclude_unset=True, exclude_none=True, mode="json")

    # Posting rules for the changed fields, plus the salary bound
    merged = {**job, **changes}
    salary_min = merged["salary_min"]
    merged["salary_max"] = float(merged["salary_max"]) if merged["salary_max"] is not None else None
    validator = create_job_posting_validator(salary_min=float(salary_min) if salary_min is not None else None)
    raise_for_errors(validator, merged, fields=[*changes, "salary_max"])

    if changes:
        if "remote_type" in changes:
            changes["is_remote"] = changes["remote_type"] == "fully-remote"
        assignments = ", ".join(f"{column} = :{column}" for column in changes)
        execute_raw_sql(
            f"UPDATE jobs SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = :jid RETURNING id",
            {**changes, "jid": job_id}
        )

    return await get_job(job_id)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, user: dict = Depends(authorize("recruiter", "admin"))):
    """Delete a job posting and its applications."""
    job = _get_job_or_404(job_id)
    _ensure_can_manage(job, user)

    execute_raw_sql("DELETE FROM jobs WHERE id = :jid RETURNING id", {"jid": job_id})
    logger.info("Job %s deleted by user %s", job_id, user["id"])
    return MessageResponse(message="Job deleted successfully")


# ============================================================
# APPLICATIONS
# ============================================================

@router.post("/{job_id}/apply", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(job_id: int, application: ApplicationCreate, user: dict = Depends(authorize("candidate"))):
    """Apply to a job. Only candidates can apply, once per job."""
    job = _get_job_or_404(job_id)
    if job["status"] != "active":
        raise HTTPException(status_code=400, detail="This job is no longer accepting applications")

    if application.resume_id is not None:
        owned = execute_raw_sql(
            "SELECT id FROM resumes WHERE id = :rid AND user_id = :uid",
            {"rid": application.resume_id, "uid": user["id"]}
        )
        if not owned:
            raise HTTPException(status_code=404, detail="Resume not found")

    existing = execute_raw_sql(
        "SELECT id FROM applications WHERE job_id = :jid AND candidate_id = :uid",
        {"jid": job_id, "uid": user["id"]}
    )
    if existing:
        raise HTTPException(status_code=400, detail=ALREADY_APPLIED)

    try:
        rows = execute_raw_sql("""
            INSERT INTO applications (job_id, candidate_id, resume_id, cover_letter, status)
            VALUES (:jid, :uid, :rid, :cover_letter, 'pending')
            RETURNING id, job_id, candidate_id, resume_id, cover_letter, status, applied_at
        """, {"jid": job_id, "uid": user["id"], "rid": application.resume_id, "cover_letter": application.cover_letter})
    except IntegrityError:
        raise HTTPException(status_code=400, detail=ALREADY_APPLIED)

    return ApplicationResponse(**rows[0], job_title=job["title"], company_name=job["company_name"])


@router.get("/{job_id}/applications", response_model=List[ApplicationResponse])
async def list_job_applications(
    job_id: int,
    status: Optional[str] = Query(None),
    user: dict = Depends(authorize("recruiter", "admin"))
):
    """Applications received for a job, newest first."""
    job = _get_job_or_404(job_id)
    _ensure_can_manage(job, user)

    sql = f"""
        SELECT {APPLICATION_COLUMNS}
        FROM applications a
        JOIN jobs j ON a.job_id = j.id
        JOIN companies c ON j.company_id = c.id
        JOIN users u ON a.candidate_id = u.id
        WHERE a.job_id = :jid
    """
    params = {"jid": job_id}
    if status:
        sql += " AND a.status = :status"
        params["status"] = status
    sql += " ORDER BY a.applied_at DESC"

    return [ApplicationResponse(**r) for r in execute_raw_sql(sql, params)]


@router.put("/{job_id}/applications/{application_id}", response_model=ApplicationResponse)
async def update_application_status(
    job_id: int,
    application_id: int,
    update: ApplicationStatusUpdate,
    user: dict = Depends(authorize("recruiter", "admin"))
):
    """Set an application's status (pending, reviewed, shortlisted, interviewed, rejected, hired)."""
    job = _get_job_or_404(job_id)
    _ensure_can_manage(job, user)

    rows = execute_raw_sql("""
        UPDATE applications SET status = :status, updated_at = CURRENT_TIMESTAMP
        WHERE id = :aid AND job_id = :jid
        RETURNING id, job_id, candidate_id, resume_id, cover_letter, status, applied_at
    """, {"status": update.status.value, "aid": application_id, "jid": job_id})

    if not rows:
        raise HTTPException(status_code=404, detail="Application not found")

    logger.info("Application %s moved to %s", application_id, update.status.value)
    return ApplicationResponse(**rows[0], job_title=job["title"], company_name=job["company_name"])
