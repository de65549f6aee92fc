"""
Referral Routes

POST /referrals - Refer someone (by email) for an active job
GET /referrals/my-referrals - Referrals made by the current user
GET /referrals/stats - Referral counts per status (own, or all for admins)
GET /referrals - All referrals (admin)
PATCH /referrals/{referral_id}/status - Update status (referrer or admin)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError

from jobportal.db.postgres import execute_raw_sql
from jobportal.core.auth import authorize, protect
from jobportal.core.validation import FormValidator, Rule, email, name, raise_for_errors, required
from jobportal.schemas.schemas import (
    ReferralCreate, ReferralResponse, ReferralStats, ReferralStatus, ReferralStatusUpdate
)
from jobportal.services.stats import status_breakdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/referrals", tags=["Referrals"])

ALREADY_REFERRED = "This person has already been referred for this job"

REFERRAL_SQL = """
    SELECT r.id, r.referrer_id, u.first_name || ' ' || u.last_name AS referrer_name,
           r.job_id, j.title AS job_title, c.name AS company_name,
           r.referred_email, r.referred_name, r.status, r.created_at
    FROM referrals r
    JOIN users u ON r.referrer_id = u.id
    JOIN jobs j ON r.job_id = j.id
    JOIN companies c ON j.company_id = c.id
"""


def create_referral_validator() -> FormValidator:
    return (
        FormValidator()
        .field("referred_email", Rule(required, ("Referred email",)), email)
        .field("referred_name", name)
    )


def _get_referral_or_404(referral_id: int) -> dict:
    rows = execute_raw_sql(REFERRAL_SQL + " WHERE r.id = :rid", {"rid": referral_id})
    if not rows:
        raise HTTPException(status_code=404, detail="Referral not found")
    return rows[0]


@router.post("", response_model=ReferralResponse, status_code=201)
async def create_referral(referral: ReferralCreate, user: dict = Depends(protect)):
    """Refer a friend for an open job. Each email can be referred once per job."""
    raise_for_errors(create_referral_validator(), referral.model_dump())

    referred_email = referral.referred_email.strip().lower()
    if referred_email == user["email"].lower():
        raise HTTPException(status_code=400, detail="You cannot refer yourself")

    job = execute_raw_sql(
        "SELECT id FROM jobs WHERE id = :jid AND is_active = TRUE AND status = 'active'",
        {"jid": referral.job_id}
    )
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    existing = execute_raw_sql(
        "SELECT id FROM referrals WHERE job_id = :jid AND referred_email = :email",
        {"jid": referral.job_id, "email": referred_email}
    )
    if existing:
        raise HTTPException(status_code=400, detail=ALREADY_REFERRED)

    try:
        rows = execute_raw_sql("""
            INSERT INTO referrals (referrer_id, job_id, referred_email, referred_name, status)
            VALUES (:uid, :jid, :email, :name, 'pending')
            RETURNING id
        """, {
            "uid": user["id"], "jid": referral.job_id, "email": referred_email,
            "name": (referral.referred_name or "").strip() or None
        })
    except IntegrityError:
        raise HTTPException(status_code=400, detail=ALREADY_REFERRED)

    logger.info("Referral %s created by user %s for job %s", rows[0]["id"], user["id"], referral.job_id)
    return ReferralResponse(**_get_referral_or_404(rows[0]["id"]))


@router.get("/my-referrals", response_model=List[ReferralResponse])
async def my_referrals(status: Optional[ReferralStatus] = Query(None), user: dict = Depends(protect)):
    sql = REFERRAL_SQL + " WHERE r.referrer_id = :uid"
    params = {"uid": user["id"]}
    if status:
        sql += " AND r.status = :status"
        params["status"] = status.value
    sql += " ORDER BY r.created_at DESC"
    return [ReferralResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/stats", response_model=ReferralStats)
async def referral_stats(user: dict = Depends(protect)):
    """Counts per status for the current user's referrals; admins see every referral."""
    sql = "SELECT status, COUNT(*) AS count FROM referrals"
    params = {}
    if user["role"] != "admin":
        sql += " WHERE referrer_id = :uid"
        params["uid"] = user["id"]
    sql += " GROUP BY status"

    by_status = status_breakdown(execute_raw_sql(sql, params), [s.value for s in ReferralStatus])
    return ReferralStats(total=sum(by_status.values()), by_status=by_status)


@router.get("", response_model=List[ReferralResponse])
async def list_referrals(
    status: Optional[ReferralStatus] = Query(None),
    job_id: Optional[int] = Query(None),
    user: dict = Depends(authorize("admin"))
):
    sql = REFERRAL_SQL + " WHERE TRUE"
    params = {}
    if status:
        sql += " AND r.status = :status"
        params["status"] = status.value
    if job_id is not None:
        sql += " AND r.job_id = :jid"
        params["jid"] = job_id
    sql += " ORDER BY r.created_at DESC"
    return [ReferralResponse(**r) for r in execute_raw_sql(sql, params)]


@router.patch("/{referral_id}/status", response_model=ReferralResponse)
async def update_referral_status(referral_id: int, update: ReferralStatusUpdate, user: dict = Depends(protect)):
    referral = _get_referral_or_404(referral_id)
    if user["role"] != "admin" and referral["referrer_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this referral")

    execute_raw_sql(
        "UPDATE referrals SET status = :status WHERE id = :rid RETURNING id",
        {"status": update.status.value, "rid": referral_id}
    )
    return ReferralResponse(**{**referral, "status": update.status.value})
