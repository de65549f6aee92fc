"""
Payment Routes

GET /payments/my-payments - Current user's payments
GET /payments/stats - Counts per status and revenue per currency (admin)
GET /payments - All payments (admin)
POST /payments - Record a pending payment for a user (admin)
GET /payments/{payment_id} - Single payment (payer or admin)
PATCH /payments/{payment_id}/status - Set status (admin)
POST /payments/{payment_id}/refund - Refund a completed payment (admin)

No payment gateway is involved; rows are records kept by admins.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError

from jobportal.db.postgres import execute_raw_sql
from jobportal.core.auth import authorize, protect
from jobportal.core.validation import CURRENCIES, FormValidator, one_of, raise_for_errors
from jobportal.schemas.schemas import (
    PaymentCreate, PaymentPurpose, PaymentResponse, PaymentStats, PaymentStatus, PaymentStatusUpdate
)
from jobportal.services.stats import amounts_by_currency, status_breakdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])

PAYMENT_SQL = """
    SELECT p.id, p.user_id, u.email AS user_email, p.amount, p.currency, p.purpose,
           p.status, p.reference, p.created_at
    FROM payments p
    JOIN users u ON p.user_id = u.id
"""


def new_payment_reference() -> str:
    return f"PAY-{uuid.uuid4().hex[:12].upper()}"


def _to_response(row: dict) -> PaymentResponse:
    return PaymentResponse(**{**row, "amount": float(row["amount"])})


def _get_payment_or_404(payment_id: int) -> dict:
    rows = execute_raw_sql(PAYMENT_SQL + " WHERE p.id = :pid", {"pid": payment_id})
    if not rows:
        raise HTTPException(status_code=404, detail="Payment not found")
    return rows[0]


def _set_status(payment: dict, status: str) -> PaymentResponse:
    execute_raw_sql(
        "UPDATE payments SET status = :status WHERE id = :pid RETURNING id",
        {"status": status, "pid": payment["id"]}
    )
    logger.info("Payment %s moved from %s to %s", payment["id"], payment["status"], status)
    return _to_response({**payment, "status": status})


@router.get("/my-payments", response_model=List[PaymentResponse])
async def my_payments(status: Optional[PaymentStatus] = Query(None), user: dict = Depends(protect)):
    sql = PAYMENT_SQL + " WHERE p.user_id = :uid"
    params = {"uid": user["id"]}
    if status:
        sql += " AND p.status = :status"
        params["status"] = status.value
    sql += " ORDER BY p.created_at DESC"
    return [_to_response(r) for r in execute_raw_sql(sql, params)]


@router.get("/stats", response_model=PaymentStats)
async def payment_stats(user: dict = Depends(authorize("admin"))):
    rows = execute_raw_sql("""
        SELECT status, currency, COUNT(*) AS count, COALESCE(SUM(amount), 0) AS amount
        FROM payments
        GROUP BY status, currency
    """)
    by_status = status_breakdown(rows, [s.value for s in PaymentStatus])
    return PaymentStats(
        total=sum(by_status.values()),
        by_status=by_status,
        revenue=amounts_by_currency(rows, PaymentStatus.completed.value),
        refunded=amounts_by_currency(rows, PaymentStatus.refunded.value)
    )


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    status: Optional[PaymentStatus] = Query(None),
    purpose: Optional[PaymentPurpose] = Query(None),
    user: dict = Depends(authorize("admin"))
):
    sql = PAYMENT_SQL + " WHERE TRUE"
    params = {}
    if status:
        sql += " AND p.status = :status"
        params["status"] = status.value
    if purpose:
        sql += " AND p.purpose = :purpose"
        params["purpose"] = purpose.value
    sql += " ORDER BY p.created_at DESC"
    return [_to_response(r) for r in execute_raw_sql(sql, params)]


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(payment: PaymentCreate, user: dict = Depends(authorize("admin"))):
    """Record a pending payment. A reference is generated when none is given."""
    raise_for_errors(FormValidator().field("currency", one_of(CURRENCIES, "Currency")), payment.model_dump())

    if not execute_raw_sql("SELECT id FROM users WHERE id = :uid", {"uid": payment.user_id}):
        raise HTTPException(status_code=404, detail="User not found")

    try:
        rows = execute_raw_sql("""
            INSERT INTO payments (user_id, amount, currency, purpose, status, reference)
            VALUES (:uid, :amount, :currency, :purpose, 'pending', :reference)
            RETURNING id
        """, {
            "uid": payment.user_id, "amount": payment.amount, "currency": payment.currency,
            "purpose": payment.purpose.value, "reference": payment.reference or new_payment_reference()
        })
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Payment reference already exists")

    return _to_response(_get_payment_or_404(rows[0]["id"]))


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: int, user: dict = Depends(protect)):
    payment = _get_payment_or_404(payment_id)
    if user["role"] != "admin" and payment["user_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to view this payment")
    return _to_response(payment)


@router.patch("/{payment_id}/status", response_model=PaymentResponse)
async def update_payment_status(
    payment_id: int,
    update: PaymentStatusUpdate,
    user: dict = Depends(authorize("admin"))
):
    """Set a payment's status. Refunds go through POST /payments/{id}/refund."""
    payment = _get_payment_or_404(payment_id)
    if payment["status"] == PaymentStatus.refunded.value:
        raise HTTPException(status_code=400, detail="Refunded payments cannot change status")
    if update.status == PaymentStatus.refunded:
        raise HTTPException(status_code=400, detail="Use the refund endpoint to refund a payment")
    return _set_status(payment, update.status.value)


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(payment_id: int, user: dict = Depends(authorize("admin"))):
    """Refund the full amount of a completed payment."""
    payment = _get_payment_or_404(payment_id)
    if payment["status"] != PaymentStatus.completed.value:
        raise HTTPException(status_code=400, detail="Only completed payments can be refunded")
    return _set_status(payment, PaymentStatus.refunded.value)
