from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from clubero.auth import Caller, ensure_can_view, require_role, verify_token
from clubero.database import get_db
from clubero.models import Membership, Payment
from clubero.reconciliation import PaymentReconciler, join_free
from clubero.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    FreeMembershipRequest,
    FreeMembershipResult,
    MembershipOut,
    PaymentOut,
    ReconciliationResult,
    RevenueSummary,
)
from clubero.stripe_service import get_gateway

router = APIRouter()


def get_reconciler(db: Session = Depends(get_db), gateway=Depends(get_gateway)):
    return PaymentReconciler(db, gateway)


@router.post("/create-checkout-session", response_model=CheckoutResponse)
def create_checkout_session(
    request: CheckoutRequest,
    caller: Caller = Depends(verify_token),
    reconciler: PaymentReconciler = Depends(get_reconciler),
):
    ensure_can_view(caller, request.email)
    return CheckoutResponse(url=reconciler.initiate(request))


@router.patch("/payment-success", response_model=ReconciliationResult)
def payment_success(
    session_id: Optional[str] = Query(None),
    caller: Caller = Depends(verify_token),
    reconciler: PaymentReconciler = Depends(get_reconciler),
):
    return reconciler.confirm(session_id)


@router.get("/payments", response_model=Optional[PaymentOut])
def get_payment(
    email: str,
    club_id: str = Query(..., alias="clubId"),
    caller: Caller = Depends(verify_token),
    db: Session = Depends(get_db),
):
    ensure_can_view(caller, email)
    return (
        db.query(Payment)
        .filter_by(customer_email=email, club_id=club_id)
        .order_by(Payment.paid_at.desc())
        .first()
    )


@router.get("/payments/history", response_model=List[PaymentOut])
def payment_history(
    email: str,
    caller: Caller = Depends(verify_token),
    db: Session = Depends(get_db),
):
    ensure_can_view(caller, email)
    return (
        db.query(Payment)
        .filter_by(customer_email=email)
        .order_by(Payment.paid_at.desc())
        .all()
    )


@router.get("/payments/revenue", response_model=RevenueSummary)
def club_revenue(
    club_id: str = Query(..., alias="clubId"),
    caller: Caller = Depends(require_role("manager", "admin")),
    db: Session = Depends(get_db),
):
    total, count = (
        db.query(func.coalesce(func.sum(Payment.amount), 0), func.count(Payment.id))
        .filter(Payment.club_id == club_id, Payment.payment_status == "paid")
        .one()
    )
    return RevenueSummary(club_id=club_id, total_revenue=total, payment_count=count)


@router.post("/memberships/free", response_model=FreeMembershipResult)
def join_free_club(
    request: FreeMembershipRequest,
    caller: Caller = Depends(verify_token),
    db: Session = Depends(get_db),
):
    ensure_can_view(caller, request.email)
    return join_free(db, request.club_id, request.club_name, request.email)


@router.get("/memberships", response_model=List[MembershipOut])
def list_memberships(
    email: str,
    caller: Caller = Depends(verify_token),
    db: Session = Depends(get_db),
):
    ensure_can_view(caller, email)
    return (
        db.query(Membership)
        .filter_by(email=email)
        .order_by(Membership.joined_at.desc())
        .all()
    )
