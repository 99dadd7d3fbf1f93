"""Checkout-session creation and idempotent membership/payment reconciliation.

A confirmed Stripe payment produces exactly one ``Payment`` row and one
``Membership`` row, keyed by the PaymentIntent id (the transaction id). Both
rows are written in one transaction, and ``payments.transaction_id`` carries a
unique index, so a concurrent duplicate confirmation loses at commit time and
is reported as already processed.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clubero.errors import InvalidRequest, PersistenceError
from clubero.models import FREE_TRANSACTION_ID, Membership, Payment
from clubero.schemas import (
    CheckoutRequest,
    FreeMembershipResult,
    MembershipOut,
    PaymentOut,
    ReconciliationResult,
)
from clubero.stripe_service import CheckoutSession, StripeGateway

logger = logging.getLogger(__name__)


class PaymentReconciler:

    def __init__(self, db: Session, gateway: StripeGateway):
        self.db = db
        self.gateway = gateway

    def initiate(self, request: CheckoutRequest) -> str:
        """Open a checkout session for the club fee and return its redirect URL."""
        session = self.gateway.create_checkout_session(
            club_id=request.club_id,
            club_name=request.club_name,
            amount=request.amount_minor,
            email=request.email,
        )
        logger.info("Checkout session %s created for club %s", session.id, request.club_id)
        return session.url

    def confirm(self, session_id) -> ReconciliationResult:
        if not session_id:
            raise InvalidRequest("session_id is required")
        session = self.gateway.retrieve_session(session_id)
        return self.reconcile(session)

    def reconcile(self, session: CheckoutSession) -> ReconciliationResult:
        transaction_id = session.payment_intent

        existing = self._find_payment(transaction_id) if transaction_id else None
        if existing is not None:
            logger.info("Transaction %s already reconciled", transaction_id)
            return self._already_processed(transaction_id)

        if not session.is_paid or not transaction_id:
            logger.info("Session %s not paid (status=%s)", session.id, session.payment_status)
            return ReconciliationResult(
                success=False,
                message="Payment not completed",
                transaction_id=transaction_id,
            )

        now = datetime.now(timezone.utc)
        amount = session.amount_total / 100
        email = session.email
        club_id = session.metadata.get("clubId")
        club_name = session.metadata.get("clubName")
        if not club_id or not email:
            raise InvalidRequest(f"Checkout session {session.id} is missing club or payer details")

        membership = Membership(
            club_id=club_id,
            club_name=club_name,
            email=email,
            transaction_id=transaction_id,
            membership_fee=amount,
            status="active",
            joined_at=now,
        )
        payment = Payment(
            amount=amount,
            customer_email=email,
            club_id=club_id,
            club_name=club_name,
            transaction_id=transaction_id,
            payment_status=session.payment_status,
            paid_at=now,
        )

        try:
            self.db.add_all([membership, payment])
            self.db.commit()
            self.db.refresh(membership)
            self.db.refresh(payment)
        except IntegrityError:
            # Another confirmation for this transaction committed first
            self.db.rollback()
            if self._find_payment(transaction_id) is None:
                logger.error("Integrity error persisting transaction %s", transaction_id)
                raise PersistenceError()
            logger.info("Transaction %s reconciled concurrently", transaction_id)
            return self._already_processed(transaction_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Could not persist transaction %s: %s", transaction_id, exc)
            raise PersistenceError() from exc

        logger.info("Membership %s granted to %s for club %s", membership.id, email, club_id)
        return ReconciliationResult(
            success=True,
            message="Payment confirmed and membership activated",
            transaction_id=transaction_id,
            membership=MembershipOut.model_validate(membership),
            payment=PaymentOut.model_validate(payment),
        )

    def _find_payment(self, transaction_id):
        try:
            return self.db.query(Payment).filter_by(transaction_id=transaction_id).first()
        except SQLAlchemyError as exc:
            logger.error("Payment lookup failed for %s: %s", transaction_id, exc)
            raise PersistenceError() from exc

    def _already_processed(self, transaction_id):
        return ReconciliationResult(
            success=True,
            message="Payment already processed",
            already_processed=True,
            transaction_id=transaction_id,
        )


def join_free(db: Session, club_id: str, club_name: str, email: str) -> FreeMembershipResult:
    """Grant a free membership; an existing active one is returned as-is."""
    try:
        existing = (
            db.query(Membership)
            .filter_by(club_id=club_id, email=email, status="active")
            .first()
        )
        if existing:
            return FreeMembershipResult(
                already_member=True,
                membership=MembershipOut.model_validate(existing),
            )

        membership = Membership(
            club_id=club_id,
            club_name=club_name,
            email=email,
            transaction_id=FREE_TRANSACTION_ID,
            membership_fee=0,
            status="active",
        )
        db.add(membership)
        db.commit()
        db.refresh(membership)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Could not save free membership for club %s: %s", club_id, exc)
        raise PersistenceError("Could not save membership") from exc

    logger.info("Free membership %s granted to %s for club %s", membership.id, email, club_id)
    return FreeMembershipResult(
        already_member=False,
        membership=MembershipOut.model_validate(membership),
    )
