from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Float, Integer, String
from clubero.database import Base

FREE_TRANSACTION_ID = "none"


def utcnow():
    return datetime.now(timezone.utc)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(String, unique=True, index=True, nullable=False)  # Stripe PaymentIntent ID
    amount = Column(Float, nullable=False)             # major units
    customer_email = Column(String, index=True)
    club_id = Column(String, index=True)
    club_name = Column(String)
    payment_status = Column(String)
    paid_at = Column(DateTime(timezone=True), default=utcnow)


class Membership(Base):
    __tablename__ = "membership"

    id = Column(Integer, primary_key=True, autoincrement=True)
    club_id = Column(String, index=True, nullable=False)
    club_name = Column(String)
    email = Column(String, index=True, nullable=False)
    transaction_id = Column(String, index=True)        # "none" for free clubs
    membership_fee = Column(Float, default=0)
    status = Column(String, default="active")          # active
    joined_at = Column(DateTime(timezone=True), default=utcnow)
