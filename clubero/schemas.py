from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def to_minor_units(fee) -> int:
    """Convert a fee in major units ("250", 250, 12.5) to a non-negative integer of minor units."""
    try:
        minor = Decimal(str(fee).strip()) * 100
    except InvalidOperation:
        raise ValueError("membershipFee must be a number")
    if not minor.is_finite():
        raise ValueError("membershipFee must be a finite number")
    if minor < 0 or minor != minor.to_integral_value():
        raise ValueError("membershipFee must convert to a non-negative whole amount of minor units")
    return int(minor)


class CheckoutRequest(CamelModel):
    club_id: str
    club_name: str
    membership_fee: Union[str, int, float]
    email: EmailStr

    @field_validator("club_id", "club_name")
    @classmethod
    def not_blank(cls, value):
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("membership_fee")
    @classmethod
    def fee_in_minor_units(cls, value):
        to_minor_units(value)
        return value

    @property
    def amount_minor(self) -> int:
        return to_minor_units(self.membership_fee)


class CheckoutResponse(CamelModel):
    url: str


class FreeMembershipRequest(CamelModel):
    club_id: str
    club_name: str
    email: EmailStr


class PaymentOut(CamelModel):
    id: int
    amount: float
    customer_email: Optional[str] = None
    club_id: Optional[str] = None
    club_name: Optional[str] = None
    transaction_id: str
    payment_status: Optional[str] = None
    paid_at: Optional[datetime] = None


class MembershipOut(CamelModel):
    id: int
    club_id: str
    club_name: Optional[str] = None
    email: str
    transaction_id: Optional[str] = None
    membership_fee: float
    status: str
    joined_at: Optional[datetime] = None


class ReconciliationResult(CamelModel):
    success: bool
    message: str
    already_processed: bool = False
    transaction_id: Optional[str] = None
    membership: Optional[MembershipOut] = None
    payment: Optional[PaymentOut] = None


class FreeMembershipResult(CamelModel):
    already_member: bool
    membership: MembershipOut


class RevenueSummary(CamelModel):
    club_id: str
    total_revenue: float
    payment_count: int
