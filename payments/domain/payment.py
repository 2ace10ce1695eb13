"""
Payment domain entity.

Payments are immutable once recorded.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from core.domain.value_objects import PaymentType


@dataclass(frozen=True)
class Payment:
    """Payment domain entity."""

    id: uuid.UUID
    license_id: uuid.UUID
    amount: Decimal
    payment_type: PaymentType
    payment_date: datetime
    created_at: datetime
    additional_users: Optional[int] = None

    def __post_init__(self):
        """Validate payment entity."""
        if self.amount <= 0:
            raise ValueError("Payment amount must be greater than 0")
        if self.additional_users is not None:
            if self.payment_type != PaymentType.USER:
                raise ValueError("Additional users only apply to user payments")
            if self.additional_users < 1:
                raise ValueError("Additional users must be positive")

    @property
    def is_annual_subscription(self) -> bool:
        return self.payment_type == PaymentType.ANNUAL

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        amount: Decimal,
        payment_type: PaymentType,
        payment_date: Optional[datetime] = None,
        additional_users: Optional[int] = None,
        payment_id: Optional[uuid.UUID] = None,
    ) -> "Payment":
        """
        Create a new Payment.

        Args:
            license_id: License UUID
            amount: Amount paid, greater than zero
            payment_type: initial, annual or user
            payment_date: When the payment was made (defaults to now)
            additional_users: Seats bought by a user payment
            payment_id: Optional UUID (generated if not provided)

        Returns:
            Payment entity instance
        """
        now = timezone.now()
        return cls(
            id=payment_id or uuid.uuid4(),
            license_id=license_id,
            amount=amount,
            payment_type=payment_type,
            payment_date=payment_date or now,
            additional_users=additional_users,
            created_at=now,
        )
