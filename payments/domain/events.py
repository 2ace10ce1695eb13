"""
Payment domain events.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from core.domain.events import DomainEvent


class PaymentRecorded(DomainEvent):
    """Event raised when a payment is recorded against a license."""

    payload_fields = ("license_id", "payment_id", "amount", "payment_type", "additional_users")

    def __init__(
        self,
        license_id: uuid.UUID,
        payment_id: uuid.UUID,
        amount: Decimal,
        payment_type: str,
        additional_users: Optional[int] = None,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize PaymentRecorded event.

        Args:
            license_id: License UUID
            payment_id: Payment UUID
            amount: Amount paid
            payment_type: initial, annual or user
            additional_users: Seats bought, for user payments
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="PaymentRecorded",
        )
        self.license_id = license_id
        self.payment_id = payment_id
        self.amount = amount
        self.payment_type = payment_type
        self.additional_users = additional_users
