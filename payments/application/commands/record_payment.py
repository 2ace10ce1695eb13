"""
RecordPaymentCommand.

Command to record a payment against a license.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core.domain.value_objects import PaymentType


@dataclass
class RecordPaymentCommand:
    """Command to record a payment."""

    license_id: uuid.UUID
    amount: Decimal
    payment_type: PaymentType
    payment_date: Optional[datetime] = None
    additional_users: Optional[int] = None
    actor: str = "system"
