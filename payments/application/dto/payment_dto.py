"""
Payment DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from payments.domain.payment import Payment
from payments.ports.payment_repository import PaymentStatistics


@dataclass
class PaymentDTO:
    """DTO for payment information."""

    id: uuid.UUID
    license_id: uuid.UUID
    amount: Decimal
    payment_type: str
    is_annual_subscription: bool
    additional_users: Optional[int]
    payment_date: datetime
    created_at: datetime

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentDTO":
        return cls(
            id=payment.id,
            license_id=payment.license_id,
            amount=payment.amount,
            payment_type=payment.payment_type.value,
            is_annual_subscription=payment.is_annual_subscription,
            additional_users=payment.additional_users,
            payment_date=payment.payment_date,
            created_at=payment.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "licenseId": str(self.license_id),
            "amount": str(self.amount),
            "paymentType": self.payment_type,
            "isAnnualSubscription": self.is_annual_subscription,
            "additionalUsers": self.additional_users,
            "paymentDate": self.payment_date.isoformat(),
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class PaymentStatisticsDTO:
    """DTO for revenue statistics."""

    statistics: PaymentStatistics

    def to_dict(self) -> dict:
        stats = self.statistics
        return {
            "totalPayments": stats.total_payments,
            "totalAmount": str(stats.total_amount),
            "averageAmount": str(stats.average_amount),
            "annualSubscriptionPayments": stats.annual_subscription_payments,
            "oneOffPayments": stats.one_off_payments,
            "totalAnnualAmount": str(stats.total_annual_amount),
            "totalOneOffAmount": str(stats.total_one_off_amount),
        }
