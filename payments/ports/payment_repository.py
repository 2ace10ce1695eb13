"""
Payment repository port (interface).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import uuid

from core.domain.pagination import Page, PageRequest
from payments.domain.payment import Payment


@dataclass(frozen=True)
class PaymentStatistics:
    """Revenue totals over a set of payments."""

    total_payments: int
    total_amount: Decimal
    average_amount: Decimal
    annual_subscription_payments: int
    one_off_payments: int
    total_annual_amount: Decimal
    total_one_off_amount: Decimal


@dataclass(frozen=True)
class RevenuePeriod:
    """Payments of one calendar month."""

    period: str
    amount: Decimal
    count: int
    initial_payments: Decimal
    subscription_payments: Decimal


class PaymentRepository(ABC):
    """Abstract repository for Payment entities."""

    @abstractmethod
    async def save(self, payment: Payment) -> Payment:
        """
        Save a new payment.

        Args:
            payment: Payment entity to save

        Returns:
            Saved payment entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, payment_id: uuid.UUID) -> Optional[Payment]:
        pass

    @abstractmethod
    async def has_initial_payment(self, license_id: uuid.UUID) -> bool:
        """
        Check whether a license has an initial payment.

        Args:
            license_id: License UUID

        Returns:
            True if an initial payment exists
        """
        pass

    @abstractmethod
    async def list(
        self,
        page_request: PageRequest,
        license_id: Optional[uuid.UUID] = None,
        payment_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Page[Payment]:
        pass

    @abstractmethod
    async def statistics(
        self,
        license_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> PaymentStatistics:
        """
        Aggregate payment totals.

        Args:
            license_id: Optional license filter
            start_date: Optional inclusive lower bound on payment date
            end_date: Optional inclusive upper bound on payment date

        Returns:
            PaymentStatistics
        """
        pass

    @abstractmethod
    async def revenue_by_month(
        self, start_date: datetime, end_date: datetime
    ) -> List[RevenuePeriod]:
        """
        Payment totals grouped by calendar month of the payment date.

        Annual payments count as subscription payments; initial and user
        payments count as initial payments.

        Args:
            start_date: Inclusive lower bound on payment date
            end_date: Inclusive upper bound on payment date

        Returns:
            RevenuePeriod list, oldest month first
        """
        pass
