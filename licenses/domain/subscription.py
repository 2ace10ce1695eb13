"""
Subscription domain entity.

A subscription tracks the paid period of a license and its optional
grace window.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from core.domain.value_objects import SubscriptionStatus


def add_years(moment: datetime, years: int = 1) -> datetime:
    """Shift a datetime by whole years, clamping 29 February to the 28th."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


def grace_period_end_for(end_date: datetime, grace_days: int) -> Optional[datetime]:
    """End of the grace window, or None when no grace window is configured."""
    if grace_days <= 0:
        return None
    return end_date + timedelta(days=grace_days)


@dataclass(frozen=True)
class Subscription:
    """
    Subscription domain entity.

    Invariant: grace_period_end, when set, is after end_date.
    """

    id: uuid.UUID
    license_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    annual_fee: Decimal
    status: SubscriptionStatus
    created_at: datetime
    updated_at: datetime
    grace_period_end: Optional[datetime] = None

    def __post_init__(self):
        """Validate subscription entity."""
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        if self.grace_period_end is not None and self.grace_period_end <= self.end_date:
            raise ValueError("Grace period must end after the subscription end date")

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        start_date: datetime,
        end_date: datetime,
        annual_fee: Decimal,
        grace_days: int = 0,
        subscription_id: Optional[uuid.UUID] = None,
    ) -> "Subscription":
        """
        Create a new active Subscription.

        Args:
            license_id: Owning license UUID
            start_date: Start of the paid period
            end_date: End of the paid period
            annual_fee: Yearly fee
            grace_days: Length of the grace window in days (0 for none)
            subscription_id: Optional UUID (generated if not provided)

        Returns:
            Subscription entity instance
        """
        now = timezone.now()
        return cls(
            id=subscription_id or uuid.uuid4(),
            license_id=license_id,
            start_date=start_date,
            end_date=end_date,
            annual_fee=annual_fee,
            status=SubscriptionStatus.ACTIVE,
            grace_period_end=grace_period_end_for(end_date, grace_days),
            created_at=now,
            updated_at=now,
        )

    def renew(self, extend_from_now: bool, now: datetime, grace_days: int = 0) -> "Subscription":
        """
        Extend the subscription by exactly one year.

        Args:
            extend_from_now: Count the year from now instead of the current end date
            now: Current time
            grace_days: Length of the grace window in days

        Returns:
            Renewed subscription
        """
        base = now if extend_from_now else self.end_date
        end_date = add_years(base)
        return replace(
            self,
            end_date=end_date,
            status=SubscriptionStatus.ACTIVE,
            grace_period_end=grace_period_end_for(end_date, grace_days),
            updated_at=now,
        )

    def mark_expired(self) -> "Subscription":
        return replace(self, status=SubscriptionStatus.EXPIRED, updated_at=timezone.now())

    def mark_grace_period(self) -> "Subscription":
        return replace(self, status=SubscriptionStatus.GRACE_PERIOD, updated_at=timezone.now())

    def reschedule(self, end_date: datetime, grace_days: int = 0) -> "Subscription":
        """Move the end of the paid period after an admin date edit; the sweep re-evaluates it."""
        return replace(
            self,
            end_date=end_date,
            status=SubscriptionStatus.ACTIVE,
            grace_period_end=grace_period_end_for(end_date, grace_days),
            updated_at=timezone.now(),
        )

    def with_annual_fee(self, annual_fee: Decimal) -> "Subscription":
        return replace(self, annual_fee=annual_fee, updated_at=timezone.now())
