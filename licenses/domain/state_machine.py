"""
License state machine.

Derives the effective status of a license from its stored status, its
subscription dates and the current time. Evaluation is a pure function:
it never touches storage and gives the same answer for the same inputs.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.domain.value_objects import EffectiveStatus, LicenseStatus
from licenses.domain.license import License
from licenses.domain.subscription import Subscription

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class LicenseStatusResult:
    """Outcome of evaluating a license at a point in time."""

    valid: bool
    status: EffectiveStatus
    message: str
    expires_at: Optional[datetime] = None
    grace_period_end: Optional[datetime] = None
    days_remaining: int = 0

    def invalidated(self, message: str) -> "LicenseStatusResult":
        """Copy of this result marked invalid with a new message."""
        return LicenseStatusResult(
            valid=False,
            status=self.status,
            message=message,
            expires_at=self.expires_at,
            grace_period_end=self.grace_period_end,
            days_remaining=self.days_remaining,
        )

    def changes_at(self) -> Optional[datetime]:
        """
        Moment this evaluation stops being accurate.

        Active and grace period results change when daysRemaining ticks
        down and again when their deadline passes; other results only
        change through a write.
        """
        if self.status == EffectiveStatus.ACTIVE:
            deadline = self.expires_at
        elif self.status == EffectiveStatus.GRACE_PERIOD:
            deadline = self.grace_period_end
        else:
            return None
        return deadline - (self.days_remaining - 1) * ONE_DAY

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "status": self.status.value,
            "message": self.message,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "gracePeriodEnd": self.grace_period_end.isoformat() if self.grace_period_end else None,
            "daysRemaining": self.days_remaining,
        }


def days_until(moment: datetime, now: datetime) -> int:
    """Whole days from now until moment, rounded up."""
    return math.ceil((moment - now) / ONE_DAY)


class LicenseStateMachine:
    """
    Domain service evaluating license status.

    Rules, first match wins:
    1. no license: not_found
    2. revoked or suspended: that status
    3. before the end date: active
    4. before the end of the grace window: grace_period
    5. otherwise: expired
    """

    @staticmethod
    def evaluate(
        license: Optional[License],
        subscription: Optional[Subscription],
        now: datetime,
    ) -> LicenseStatusResult:
        """
        Evaluate a license at the given time.

        Args:
            license: License entity, or None if the key matched nothing
            subscription: The license's current subscription, if any
            now: Evaluation time

        Returns:
            LicenseStatusResult
        """
        if license is None:
            return LicenseStatusResult(
                valid=False,
                status=EffectiveStatus.NOT_FOUND,
                message="License key not found",
            )

        expires_at = subscription.end_date if subscription else license.end_date
        grace_period_end = subscription.grace_period_end if subscription else None

        if license.status == LicenseStatus.REVOKED:
            return LicenseStatusResult(
                valid=False,
                status=EffectiveStatus.REVOKED,
                message="License has been revoked",
                expires_at=expires_at,
                grace_period_end=grace_period_end,
            )
        if license.status == LicenseStatus.SUSPENDED:
            return LicenseStatusResult(
                valid=False,
                status=EffectiveStatus.SUSPENDED,
                message="License is currently suspended",
                expires_at=expires_at,
                grace_period_end=grace_period_end,
            )

        if now < expires_at:
            days_remaining = days_until(expires_at, now)
            return LicenseStatusResult(
                valid=True,
                status=EffectiveStatus.ACTIVE,
                message=f"License is valid. {days_remaining} days remaining.",
                expires_at=expires_at,
                grace_period_end=grace_period_end,
                days_remaining=days_remaining,
            )

        if grace_period_end is not None and now < grace_period_end:
            days_remaining = days_until(grace_period_end, now)
            return LicenseStatusResult(
                valid=True,
                status=EffectiveStatus.GRACE_PERIOD,
                message=(
                    f"License subscription has expired. Grace period ends in "
                    f"{days_remaining} days."
                ),
                expires_at=expires_at,
                grace_period_end=grace_period_end,
                days_remaining=days_remaining,
            )

        return LicenseStatusResult(
            valid=False,
            status=EffectiveStatus.EXPIRED,
            message=(
                "License subscription has expired. "
                "Please contact administrator to renew your subscription."
            ),
            expires_at=expires_at,
            grace_period_end=grace_period_end,
        )
