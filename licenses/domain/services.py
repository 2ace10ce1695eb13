"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from django.utils import timezone

from core.domain.clock import Clock, system_clock
from core.domain.exceptions import (
    ConflictError,
    InvalidInputError,
    LicenseNotFoundError,
    SeatLimitExceededError,
)
from licenses.domain.license_key import generate_license_key
from licenses.domain.state_machine import LicenseStateMachine
from licenses.domain.subscription import add_years
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)

MAX_KEY_ATTEMPTS = 10


class LicenseKeyGenerator:
    """Domain service for license key generation."""

    @staticmethod
    async def generate_unique(repository: LicenseRepository) -> str:
        """
        Generate a license key not used by any stored license.

        Args:
            repository: License repository used for the collision check

        Returns:
            New license key

        Raises:
            ConflictError: If every attempt collided
        """
        for attempt in range(1, MAX_KEY_ATTEMPTS + 1):
            key = generate_license_key()
            if not await repository.exists_by_key(key):
                return key
            logger.warning("License key collision", extra={"attempt": attempt})
        raise ConflictError(
            f"Failed to generate unique license key after {MAX_KEY_ATTEMPTS} attempts",
            code="KEY_GENERATION_FAILED",
        )


def end_of_day(moment: datetime) -> datetime:
    """Last microsecond of the moment's calendar day, in its own timezone."""
    return datetime.combine(moment.date(), time.max, tzinfo=moment.tzinfo)


class LicensePeriod:
    """Domain service computing licensed periods."""

    @staticmethod
    def default_end_date(start_date: datetime, is_free_trial: bool, free_trial_days: int) -> datetime:
        """
        End of the first licensed period.

        Trials cover ``free_trial_days`` calendar days including the start
        day; paid licenses cover one year less a day. Both end at the last
        instant of their final day.

        Args:
            start_date: Start of the period
            is_free_trial: Whether the license is a trial
            free_trial_days: Length of a trial in days

        Returns:
            End of the period
        """
        local_start = timezone.localtime(start_date) if timezone.is_aware(start_date) else start_date
        if is_free_trial:
            last_day = local_start + timedelta(days=free_trial_days - 1)
        else:
            last_day = add_years(local_start) - timedelta(days=1)
        return end_of_day(last_day)

    @staticmethod
    def explicit_end_date(end_date: datetime, start_date: datetime) -> datetime:
        """
        Stretch a caller-supplied end date to the end of its day.

        Raises:
            InvalidInputError: If the result is before the start date
        """
        local_end = timezone.localtime(end_date) if timezone.is_aware(end_date) else end_date
        result = end_of_day(local_end)
        if result < start_date:
            raise InvalidInputError("endDate must not be before startDate")
        return result


@dataclass(frozen=True)
class SeatCountResult:
    """Outcome of a seat counter operation."""

    success: bool
    user_count: int
    user_limit: int
    message: str

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "userCount": self.user_count,
            "userLimit": self.user_limit,
            "message": self.message,
        }


@dataclass(frozen=True)
class UserCreationCheck:
    """Whether the POS may create another user."""

    allowed: bool
    user_count: int
    user_limit: int
    message: str

    def to_dict(self) -> dict:
        return {
            "canCreate": self.allowed,
            "userCount": self.user_count,
            "userLimit": self.user_limit,
            "message": self.message,
        }


class SeatLedger:
    """
    Domain service for the per-license user counter.

    Every mutation is delegated to a single conditional update in the
    repository, so concurrent calls for the same license never lose an
    update and never push the count past the limit.
    """

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        clock: Clock = None,
    ):
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.clock = clock or system_clock

    async def _counts(self, license_id: uuid.UUID):
        counts = await self.license_repository.get_seat_counts(license_id)
        if counts is None:
            raise LicenseNotFoundError()
        return counts

    async def check_user_creation(self, license_id: uuid.UUID) -> UserCreationCheck:
        """
        Check whether another user fits on the license.

        Allowed iff the license is usable (active or in grace) and below
        its user limit.
        """
        license = await self.license_repository.find_by_id(license_id)
        if license is None:
            raise LicenseNotFoundError()
        subscription = await self.subscription_repository.find_current_for_license(license_id)
        result = LicenseStateMachine.evaluate(license, subscription, self.clock.now())

        count, limit = license.user_count, license.user_limit
        if not result.status.is_usable:
            return UserCreationCheck(False, count, limit, result.message)
        if count >= limit:
            return UserCreationCheck(
                False,
                count,
                limit,
                f"User limit reached ({count}/{limit}). "
                "Please contact administrator to increase your user limit.",
            )
        return UserCreationCheck(True, count, limit, f"You can create {limit - count} more user(s).")

    async def increment_user_count(self, license_id: uuid.UUID) -> SeatCountResult:
        """
        Take one seat.

        Raises:
            LicenseNotFoundError: If the license does not exist
            SeatLimitExceededError: If the license is at its limit
        """
        incremented = await self.license_repository.increment_user_count(license_id)
        count, limit = await self._counts(license_id)
        if not incremented:
            raise SeatLimitExceededError(
                f"User limit reached ({count}/{limit}). Cannot create more users."
            )
        logger.info(
            "User count incremented",
            extra={"license_id": str(license_id), "user_count": count, "user_limit": limit},
        )
        return SeatCountResult(
            True, count, limit, f"User created successfully. Current users: {count}/{limit}"
        )

    async def decrement_user_count(self, license_id: uuid.UUID) -> SeatCountResult:
        """Release one seat; succeeds without change when already at zero."""
        decremented = await self.license_repository.decrement_user_count(license_id)
        count, limit = await self._counts(license_id)
        if not decremented:
            return SeatCountResult(True, count, limit, "User count is already at 0.")
        logger.info(
            "User count decremented",
            extra={"license_id": str(license_id), "user_count": count, "user_limit": limit},
        )
        return SeatCountResult(
            True, count, limit, f"User deleted successfully. Current users: {count}/{limit}"
        )

    async def sync_user_count(self, license_id: uuid.UUID, actual_user_count: int) -> SeatCountResult:
        """Overwrite the counter with the POS's own count, clamped to [0, limit]."""
        if not await self.license_repository.set_user_count(license_id, actual_user_count):
            raise LicenseNotFoundError()
        count, limit = await self._counts(license_id)
        if count != actual_user_count:
            logger.warning(
                "Reported user count clamped",
                extra={
                    "license_id": str(license_id),
                    "reported": actual_user_count,
                    "user_count": count,
                    "user_limit": limit,
                },
            )
        return SeatCountResult(
            True, count, limit, f"User count synchronized. Current users: {count}/{limit}"
        )

    async def increase_user_limit(self, license_id: uuid.UUID, additional_users: int) -> SeatCountResult:
        """
        Raise the user limit.

        Raises:
            InvalidInputError: If additional_users is not positive
            LicenseNotFoundError: If the license does not exist
        """
        if additional_users < 1:
            raise InvalidInputError("additionalUsers must be a positive integer")
        if not await self.license_repository.increase_user_limit(license_id, additional_users):
            raise LicenseNotFoundError()
        count, limit = await self._counts(license_id)
        logger.info(
            "User limit increased",
            extra={"license_id": str(license_id), "additional_users": additional_users, "user_limit": limit},
        )
        return SeatCountResult(
            True, count, limit, f"User limit increased by {additional_users}. New limit: {limit}"
        )
