"""
Expiration warning job.

Finds licenses whose subscription ends in one of the configured numbers
of days and hands them to the ExpirationNotifier.
"""
import logging
from datetime import timedelta

from django.conf import settings

from core.domain.clock import Clock, system_clock
from core.domain.value_objects import LicenseStatus
from licenses.domain.state_machine import days_until
from licenses.ports.expiration_notifier import ExpirationNotifier, ExpirationWarning
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)


class ExpirationWarningJob:
    """Daily job sending expiration warnings."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        notifier: ExpirationNotifier,
        clock: Clock = None,
        warning_days=None,
    ):
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.notifier = notifier
        self.clock = clock or system_clock
        self.warning_days = tuple(warning_days or settings.LICENSE_EXPIRY_WARNING_DAYS)

    async def run(self) -> dict:
        """
        Send warnings for subscriptions ending in exactly N days.

        Returns:
            Dict with ``checked`` and ``notified`` counts
        """
        now = self.clock.now()
        # days_until rounds up, so a subscription ending exactly N days out counts as N
        horizon = now + timedelta(days=max(self.warning_days) + 1)
        subscriptions = await self.subscription_repository.find_ending_between(now, horizon)

        notified = 0
        for subscription in subscriptions:
            remaining = days_until(subscription.end_date, now)
            if remaining not in self.warning_days:
                continue
            license = await self.license_repository.find_by_id(subscription.license_id)
            if not license or license.status != LicenseStatus.ACTIVE:
                continue
            warning = ExpirationWarning(
                license_id=license.id,
                license_key=license.key,
                customer_name=license.customer_name,
                customer_phone=license.customer_phone,
                location_name=license.location_name,
                is_free_trial=license.is_free_trial,
                expires_at=subscription.end_date,
                days_remaining=remaining,
            )
            if await self.notifier.notify(warning):
                notified += 1

        logger.info(
            "Expiration warnings sent",
            extra={"checked": len(subscriptions), "notified": notified},
        )
        return {"checked": len(subscriptions), "notified": notified}
