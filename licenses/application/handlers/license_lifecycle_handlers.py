"""
License lifecycle handlers.

Handlers for admin status transitions, license edits and subscription renewal.
"""
import logging

from django.conf import settings

from core.domain.clock import Clock, system_clock
from core.domain.exceptions import InvalidInputError, LicenseNotFoundError
from core.infrastructure.events import event_bus
from licenses.application.commands.change_license_status import (
    ChangeLicenseStatusCommand,
    LicenseStatusAction,
)
from licenses.application.commands.renew_subscription import RenewSubscriptionCommand
from licenses.application.commands.update_license import UpdateLicenseCommand
from licenses.application.dto.license_dto import LicenseDTO
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.events import LicenseStatusChanged, LicenseUpdated, SubscriptionRenewed
from licenses.domain.subscription import Subscription, add_years
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)


class ChangeLicenseStatusHandler:
    """Handler for ChangeLicenseStatusCommand."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repositories."""
        self.license_repository = license_repository

    async def handle(self, command: ChangeLicenseStatusCommand) -> LicenseDTO:
        """
        Handle change license status command.

        Args:
            command: ChangeLicenseStatusCommand

        Returns:
            LicenseDTO after the transition

        Raises:
            LicenseNotFoundError: If license not found
            InvalidLicenseStatusError: If the transition is not allowed
        """
        license = await self.license_repository.find_by_id(command.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {command.license_id} not found")

        previous = license.status
        if command.action == LicenseStatusAction.REVOKE:
            changed = license.revoke()
        elif command.action == LicenseStatusAction.SUSPEND:
            changed = license.suspend()
        else:
            changed = license.reinstate()

        saved = await self.license_repository.save(changed)
        await LicenseCacheService.invalidate_license_status(saved.key)

        logger.info(
            "License status changed",
            extra={
                "license_id": str(saved.id),
                "previous_status": previous.value,
                "new_status": saved.status.value,
                "actor": command.actor,
            },
        )
        await event_bus.publish(
            LicenseStatusChanged(
                license_id=saved.id,
                previous_status=previous.value,
                new_status=saved.status.value,
            )
        )
        return LicenseDTO.from_entity(saved)


class RenewSubscriptionHandler:
    """Handler for RenewSubscriptionCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        clock: Clock = None,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.clock = clock or system_clock

    async def handle(self, command: RenewSubscriptionCommand) -> LicenseDTO:
        """
        Handle renew subscription command.

        The subscription is extended by one year from its end date, or from
        now when ``extend_from_now`` is set. A license without any
        subscription gets a new one-year subscription.

        Args:
            command: RenewSubscriptionCommand

        Returns:
            LicenseDTO with the renewed subscription

        Raises:
            LicenseNotFoundError: If license not found
        """
        license = await self.license_repository.find_by_id(command.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {command.license_id} not found")

        now = self.clock.now()
        grace_days = settings.LICENSE_GRACE_PERIOD_DAYS
        current = await self.subscription_repository.find_current_for_license(license.id)
        if current:
            renewed = current.renew(command.extend_from_now, now, grace_days)
        else:
            base = now if command.extend_from_now else license.end_date
            renewed = Subscription.create(
                license_id=license.id,
                start_date=base,
                end_date=add_years(base),
                annual_fee=license.annual_price,
                grace_days=grace_days,
            )
        subscription = await self.subscription_repository.save(renewed)
        saved = await self.license_repository.save(license.extend_to(subscription.end_date))
        await LicenseCacheService.invalidate_license_status(saved.key)

        logger.info(
            "Subscription renewed",
            extra={
                "license_id": str(saved.id),
                "subscription_id": str(subscription.id),
                "end_date": subscription.end_date.isoformat(),
                "extend_from_now": command.extend_from_now,
            },
        )
        await event_bus.publish(
            SubscriptionRenewed(
                license_id=saved.id,
                subscription_id=subscription.id,
                new_end_date=subscription.end_date,
            )
        )
        return LicenseDTO.from_entity(saved, [subscription])


class UpdateLicenseHandler:
    """Handler for UpdateLicenseCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository

    async def handle(self, command: UpdateLicenseCommand) -> LicenseDTO:
        """
        Handle update license command.

        A new annual price is also applied to the current subscription, and
        a new end date moves the current subscription's end with it so the
        status evaluation follows the edit.

        Args:
            command: UpdateLicenseCommand

        Returns:
            LicenseDTO with subscriptions

        Raises:
            LicenseNotFoundError: If license not found
            InvalidInputError: If nothing is edited or the dates are inconsistent
        """
        changes = command.changes()
        if not changes:
            raise InvalidInputError("At least one field must be provided")

        license = await self.license_repository.find_by_id(command.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {command.license_id} not found")
        updated = license.update_details(**changes)

        current = await self.subscription_repository.find_current_for_license(license.id)
        if current:
            subscription = current
            if command.end_date is not None:
                if command.end_date < current.start_date:
                    raise InvalidInputError("End date cannot be before the subscription start date")
                subscription = subscription.reschedule(
                    command.end_date, settings.LICENSE_GRACE_PERIOD_DAYS
                )
            if command.annual_price is not None:
                subscription = subscription.with_annual_fee(command.annual_price)
            if subscription is not current:
                await self.subscription_repository.save(subscription)

        saved = await self.license_repository.save(updated)
        await LicenseCacheService.invalidate_license_status(saved.key)

        logger.info(
            "License updated",
            extra={
                "license_id": str(saved.id),
                "fields": sorted(changes),
                "actor": command.actor,
            },
        )
        await event_bus.publish(LicenseUpdated(license_id=saved.id, fields=sorted(changes)))
        subscriptions = await self.subscription_repository.find_by_license(saved.id)
        return LicenseDTO.from_entity(saved, subscriptions)
