"""
GenerateLicenseHandler.

Handles the generate license command: issues the key, the license, its
first subscription and, for paid licenses, the initial payment.
"""

import logging
import re
from decimal import Decimal

from django.conf import settings

from core.domain.clock import Clock, system_clock
from core.domain.exceptions import DuplicateLicenseError
from core.domain.value_objects import PaymentType
from core.infrastructure.events import event_bus
from core.metrics import licenses_generated_total
from licenses.application.commands.generate_license import GenerateLicenseCommand
from licenses.application.dto.license_dto import LicenseDTO
from licenses.domain.events import LicenseGenerated
from licenses.domain.license import License
from licenses.domain.services import LicenseKeyGenerator, LicensePeriod
from licenses.domain.subscription import Subscription
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository
from payments.domain.events import PaymentRecorded
from payments.domain.payment import Payment
from payments.ports.payment_repository import PaymentRepository

logger = logging.getLogger(__name__)


def phone_digits(phone: str) -> str:
    """Reduce a phone number to its digits."""
    return re.sub(r"\D", "", phone or "")


class GenerateLicenseHandler:
    """Handler for GenerateLicenseCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        payment_repository: PaymentRepository,
        clock: Clock = None,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.payment_repository = payment_repository
        self.clock = clock or system_clock

    async def _check_duplicate(self, command: GenerateLicenseCommand) -> None:
        if not (command.customer_phone and command.location_name):
            return
        existing = await self.license_repository.find_by_phone_and_location(
            phone_digits(command.customer_phone), command.location_name
        )
        if existing:
            raise DuplicateLicenseError(
                f'A license already exists for phone "{command.customer_phone}" and '
                f'branch/location "{command.location_name}". Each branch requires a unique license.'
            )

    async def handle(self, command: GenerateLicenseCommand) -> LicenseDTO:
        """
        Handle generate license command.

        Args:
            command: GenerateLicenseCommand

        Returns:
            LicenseDTO of the new license, with its subscription

        Raises:
            DuplicateLicenseError: If the phone and location already hold a license
            InvalidInputError: If the end date is before the start date
        """
        await self._check_duplicate(command)

        now = self.clock.now()
        start_date = command.start_date or now
        if command.end_date:
            end_date = LicensePeriod.explicit_end_date(command.end_date, start_date)
        else:
            end_date = LicensePeriod.default_end_date(
                start_date, command.is_free_trial, settings.LICENSE_FREE_TRIAL_DAYS
            )

        def price(value, default):
            return Decimal(value) if value is not None else Decimal(str(default))

        initial_price = price(command.initial_price, settings.LICENSE_INITIAL_PRICE)
        annual_price = price(command.annual_price, settings.LICENSE_ANNUAL_PRICE)

        key = await LicenseKeyGenerator.generate_unique(self.license_repository)
        license = License.create(
            key=key,
            start_date=start_date,
            end_date=end_date,
            initial_price=initial_price,
            annual_price=annual_price,
            price_per_user=price(command.price_per_user, settings.LICENSE_PRICE_PER_USER),
            user_limit=settings.LICENSE_DEFAULT_USER_LIMIT,
            is_free_trial=command.is_free_trial,
            customer_name=command.customer_name,
            customer_phone=command.customer_phone,
            location_name=command.location_name,
            location_address=command.location_address,
        )
        saved = await self.license_repository.save(license)

        subscription = await self.subscription_repository.save(
            Subscription.create(
                license_id=saved.id,
                start_date=start_date,
                end_date=end_date,
                annual_fee=annual_price,
                grace_days=settings.LICENSE_GRACE_PERIOD_DAYS,
            )
        )

        if not command.is_free_trial and initial_price > 0:
            payment = await self.payment_repository.save(
                Payment.create(
                    license_id=saved.id,
                    amount=initial_price,
                    payment_type=PaymentType.INITIAL,
                    payment_date=now,
                )
            )
            await event_bus.publish(
                PaymentRecorded(
                    license_id=saved.id,
                    payment_id=payment.id,
                    amount=payment.amount,
                    payment_type=payment.payment_type.value,
                )
            )

        licenses_generated_total.labels(is_free_trial=str(saved.is_free_trial).lower()).inc()
        logger.info(
            "License generated",
            extra={
                "license_id": str(saved.id),
                "is_free_trial": saved.is_free_trial,
                "end_date": saved.end_date.isoformat(),
            },
        )
        await event_bus.publish(
            LicenseGenerated(
                license_id=saved.id,
                license_key=saved.key,
                is_free_trial=saved.is_free_trial,
                end_date=saved.end_date,
            )
        )
        return LicenseDTO.from_entity(saved, [subscription])
