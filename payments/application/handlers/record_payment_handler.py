"""
RecordPaymentHandler.

Records a payment and applies its side effects on the license: free
trial conversion, seat purchases and subscription renewal.
"""
import logging

from core.domain.clock import Clock, system_clock
from core.domain.exceptions import LicenseNotFoundError
from core.domain.value_objects import PaymentType
from core.infrastructure.events import event_bus
from core.metrics import payments_recorded_total
from licenses.application.commands.renew_subscription import RenewSubscriptionCommand
from licenses.application.handlers.license_lifecycle_handlers import RenewSubscriptionHandler
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.services import SeatLedger
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository
from payments.application.commands.record_payment import RecordPaymentCommand
from payments.application.dto.payment_dto import PaymentDTO
from payments.domain.events import PaymentRecorded
from payments.domain.payment import Payment
from payments.domain.services import PaymentPolicy
from payments.ports.payment_repository import PaymentRepository

logger = logging.getLogger(__name__)


class RecordPaymentHandler:
    """Handler for RecordPaymentCommand."""

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

    async def handle(self, command: RecordPaymentCommand) -> PaymentDTO:
        """
        Handle record payment command.

        Annual payments extend the subscription by one year from its
        current end date. Initial payments extend it from the later of
        now and the current end date.

        Args:
            command: RecordPaymentCommand

        Returns:
            PaymentDTO of the recorded payment

        Raises:
            LicenseNotFoundError: If license not found
            PaymentRejectedError: If a billing rule rejects the payment
        """
        license = await self.license_repository.find_by_id(command.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {command.license_id} not found")

        has_initial = await self.payment_repository.has_initial_payment(license.id)
        PaymentPolicy.check(
            license,
            command.amount,
            command.payment_type,
            has_initial,
            command.additional_users,
        )

        now = self.clock.now()
        payment = await self.payment_repository.save(
            Payment.create(
                license_id=license.id,
                amount=command.amount,
                payment_type=command.payment_type,
                payment_date=command.payment_date or now,
                additional_users=command.additional_users,
            )
        )

        updated = license.convert_to_paid()
        if command.payment_type == PaymentType.INITIAL and not license.is_free_trial:
            updated = updated.with_initial_price(command.amount)
        if updated is not license:
            await self.license_repository.save(updated)

        if command.additional_users:
            ledger = SeatLedger(self.license_repository, self.subscription_repository, self.clock)
            await ledger.increase_user_limit(license.id, command.additional_users)

        if command.payment_type != PaymentType.USER:
            current = await self.subscription_repository.find_current_for_license(license.id)
            extend_from_now = command.payment_type == PaymentType.INITIAL and (
                current is None or current.end_date <= now
            )
            renew = RenewSubscriptionHandler(
                self.license_repository, self.subscription_repository, self.clock
            )
            await renew.handle(
                RenewSubscriptionCommand(license_id=license.id, extend_from_now=extend_from_now)
            )
        else:
            await LicenseCacheService.invalidate_license_status(license.key)

        payments_recorded_total.labels(payment_type=payment.payment_type.value).inc()
        logger.info(
            "Payment recorded",
            extra={
                "payment_id": str(payment.id),
                "license_id": str(license.id),
                "payment_type": payment.payment_type.value,
                "amount": str(payment.amount),
                "was_free_trial": license.is_free_trial,
                "actor": command.actor,
            },
        )
        await event_bus.publish(
            PaymentRecorded(
                license_id=license.id,
                payment_id=payment.id,
                amount=payment.amount,
                payment_type=payment.payment_type.value,
                additional_users=payment.additional_users,
            )
        )
        return PaymentDTO.from_entity(payment)
