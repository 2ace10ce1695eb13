"""
Seat counter handlers.

Public handlers resolve the license by key and delegate to the
SeatLedger. The reported hardware ID is telemetry only.
"""
import logging
from typing import Optional

from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import (
    InvalidInputError,
    LicenseNotFoundError,
    SeatLimitExceededError,
)
from core.infrastructure.events import event_bus
from core.metrics import seat_operations_total
from licenses.application.commands.user_count import (
    IncreaseUserLimitCommand,
    UserCountCommand,
    UserCountOperation,
)
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.events import UserLimitIncreased
from licenses.domain.license import License
from licenses.domain.services import SeatCountResult, SeatLedger
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class UserCountHandler:
    """Handler for UserCountCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activation_repository: ActivationRepository,
        seat_ledger: SeatLedger,
    ):
        """Initialize handler with repositories and the ledger."""
        self.license_repository = license_repository
        self.activation_repository = activation_repository
        self.seat_ledger = seat_ledger

    async def _note_hardware(self, license: License, hardware_id: Optional[str]) -> None:
        if not hardware_id:
            return
        activation = await self.activation_repository.find_by_license_and_hardware(
            license.id, hardware_id
        )
        if not activation or not activation.is_active:
            logger.info(
                "Hardware ID not active for license, allowing user count operation",
                extra={"license_id": str(license.id), "hardware_id": hardware_id},
            )

    async def handle(self, command: UserCountCommand) -> dict:
        """
        Handle user count command.

        Args:
            command: UserCountCommand with a normalized key

        Returns:
            Result payload of the ledger operation

        Raises:
            LicenseNotFoundError: If the key matches no license
            SeatLimitExceededError: If an increment hits the limit
            InvalidInputError: If a sync carries no count
        """
        license = await self.license_repository.find_by_key(command.license_key)
        if not license:
            raise LicenseNotFoundError("License key not found")
        await self._note_hardware(license, command.hardware_id)

        operation = command.operation
        if operation == UserCountOperation.CHECK:
            result = (await self.seat_ledger.check_user_creation(license.id)).to_dict()
        elif operation == UserCountOperation.INCREMENT:
            try:
                result = (await self.seat_ledger.increment_user_count(license.id)).to_dict()
            except SeatLimitExceededError:
                seat_operations_total.labels(operation=operation.value, result="rejected").inc()
                raise
        elif operation == UserCountOperation.DECREMENT:
            result = (await self.seat_ledger.decrement_user_count(license.id)).to_dict()
        else:
            if command.actual_user_count is None or command.actual_user_count < 0:
                raise InvalidInputError("actualUserCount must be a non-negative integer")
            result = (
                await self.seat_ledger.sync_user_count(license.id, command.actual_user_count)
            ).to_dict()

        seat_operations_total.labels(operation=operation.value, result="ok").inc()
        return result


class IncreaseUserLimitHandler:
    """Handler for IncreaseUserLimitCommand."""

    def __init__(self, license_repository: LicenseRepository, seat_ledger: SeatLedger):
        """Initialize handler with repositories and the ledger."""
        self.license_repository = license_repository
        self.seat_ledger = seat_ledger

    async def handle(self, command: IncreaseUserLimitCommand) -> SeatCountResult:
        """
        Handle increase user limit command.

        Args:
            command: IncreaseUserLimitCommand

        Returns:
            SeatCountResult with the new limit

        Raises:
            LicenseNotFoundError: If license not found
            InvalidInputError: If additional_users is not positive
        """
        result = await self.seat_ledger.increase_user_limit(
            command.license_id, command.additional_users
        )
        license = await self.license_repository.find_by_id(command.license_id)
        if license:
            await LicenseCacheService.invalidate_license_status(license.key)
        await event_bus.publish(
            UserLimitIncreased(
                license_id=command.license_id,
                additional_users=command.additional_users,
                user_limit=result.user_limit,
            )
        )
        return result
