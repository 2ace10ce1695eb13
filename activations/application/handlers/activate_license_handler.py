"""
Activation handlers.

Handlers for client activation and validation requests.
"""

from activations.application.commands.activate_license import (
    ActivateLicenseCommand,
    ValidateLicenseCommand,
)
from activations.application.dto.activation_dto import ActivateLicenseResponseDTO
from activations.domain.events import LicenseActivated
from activations.domain.services import ActivationManager
from activations.ports.activation_repository import ActivationRepository
from activations.ports.token_issuer import ActivationTokenIssuer
from core.domain.clock import Clock
from core.domain.exceptions import AuthorizationDeniedError
from core.infrastructure.events import event_bus
from core.metrics import license_activations_total, license_validations_total
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.state_machine import LicenseStatusResult
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository


class ActivateLicenseHandler:
    """Handler for ActivateLicenseCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        activation_repository: ActivationRepository,
        token_issuer: ActivationTokenIssuer,
        clock: Clock = None,
    ):
        """Initialize handler with repositories."""
        self.manager = ActivationManager(
            license_repository,
            subscription_repository,
            activation_repository,
            token_issuer,
            clock,
        )

    async def handle(self, command: ActivateLicenseCommand) -> ActivateLicenseResponseDTO:
        """
        Handle activate license command.

        Args:
            command: ActivateLicenseCommand

        Returns:
            ActivateLicenseResponseDTO with the activation token

        Raises:
            InvalidInputError: If the hardware identifier is empty
            AuthorizationDeniedError: If the license cannot be activated
        """
        try:
            result = await self.manager.activate(
                command.license_key,
                command.hardware_id,
                command.machine_name,
            )
        except AuthorizationDeniedError:
            license_activations_total.labels(result="denied").inc()
            raise

        license_activations_total.labels(result="success").inc()
        await event_bus.publish(
            LicenseActivated(
                activation_id=result.activation.id,
                license_id=result.license.id,
                hardware_id=command.hardware_id,
                reactivated=result.is_reactivating_active,
            )
        )
        await LicenseCacheService.invalidate_license_status(command.license_key)
        return ActivateLicenseResponseDTO.from_result(result)


class ValidateLicenseHandler:
    """Handler for ValidateLicenseCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        activation_repository: ActivationRepository,
        token_issuer: ActivationTokenIssuer,
        clock: Clock = None,
    ):
        """Initialize handler with repositories."""
        self.manager = ActivationManager(
            license_repository,
            subscription_repository,
            activation_repository,
            token_issuer,
            clock,
        )

    async def handle(self, command: ValidateLicenseCommand) -> LicenseStatusResult:
        """
        Handle validate license command.

        Returns:
            LicenseStatusResult; invalid results are returned, not raised
        """
        result = await self.manager.validate(
            command.license_key,
            hardware_id=command.hardware_id,
            current_time=command.current_time,
            location_address=command.location_address,
        )
        license_validations_total.labels(status=result.status.value).inc()
        return result
