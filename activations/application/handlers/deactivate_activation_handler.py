"""
Administrative activation handlers.
"""
import logging

from activations.application.commands.activate_license import (
    DeactivateActivationCommand,
    ResetActivationsCommand,
)
from activations.application.dto.activation_dto import ActivationDTO
from activations.domain.events import ActivationDeactivated, LicenseActivationsReset
from activations.domain.services import ActivationManager
from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import LicenseNotFoundError
from core.infrastructure.events import event_bus
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class DeactivateActivationHandler:
    """Handler for DeactivateActivationCommand."""

    def __init__(self, activation_repository: ActivationRepository):
        """Initialize handler with repositories."""
        self.activation_repository = activation_repository

    async def handle(self, command: DeactivateActivationCommand) -> ActivationDTO:
        """
        Handle deactivate activation command.

        Args:
            command: DeactivateActivationCommand

        Returns:
            ActivationDTO of the deactivated activation

        Raises:
            ActivationNotFoundError: If activation not found
        """
        activation = await self.activation_repository.find_by_id(command.activation_id)
        was_active = bool(activation and activation.is_active)

        deactivated = await ActivationManager.deactivate(
            command.activation_id, self.activation_repository
        )

        if was_active:
            logger.info(
                "Activation deactivated",
                extra={"activation_id": str(deactivated.id), "actor": command.actor},
            )
            await event_bus.publish(
                ActivationDeactivated(
                    activation_id=deactivated.id,
                    license_id=deactivated.license_id,
                    hardware_id=str(deactivated.hardware_id),
                )
            )
        return ActivationDTO.from_entity(deactivated)


class ResetActivationsHandler:
    """Handler for ResetActivationsCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activation_repository: ActivationRepository,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.activation_repository = activation_repository

    async def handle(self, command: ResetActivationsCommand) -> dict:
        """
        Deactivate all activations of a license.

        Returns:
            Dict with the number of activations deactivated

        Raises:
            LicenseNotFoundError: If license not found
        """
        license = await self.license_repository.find_by_id(command.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {command.license_id} not found")

        deactivated = await ActivationManager.reset_activations(
            license.id, self.activation_repository
        )
        await event_bus.publish(
            LicenseActivationsReset(license_id=license.id, deactivated=deactivated)
        )
        return {
            "licenseId": str(license.id),
            "deactivated": deactivated,
            "message": f"Deactivated {deactivated} activation(s)",
        }
