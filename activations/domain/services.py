"""
Activation domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from activations.domain.activation import Activation
from activations.ports.activation_repository import ActivationRepository
from activations.ports.token_issuer import ActivationTokenIssuer
from core.domain.clock import Clock, system_clock
from core.domain.exceptions import ActivationNotFoundError, AuthorizationDeniedError
from core.domain.value_objects import HardwareId
from licenses.domain.license import License
from licenses.domain.state_machine import LicenseStateMachine, LicenseStatusResult
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)


def _same_address(stored: Optional[str], provided: str) -> bool:
    return " ".join((stored or "").split()).lower() == " ".join(provided.split()).lower()


@dataclass(frozen=True)
class ActivationResult:
    """Outcome of a successful activation."""

    activation: Activation
    license: License
    token: str
    expires_at: datetime
    grace_period_end: Optional[datetime]
    is_reactivating_active: bool

    @property
    def message(self) -> str:
        if self.is_reactivating_active:
            return "License reactivated successfully (already active - data preserved)"
        return "License activated successfully"


class ActivationManager:
    """
    Domain service binding licenses to machines.

    There is no cap on the number of machines per license; seats are
    counted separately by the SeatLedger.
    """

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        activation_repository: ActivationRepository,
        token_issuer: ActivationTokenIssuer,
        clock: Clock = None,
    ):
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.activation_repository = activation_repository
        self.token_issuer = token_issuer
        self.clock = clock or system_clock

    async def _evaluate(self, license: Optional[License], now: datetime) -> LicenseStatusResult:
        subscription = None
        if license:
            subscription = await self.subscription_repository.find_current_for_license(license.id)
        return LicenseStateMachine.evaluate(license, subscription, now)

    async def activate(
        self,
        license_key: str,
        hardware_id: str,
        machine_name: Optional[str] = None,
    ) -> ActivationResult:
        """
        Activate a license on a machine.

        Args:
            license_key: Normalized license key
            hardware_id: Hardware identifier of the machine
            machine_name: Optional machine name

        Returns:
            ActivationResult with the signed token

        Raises:
            AuthorizationDeniedError: If the license is unknown, not usable,
                or has no location information
        """
        HardwareId(hardware_id)
        now = self.clock.now()
        license = await self.license_repository.find_by_key(license_key)
        status = await self._evaluate(license, now)
        if license is None or not status.status.is_usable:
            raise AuthorizationDeniedError(status.message)
        if not license.has_location:
            raise AuthorizationDeniedError(
                "License does not have location information. "
                "Please contact administrator to update the location information."
            )

        existing = await self.activation_repository.find_by_license_and_hardware(
            license.id, hardware_id
        )
        activation = None
        if existing is None:
            activation = await self.activation_repository.insert(
                Activation.create(license.id, hardware_id, now, machine_name)
            )
            if activation is None:
                # A concurrent request bound this machine first
                existing = await self.activation_repository.find_by_license_and_hardware(
                    license.id, hardware_id
                )

        reactivating_active = False
        if existing is not None:
            if existing.is_active:
                activation = existing.refresh(now, machine_name)
                reactivating_active = True
            else:
                activation = existing.reactivate(now, machine_name)
            activation = await self.activation_repository.save(activation)
        else:
            # The POS creates its default user on first activation
            await self.license_repository.claim_first_seat(license.id)

        logger.info(
            "License activated",
            extra={
                "activation_id": str(activation.id),
                "license_id": str(license.id),
                "hardware_id": hardware_id,
                "reactivated": existing is not None,
            },
        )
        return ActivationResult(
            activation=activation,
            license=license,
            token=self.token_issuer.issue(license, activation),
            expires_at=status.expires_at,
            grace_period_end=status.grace_period_end,
            is_reactivating_active=reactivating_active,
        )

    async def validate(
        self,
        license_key: str,
        hardware_id: Optional[str] = None,
        current_time: Optional[datetime] = None,
        location_address: Optional[str] = None,
    ) -> LicenseStatusResult:
        """
        Evaluate a license for a client check-in.

        Never raises for business conditions: unknown or unusable licenses
        come back as an invalid result.

        Args:
            license_key: Normalized license key
            hardware_id: Optional machine; refreshes its last validation time
            current_time: Optional client clock, used only for the evaluation
            location_address: Optional address that must match the license's

        Returns:
            LicenseStatusResult
        """
        server_now = self.clock.now()
        license = await self.license_repository.find_by_key(license_key)
        result = await self._evaluate(license, current_time or server_now)
        if license is None:
            return result

        if hardware_id:
            activation = await self.activation_repository.find_by_license_and_hardware(
                license.id, hardware_id
            )
            if activation and activation.is_active:
                await self.activation_repository.touch_validation(activation.id, server_now)

        if location_address and not _same_address(license.location_address, location_address):
            return result.invalidated("Location address does not match the activated location")
        return result

    @staticmethod
    async def deactivate(
        activation_id: uuid.UUID, activation_repository: ActivationRepository
    ) -> Activation:
        """
        Deactivate one activation. Deactivating twice is a no-op.

        Raises:
            ActivationNotFoundError: If the activation does not exist
        """
        activation = await activation_repository.find_by_id(activation_id)
        if not activation:
            raise ActivationNotFoundError(f"Activation {activation_id} not found")
        if not activation.is_active:
            return activation
        return await activation_repository.save(activation.deactivate())

    @staticmethod
    async def reset_activations(
        license_id: uuid.UUID, activation_repository: ActivationRepository
    ) -> int:
        """
        Deactivate every activation of a license so it can be activated afresh.

        Returns:
            Number of activations that were active
        """
        return await activation_repository.deactivate_all_for_license(license_id)
