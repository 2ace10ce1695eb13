"""
Activation domain events.

Domain events represent something that happened in the activation domain.
"""
import uuid
from datetime import datetime
from typing import Optional

from django.utils import timezone

from core.domain.events import DomainEvent


class LicenseActivated(DomainEvent):
    """Event raised when a license is activated on a machine."""

    payload_fields = ("activation_id", "license_id", "hardware_id", "reactivated")

    def __init__(
        self,
        activation_id: uuid.UUID,
        license_id: uuid.UUID,
        hardware_id: str,
        reactivated: bool = False,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseActivated event.

        Args:
            activation_id: Activation UUID
            license_id: License UUID
            hardware_id: Hardware identifier
            reactivated: Whether an existing activation was reused
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(activation_id),
            event_type="LicenseActivated",
        )
        self.activation_id = activation_id
        self.license_id = license_id
        self.hardware_id = hardware_id
        self.reactivated = reactivated


class ActivationDeactivated(DomainEvent):
    """Event raised when an activation is deactivated by an admin."""

    payload_fields = ("activation_id", "license_id", "hardware_id")

    def __init__(
        self,
        activation_id: uuid.UUID,
        license_id: uuid.UUID,
        hardware_id: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize ActivationDeactivated event.

        Args:
            activation_id: Activation UUID
            license_id: License UUID
            hardware_id: Hardware identifier
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(activation_id),
            event_type="ActivationDeactivated",
        )
        self.activation_id = activation_id
        self.license_id = license_id
        self.hardware_id = hardware_id


class LicenseActivationsReset(DomainEvent):
    """Event raised when every activation of a license is reset."""

    payload_fields = ("license_id", "deactivated")

    def __init__(
        self,
        license_id: uuid.UUID,
        deactivated: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="LicenseActivationsReset",
        )
        self.license_id = license_id
        self.deactivated = deactivated
