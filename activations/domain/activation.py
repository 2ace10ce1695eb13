"""
Activation domain entity.

This is the core domain entity representing the binding of a license
to one POS machine. It contains business logic and is independent of
infrastructure.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from core.domain.value_objects import HardwareId


@dataclass(frozen=True)
class Activation:
    """
    Activation domain entity.

    One activation exists per (license, hardware) pair. Activations are
    never deleted; deactivation clears is_active.
    """

    id: uuid.UUID
    license_id: uuid.UUID
    hardware_id: HardwareId
    activated_at: datetime
    is_active: bool
    machine_name: Optional[str] = None
    last_validation: Optional[datetime] = None

    def __post_init__(self):
        """Validate activation entity."""
        if not self.license_id:
            raise ValueError("License ID is required")

    @classmethod
    def create(
        cls,
        license_id: uuid.UUID,
        hardware_id: str,
        now: datetime,
        machine_name: Optional[str] = None,
        activation_id: Optional[uuid.UUID] = None,
    ) -> "Activation":
        """
        Create a new active Activation.

        Args:
            license_id: License UUID
            hardware_id: Opaque hardware identifier
            now: Activation time
            machine_name: Optional machine name
            activation_id: Optional UUID (generated if not provided)

        Returns:
            Activation entity instance
        """
        return cls(
            id=activation_id or uuid.uuid4(),
            license_id=license_id,
            hardware_id=HardwareId(hardware_id),
            machine_name=machine_name,
            activated_at=now,
            last_validation=now,
            is_active=True,
        )

    def reactivate(self, now: datetime, machine_name: Optional[str] = None) -> "Activation":
        """
        Bring an inactive activation back, restarting its activation time.

        Returns:
            New Activation instance with active status
        """
        return replace(
            self,
            is_active=True,
            activated_at=now,
            last_validation=now,
            machine_name=machine_name or self.machine_name,
        )

    def refresh(self, now: datetime, machine_name: Optional[str] = None) -> "Activation":
        """
        Re-activation of an already active machine; activated_at is kept.

        Returns:
            New Activation instance with refreshed details
        """
        return replace(
            self,
            last_validation=now,
            machine_name=machine_name or self.machine_name,
        )

    def deactivate(self) -> "Activation":
        """
        Create a new Activation instance with deactivated status.

        Returns:
            New Activation instance with deactivated status
        """
        if not self.is_active:
            return self
        return replace(self, is_active=False)
