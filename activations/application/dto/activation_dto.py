"""
Activation DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from activations.domain.activation import Activation
from activations.domain.services import ActivationResult


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ActivationDTO:
    """DTO for activation information."""

    id: uuid.UUID
    license_id: uuid.UUID
    hardware_id: str
    machine_name: Optional[str]
    activated_at: datetime
    last_validation: Optional[datetime]
    is_active: bool

    @classmethod
    def from_entity(cls, activation: Activation) -> "ActivationDTO":
        return cls(
            id=activation.id,
            license_id=activation.license_id,
            hardware_id=str(activation.hardware_id),
            machine_name=activation.machine_name,
            activated_at=activation.activated_at,
            last_validation=activation.last_validation,
            is_active=activation.is_active,
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "licenseId": str(self.license_id),
            "hardwareId": self.hardware_id,
            "machineName": self.machine_name,
            "activatedAt": _iso(self.activated_at),
            "lastValidation": _iso(self.last_validation),
            "isActive": self.is_active,
        }


@dataclass
class ActivateLicenseResponseDTO:
    """DTO for the activate license response."""

    message: str
    expires_at: datetime
    grace_period_end: Optional[datetime]
    token: str
    location_id: uuid.UUID
    location_name: Optional[str]
    location_address: Optional[str]
    customer_name: Optional[str]
    customer_phone: Optional[str]
    is_reactivating_active: bool

    @classmethod
    def from_result(cls, result: ActivationResult) -> "ActivateLicenseResponseDTO":
        license = result.license
        return cls(
            message=result.message,
            expires_at=result.expires_at,
            grace_period_end=result.grace_period_end,
            token=result.token,
            location_id=license.id,
            location_name=license.location_name,
            location_address=license.location_address,
            customer_name=license.customer_name,
            customer_phone=license.customer_phone,
            is_reactivating_active=result.is_reactivating_active,
        )

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "expiresAt": _iso(self.expires_at),
            "gracePeriodEnd": _iso(self.grace_period_end),
            "token": self.token,
            "locationId": str(self.location_id),
            "locationName": self.location_name,
            "locationAddress": self.location_address,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "isReactivatingActive": self.is_reactivating_active,
        }
