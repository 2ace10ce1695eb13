"""
Activation commands.

Commands issued by POS clients and administrators against activations.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class ActivateLicenseCommand:
    """Command to activate a license on a machine."""

    license_key: str
    hardware_id: str
    machine_name: Optional[str] = None


@dataclass
class ValidateLicenseCommand:
    """Command for a client check-in against its license."""

    license_key: str
    hardware_id: Optional[str] = None
    current_time: Optional[datetime] = None
    location_address: Optional[str] = None


@dataclass
class DeactivateActivationCommand:
    """Command to deactivate one activation."""

    activation_id: uuid.UUID
    actor: str = "system"


@dataclass
class ResetActivationsCommand:
    """Command to deactivate every activation of a license."""

    license_id: uuid.UUID
    actor: str = "system"
