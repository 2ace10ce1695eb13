"""
ChangeLicenseStatusCommand.

Admin command to revoke, suspend or reinstate a license.
"""
import uuid
from dataclasses import dataclass
from enum import Enum


class LicenseStatusAction(Enum):
    """Admin status transitions."""

    REVOKE = "revoke"
    SUSPEND = "suspend"
    REINSTATE = "reinstate"


@dataclass
class ChangeLicenseStatusCommand:
    """Command to apply a status transition to a license."""

    license_id: uuid.UUID
    action: LicenseStatusAction
    actor: str = "system"
