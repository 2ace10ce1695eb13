"""
RenewSubscriptionCommand.

Command to extend a license's subscription by one year.
"""
import uuid
from dataclasses import dataclass


@dataclass
class RenewSubscriptionCommand:
    """Command to renew a subscription."""

    license_id: uuid.UUID
    extend_from_now: bool = False
