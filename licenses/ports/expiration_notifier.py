"""
Expiration notifier port (interface).

Delivery channels (messaging, e-mail) live behind this port.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import uuid


@dataclass(frozen=True)
class ExpirationWarning:
    """A license approaching the end of its subscription."""

    license_id: uuid.UUID
    license_key: str
    customer_name: Optional[str]
    customer_phone: Optional[str]
    location_name: Optional[str]
    is_free_trial: bool
    expires_at: datetime
    days_remaining: int


class ExpirationNotifier(ABC):
    """Sends expiration warnings to customers."""

    @abstractmethod
    async def notify(self, warning: ExpirationWarning) -> bool:
        """
        Deliver one warning.

        Args:
            warning: ExpirationWarning to deliver

        Returns:
            True if the warning was delivered
        """
        pass
