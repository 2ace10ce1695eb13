"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


class LicenseStatus(Enum):
    """Stored license status."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"
    SUSPENDED = "suspended"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class SubscriptionStatus(Enum):
    """Stored subscription status."""

    ACTIVE = "active"
    EXPIRED = "expired"
    GRACE_PERIOD = "grace_period"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class EffectiveStatus(Enum):
    """Status derived by the license state machine."""

    ACTIVE = "active"
    GRACE_PERIOD = "grace_period"
    EXPIRED = "expired"
    REVOKED = "revoked"
    SUSPENDED = "suspended"
    NOT_FOUND = "not_found"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value

    @property
    def is_usable(self) -> bool:
        """True for statuses that still grant usage rights."""
        return self in (EffectiveStatus.ACTIVE, EffectiveStatus.GRACE_PERIOD)


class PaymentType(Enum):
    """Payment type value object."""

    INITIAL = "initial"
    ANNUAL = "annual"
    USER = "user"

    def __str__(self) -> str:
        """Return payment type as string."""
        return self.value


@dataclass(frozen=True)
class HardwareId(ValueObject):
    """Opaque hardware identifier reported by a POS installation."""

    value: str

    MAX_LENGTH = 255

    def __post_init__(self):
        """Validate hardware identifier."""
        if not self.value or len(self.value.strip()) == 0:
            raise ValueError("Hardware ID cannot be empty")
        if len(self.value) > self.MAX_LENGTH:
            raise ValueError("Hardware ID too long")

    def __str__(self) -> str:
        """Return identifier as string."""
        return self.value
