"""
Activation repository port (interface).

This defines the contract for activation persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import uuid

from activations.domain.activation import Activation
from core.domain.pagination import Page, PageRequest


@dataclass(frozen=True)
class ActivationCounts:
    """Activation totals for the admin dashboard."""

    total: int
    active: int
    created_recently: int

    @property
    def inactive(self) -> int:
        return self.total - self.active


class ActivationRepository(ABC):
    """
    Abstract repository for Activation entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def save(self, activation: Activation) -> Activation:
        """
        Save an activation entity.

        Args:
            activation: Activation entity to save

        Returns:
            Saved activation entity
        """
        pass

    @abstractmethod
    async def insert(self, activation: Activation) -> Optional[Activation]:
        """
        Create a new activation.

        Args:
            activation: Activation entity to create

        Returns:
            Created activation, or None if the license is already bound
            to that hardware ID
        """
        pass

    @abstractmethod
    async def touch_validation(self, activation_id: uuid.UUID, validated_at: datetime) -> bool:
        """
        Record a check-in on an activation that is still active.

        Only last_validation is written, so a concurrent deactivation wins.

        Returns:
            True if the activation was active and got updated
        """
        pass

    @abstractmethod
    async def find_by_id(self, activation_id: uuid.UUID) -> Optional[Activation]:
        """
        Find an activation by ID.

        Args:
            activation_id: Activation UUID

        Returns:
            Activation entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_license_and_hardware(
        self, license_id: uuid.UUID, hardware_id: str
    ) -> Optional[Activation]:
        """
        Find the activation binding a license to a machine.

        Args:
            license_id: License UUID
            hardware_id: Hardware identifier

        Returns:
            Activation entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_license(self, license_id: uuid.UUID) -> List[Activation]:
        pass

    @abstractmethod
    async def deactivate_all_for_license(self, license_id: uuid.UUID) -> int:
        """
        Set is_active to false on every activation of a license.

        Args:
            license_id: License UUID

        Returns:
            Number of activations that were active
        """
        pass

    @abstractmethod
    async def list(
        self,
        page_request: PageRequest,
        license_id: Optional[uuid.UUID] = None,
        is_active: Optional[bool] = None,
    ) -> Page[Activation]:
        pass

    @abstractmethod
    async def counts(self, activated_since: datetime) -> ActivationCounts:
        """
        Count activations.

        Args:
            activated_since: Activations made at or after this count as recent

        Returns:
            ActivationCounts
        """
        pass
