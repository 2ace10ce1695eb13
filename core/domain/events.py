"""
Domain events base classes and infrastructure.

Domain events represent something that happened in the domain.
They decouple the license, activation and payment modules from
side effects such as audit logging and cache invalidation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID


@dataclass
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Domain events are value objects that represent something that
    happened in the domain and are not changed once published. Subclasses set their
    payload attributes after calling the base initializer and list
    them in ``payload_fields``.
    """

    event_id: UUID
    occurred_at: datetime
    aggregate_id: str
    event_type: str

    payload_fields = ()

    def __init_subclass__(cls, **kwargs):
        """Automatically set event_type for subclasses."""
        super().__init_subclass__(**kwargs)
        cls.event_type = cls.__name__

    def payload(self) -> Dict[str, Any]:
        """Return the event-specific attributes as JSON-friendly values."""
        data = {}
        for name in self.payload_fields:
            value = getattr(self, name, None)
            if isinstance(value, UUID):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            elif hasattr(value, "value"):
                value = value.value
            data[name] = value
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "event_type": self.event_type,
            "payload": self.payload(),
        }


class EventHandler(ABC):
    """
    Base class for event handlers.

    Event handlers process domain events asynchronously.
    """

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """
        Handle a domain event.

        Args:
            event: The domain event to handle
        """
        pass


class EventBus(ABC):
    """
    Abstract event bus for publishing and subscribing to domain events.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event.

        Args:
            event: The domain event to publish
        """
        pass

    @abstractmethod
    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        """
        Subscribe to a domain event type.

        Args:
            event_type: The type of event to subscribe to
            handler: The handler to call when event is published
        """
        pass
