"""
Event handlers for domain events.

These handlers process domain events for side effects like audit
logging and cache invalidation.
"""

import logging

from activations.domain.events import (
    ActivationDeactivated,
    LicenseActivated,
    LicenseActivationsReset,
)
from core.domain.events import DomainEvent, EventHandler
from licenses.domain.events import (
    LicenseExpired,
    LicenseGenerated,
    LicenseStatusChanged,
    LicenseUpdated,
    SubscriptionRenewed,
    UserLimitIncreased,
)
from payments.domain.events import PaymentRecorded

logger = logging.getLogger(__name__)

ENTITY_TYPES = {
    "LicenseActivated": "activation",
    "ActivationDeactivated": "activation",
    "SubscriptionRenewed": "subscription",
    "PaymentRecorded": "payment",
}

AUDITED_EVENTS = (
    LicenseGenerated,
    LicenseStatusChanged,
    LicenseUpdated,
    LicenseExpired,
    SubscriptionRenewed,
    UserLimitIncreased,
    LicenseActivated,
    ActivationDeactivated,
    LicenseActivationsReset,
    PaymentRecorded,
)

# Events whose side effects change what a status evaluation returns
CACHE_INVALIDATING_EVENTS = (
    UserLimitIncreased,
    ActivationDeactivated,
    LicenseActivationsReset,
    PaymentRecorded,
)


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Appends one AuditLog row per domain event.
    """

    def __init__(self, audit_log_repository=None):
        if audit_log_repository is None:
            from licenses.infrastructure.repositories.django_audit_log_repository import (
                DjangoAuditLogRepository,
            )

            audit_log_repository = DjangoAuditLogRepository()
        self.audit_log_repository = audit_log_repository

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        payload = event.payload()
        entity_type = ENTITY_TYPES.get(event.event_type, "license")
        entity_id = {
            "activation": payload.get("activation_id"),
            "subscription": payload.get("subscription_id"),
            "payment": payload.get("payment_id"),
        }.get(entity_type) or event.aggregate_id

        await self.audit_log_repository.record(
            entity_type=entity_type,
            entity_id=entity_id,
            action=event.event_type,
            changes=payload,
            license_id=getattr(event, "license_id", None),
        )
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )


class LicenseCacheInvalidationHandler(EventHandler):
    """
    Event handler for cache invalidation.

    Drops the cached status of the license an event refers to.
    """

    def __init__(self, license_repository=None):
        if license_repository is None:
            from licenses.infrastructure.repositories.django_license_repository import (
                DjangoLicenseRepository,
            )

            license_repository = DjangoLicenseRepository()
        self.license_repository = license_repository

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for cache invalidation.

        Args:
            event: Domain event carrying a license_id
        """
        from licenses.application.services.license_cache_service import LicenseCacheService

        license = await self.license_repository.find_by_id(event.license_id)
        if not license:
            logger.warning(
                "Could not find license for cache invalidation (event: %s, aggregate_id: %s)",
                event.event_type,
                event.aggregate_id,
            )
            return
        await LicenseCacheService.invalidate_license_status(license.key)


def register_event_handlers():
    """Register all event handlers with the event bus."""
    from core.infrastructure.events import event_bus

    audit_handler = AuditLogEventHandler()
    cache_handler = LicenseCacheInvalidationHandler()

    for event_type in AUDITED_EVENTS:
        event_bus.subscribe(event_type, audit_handler)
    for event_type in CACHE_INVALIDATING_EVENTS:
        event_bus.subscribe(event_type, cache_handler)

    logger.info("Event handlers registered")
