"""
GetLicenseStatusHandler.

Handler for the public license status query.
"""

from core.domain.clock import Clock, system_clock
from licenses.application.queries.get_license_status import GetLicenseStatusQuery
from licenses.application.services.license_cache_service import (
    CACHE_TTL_LICENSE_STATUS,
    LicenseCacheService,
)
from licenses.domain.state_machine import LicenseStateMachine
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository


class GetLicenseStatusHandler:
    """Handler for GetLicenseStatusQuery."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        clock: Clock = None,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.clock = clock or system_clock

    async def handle(self, query: GetLicenseStatusQuery) -> dict:
        """
        Handle get license status query.

        Unknown keys are reported with status ``not_found`` rather than
        raised, so clients always get a status payload. A cached payload
        never outlives the moment its status or day count would change.

        Args:
            query: GetLicenseStatusQuery with a normalized key

        Returns:
            Status payload (see LicenseStatusResult.to_dict)
        """
        cached = await LicenseCacheService.get_license_status(query.license_key)
        if cached:
            return cached

        now = self.clock.now()
        license = await self.license_repository.find_by_key(query.license_key)
        subscription = None
        if license:
            subscription = await self.subscription_repository.find_current_for_license(license.id)
        result = LicenseStateMachine.evaluate(license, subscription, now)
        payload = result.to_dict()

        if license:
            ttl = CACHE_TTL_LICENSE_STATUS
            changes_at = result.changes_at()
            if changes_at is not None:
                ttl = min(ttl, int((changes_at - now).total_seconds()))
            if ttl >= 1:
                await LicenseCacheService.set_license_status(query.license_key, payload, ttl=ttl)
        return payload
