"""
Expiry sweep job.

Moves licenses whose licensed period has ended to ``expired`` and
subscriptions inside their grace window to ``grace_period``. Only one
run may be in flight at a time across all processes; the run holds a
lease in the shared cache for its whole duration.
"""
import logging

from django.conf import settings

from core.domain.clock import Clock, system_clock
from core.domain.exceptions import JobAlreadyRunningError
from core.domain.value_objects import EffectiveStatus, LicenseStatus, SubscriptionStatus
from core.infrastructure.events import event_bus
from core.infrastructure.leases import CacheLease
from core.metrics import expiry_sweep_runs_total, licenses_expired_total
from licenses.application.dto.license_dto import ExpirySweepResultDTO
from licenses.application.services.license_cache_service import LicenseCacheService
from licenses.domain.events import LicenseExpired
from licenses.domain.state_machine import LicenseStateMachine
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)

SWEEP_LEASE_NAME = "expiry-sweep"


class ExpirySweepJob:
    """Singleton job transitioning lapsed licenses."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        clock: Clock = None,
        lease: CacheLease = None,
    ):
        """Initialize job with repositories and its lease."""
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.clock = clock or system_clock
        self.lease = lease or CacheLease(SWEEP_LEASE_NAME, settings.EXPIRY_SWEEP_LEASE_SECONDS)

    async def run(self, dry_run: bool = False) -> ExpirySweepResultDTO:
        """
        Run one sweep.

        Args:
            dry_run: Evaluate and report without writing

        Returns:
            ExpirySweepResultDTO with the number of licenses expired

        Raises:
            JobAlreadyRunningError: If another run holds the lease
        """
        if not await self.lease.acquire():
            expiry_sweep_runs_total.labels(result="conflict").inc()
            raise JobAlreadyRunningError("Update expired licenses job is already running")
        try:
            result = await self._sweep(dry_run)
        except Exception:
            expiry_sweep_runs_total.labels(result="error").inc()
            logger.error("Expiry sweep failed", exc_info=True)
            raise
        finally:
            await self.lease.release()

        expiry_sweep_runs_total.labels(result="success").inc()
        return result

    async def _sweep(self, dry_run: bool) -> ExpirySweepResultDTO:
        now = self.clock.now()
        candidates = await self.license_repository.find_sweep_candidates(now)
        expired = 0
        in_grace = 0

        for license in candidates:
            subscription = await self.subscription_repository.find_current_for_license(license.id)
            result = LicenseStateMachine.evaluate(license, subscription, now)

            if result.status == EffectiveStatus.EXPIRED and license.status != LicenseStatus.EXPIRED:
                expired += 1
                if dry_run:
                    continue
                await self.license_repository.save(license.mark_expired())
                if subscription and subscription.status != SubscriptionStatus.EXPIRED:
                    await self.subscription_repository.save(subscription.mark_expired())
                await LicenseCacheService.invalidate_license_status(license.key)
                await event_bus.publish(
                    LicenseExpired(license_id=license.id, end_date=result.expires_at)
                )
            elif (
                result.status == EffectiveStatus.GRACE_PERIOD
                and subscription
                and subscription.status == SubscriptionStatus.ACTIVE
            ):
                in_grace += 1
                if not dry_run:
                    await self.subscription_repository.save(subscription.mark_grace_period())

            # Long sweeps must keep the lease alive
            if not dry_run:
                await self.lease.heartbeat()

        if not dry_run:
            licenses_expired_total.inc(expired)
        logger.info(
            "Expiry sweep finished",
            extra={
                "candidates": len(candidates),
                "expired": expired,
                "grace_period": in_grace,
                "dry_run": dry_run,
            },
        )
        return ExpirySweepResultDTO(
            updated=expired,
            grace_period=in_grace,
            message=f"Successfully updated {expired} expired license(s)",
        )
