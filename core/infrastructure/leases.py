"""
Expiring, owner-tagged leases stored in the shared cache.

A lease guards work that must not run twice at the same time across
processes. The holder is identified by a random owner token, and the
lease expires on its own after ``ttl_seconds`` so a crashed holder
cannot block the work forever.

The cache offers no compare-and-delete, so release() reads the owner and
deletes in two calls. A holder that outlives its TTL could remove a
successor's lease between them; the holder therefore tracks its own
deadline and leaves a lease it may no longer own to expire.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from core.infrastructure.cache import CachePort
from core.infrastructure.cache_adapters import cache_adapter

logger = logging.getLogger(__name__)


class CacheLease:
    """Mutual-exclusion lease for one named resource."""

    def __init__(
        self,
        name: str,
        ttl_seconds: int,
        cache: CachePort = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.key = f"lease:{name}"
        self.ttl_seconds = ttl_seconds
        self.cache = cache or cache_adapter
        self.timer = timer
        self.owner: Optional[str] = None
        self.deadline: Optional[float] = None

    @property
    def held(self) -> bool:
        return self.owner is not None

    async def acquire(self) -> bool:
        """
        Try to take the lease without waiting.

        Returns:
            True if this instance now holds the lease
        """
        if self.held:
            return True
        token = uuid.uuid4().hex
        started = self.timer()
        if await self.cache.add(self.key, token, timeout=self.ttl_seconds):
            self.owner = token
            self.deadline = started + self.ttl_seconds
            logger.info("Lease %s acquired", self.name, extra={"lease_owner": token})
            return True
        return False

    async def heartbeat(self) -> bool:
        """Extend the lease while still owned; False if it was lost."""
        if not self.held:
            return False
        if await self.cache.get(self.key) != self.owner:
            logger.warning("Lease %s lost before heartbeat", self.name)
            return False
        started = self.timer()
        touched = await self.cache.touch(self.key, timeout=self.ttl_seconds)
        if touched:
            self.deadline = started + self.ttl_seconds
        return touched

    async def release(self) -> None:
        """
        Release the lease if this instance still owns it.

        Past its own deadline the holder does not delete anything: the
        cache entry has expired, or is about to, and may already belong to
        a new holder.
        """
        if not self.held:
            return
        owner, self.owner = self.owner, None
        if self.timer() >= self.deadline:
            logger.warning("Lease %s outlived its ttl; leaving it to expire", self.name)
            return
        current = await self.cache.get(self.key)
        if current == owner:
            await self.cache.delete(self.key)
            logger.info("Lease %s released", self.name, extra={"lease_owner": owner})
        else:
            # Expired and re-acquired by someone else; leave it alone
            logger.warning("Lease %s expired before release", self.name)
