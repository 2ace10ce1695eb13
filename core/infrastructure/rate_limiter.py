"""
Fixed-window rate limiter backed by the Django cache.

Counters live in the configured cache so every worker process shares
them (Redis in production). Windows are aligned to wall-clock
boundaries: floor(now / window).
"""

import hashlib
import logging
import math
from dataclasses import dataclass

from django.core.cache import cache as default_cache

from core.domain.clock import Clock, system_clock
from core.domain.rate_limit import RateLimitTier, RequestIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of counting one request against one tier."""

    tier: RateLimitTier
    allowed: bool
    count: int
    remaining: int
    reset_at: int
    retry_after: int
    counter_key: str

    @property
    def limit(self) -> int:
        return self.tier.limit


class FixedWindowRateLimiter:
    """Counts requests per (tier, key, window) in a shared cache."""

    def __init__(self, cache_backend=None, clock: Clock = None):
        self.cache = cache_backend or default_cache
        self.clock = clock or system_clock

    def _counter_key(self, tier: RateLimitTier, key: str, window_index: int) -> str:
        # Hash the key so raw IPs and admin names never land in the cache
        key_hash = hashlib.sha256(key.encode()).hexdigest()[:16]
        return f"rate_limit:{tier.name}:{key_hash}:{window_index}"

    def _increment(self, counter_key: str, timeout: int) -> int:
        try:
            return self.cache.incr(counter_key, 1)
        except ValueError:
            # add() only succeeds for the first creator; everyone else increments
            if self.cache.add(counter_key, 1, timeout=timeout):
                return 1
            return self.cache.incr(counter_key, 1)

    def hit(self, tier: RateLimitTier, identity: RequestIdentity) -> RateLimitDecision:
        """
        Count one request and decide whether it is admitted.

        Args:
            tier: Tier to count against
            identity: Client IP and optional admin identity

        Returns:
            RateLimitDecision for this request
        """
        now = self.clock.now().timestamp()
        window_index = int(now // tier.window_seconds)
        reset_at = (window_index + 1) * tier.window_seconds
        counter_key = self._counter_key(tier, tier.key_strategy.derive(identity), window_index)

        count = self._increment(counter_key, tier.window_seconds)
        allowed = count <= tier.limit
        if not allowed:
            logger.debug("Rate limit tier %s exhausted (%s/%s)", tier.name, count, tier.limit)

        return RateLimitDecision(
            tier=tier,
            allowed=allowed,
            count=count,
            remaining=max(0, tier.limit - count),
            reset_at=reset_at,
            retry_after=max(0, int(math.ceil(reset_at - now))),
            counter_key=counter_key,
        )

    def refund(self, decision: RateLimitDecision) -> None:
        """Give back a counted request (used for successful logins)."""
        try:
            self.cache.decr(decision.counter_key, 1)
        except ValueError:
            # Window already rolled over and the counter expired
            logger.debug("Rate limit counter %s gone before refund", decision.counter_key)
