"""
License cache service.

Caches status evaluations served to POS clients by license key.
"""
import hashlib
import logging
from typing import Optional

from core.infrastructure.cache_adapters import cache_adapter
from core.metrics import cache_hits_total, cache_misses_total

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
CACHE_TTL_LICENSE_STATUS = 60  # 1 minute


class LicenseCacheService:
    """Service for caching license-related data."""

    @staticmethod
    def _license_status_key(license_key: str) -> str:
        """Generate cache key for license status."""
        key_hash = hashlib.sha256(license_key.encode()).hexdigest()[:16]
        return f"license:status:{key_hash}"

    @staticmethod
    async def get_license_status(license_key: str) -> Optional[dict]:
        """
        Get cached license status.

        Args:
            license_key: Canonical license key

        Returns:
            Cached status payload or None
        """
        status = await cache_adapter.get(LicenseCacheService._license_status_key(license_key))
        if status is None:
            cache_misses_total.labels(cache_key="license_status").inc()
        else:
            cache_hits_total.labels(cache_key="license_status").inc()
        return status

    @staticmethod
    async def set_license_status(license_key: str, status: dict, ttl: int = None) -> None:
        """
        Cache license status.

        Args:
            license_key: Canonical license key
            status: Status payload to cache
            ttl: Time to live in seconds
        """
        await cache_adapter.set(
            LicenseCacheService._license_status_key(license_key),
            status,
            timeout=ttl or CACHE_TTL_LICENSE_STATUS,
        )

    @staticmethod
    async def invalidate_license_status(license_key: str) -> None:
        """
        Invalidate cached license status.

        Args:
            license_key: Canonical license key
        """
        await cache_adapter.delete(LicenseCacheService._license_status_key(license_key))
        logger.info("Invalidated license status cache: %s...", license_key[:4])
