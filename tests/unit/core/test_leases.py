"""
Unit tests for cache leases.
"""
import pytest

from core.infrastructure.cache_adapters import cache_adapter
from core.infrastructure.leases import CacheLease


@pytest.mark.asyncio
class TestCacheLease:
    """Tests for CacheLease."""

    async def test_second_holder_is_refused(self):
        """Test only one holder at a time."""
        first = CacheLease("sweep", ttl_seconds=60)
        second = CacheLease("sweep", ttl_seconds=60)

        assert await first.acquire() is True
        assert await second.acquire() is False
        assert first.held and not second.held

    async def test_release_frees_lease(self):
        """Test a released lease can be taken by someone else."""
        first = CacheLease("sweep", ttl_seconds=60)
        second = CacheLease("sweep", ttl_seconds=60)
        await first.acquire()

        await first.release()

        assert first.held is False
        assert await second.acquire() is True

    async def test_names_are_independent(self):
        """Test leases on different names do not conflict."""
        assert await CacheLease("a", 60).acquire() is True
        assert await CacheLease("b", 60).acquire() is True

    async def test_heartbeat(self):
        """Test heartbeat succeeds only while the lease is owned."""
        lease = CacheLease("sweep", ttl_seconds=60)
        assert await lease.heartbeat() is False

        await lease.acquire()
        assert await lease.heartbeat() is True

        await cache_adapter.set(lease.key, "someone-else", timeout=60)
        assert await lease.heartbeat() is False

    async def test_release_does_not_steal(self):
        """Test releasing an expired lease leaves the new owner alone."""
        lease = CacheLease("sweep", ttl_seconds=60)
        await lease.acquire()
        await cache_adapter.set(lease.key, "someone-else", timeout=60)

        await lease.release()

        assert await cache_adapter.get(lease.key) == "someone-else"

    async def test_release_after_ttl_leaves_key(self):
        """Test a holder past its ttl never deletes what may be a successor's lease."""
        now = [1000.0]
        lease = CacheLease("sweep", ttl_seconds=60, timer=lambda: now[0])
        await lease.acquire()
        now[0] += 61

        await lease.release()

        assert lease.held is False
        assert await cache_adapter.get(lease.key) is not None

    async def test_heartbeat_moves_deadline(self):
        """Test a heartbeat keeps a long-running holder able to release."""
        now = [1000.0]
        lease = CacheLease("sweep", ttl_seconds=60, timer=lambda: now[0])
        await lease.acquire()
        now[0] += 50
        assert await lease.heartbeat() is True
        now[0] += 50

        await lease.release()

        assert await cache_adapter.get(lease.key) is None
