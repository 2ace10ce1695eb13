"""
Cache abstraction (port).

This module defines the cache interface that can be implemented
with different backends (Redis, Memcached, in-memory, etc.).
"""
from abc import ABC, abstractmethod
from typing import Any, Optional


class CachePort(ABC):
    """
    Abstract cache port.

    This defines the interface for caching operations.
    Implementations can use Redis, Memcached, or in-memory cache.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None:
        """
        Set a value in cache.

        Args:
            key: Cache key
            value: Value to cache
            timeout: Timeout in seconds (None for no expiration)
        """
        pass

    @abstractmethod
    async def add(self, key: str, value: Any, timeout: Optional[int] = None) -> bool:
        """
        Atomically set a value only if the key is absent.

        Args:
            key: Cache key
            value: Value to store
            timeout: Timeout in seconds

        Returns:
            True if the value was stored, False if the key already existed
        """
        pass

    @abstractmethod
    async def touch(self, key: str, timeout: Optional[int] = None) -> bool:
        """
        Reset the expiry of an existing key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a value from cache.

        Args:
            key: Cache key
        """
        pass
