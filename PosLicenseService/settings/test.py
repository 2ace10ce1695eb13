"""
Test settings for PosLicenseService.
"""

from .base import *  # noqa: F403, F401

DEBUG = False

# File-backed SQLite: every thread gets its own connection, and concurrent
# writers wait on the busy timeout instead of failing on a shared-cache lock
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test.sqlite3",  # noqa: F405
        "OPTIONS": {"timeout": 20},
        "TEST": {"NAME": BASE_DIR / "test_pos_license.sqlite3"},  # noqa: F405
    }
}

# Use in-memory cache for tests
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Password hashers for faster tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

JWT_SECRET = "test-jwt-secret"

CELERY_TASK_ALWAYS_EAGER = True

# Disable logging during tests
LOGGING_CONFIG = None
