"""
Production settings for PosLicenseService.
"""

import os

from .base import *  # noqa: F403, F401
from .logging import get_logging_config

DEBUG = False

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "").split(",")

# Security settings
SECURE_SSL_REDIRECT = os.environ.get("SECURE_SSL_REDIRECT", "true").lower() == "true"
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

# Production runs behind a load balancer that sets X-Forwarded-For
RATE_LIMIT_TRUST_PROXY = os.environ.get("RATE_LIMIT_TRUST_PROXY", "true").lower() == "true"

LOGGING = get_logging_config("production")
