"""
App configuration for POS License Service.
"""

import logging
import sys

from django.apps import AppConfig

logger = logging.getLogger(__name__)

# Commands that never serve traffic
SKIP_SETUP_COMMANDS = ("migrate", "makemigrations", "collectstatic", "check")


class PosLicenseServiceConfig(AppConfig):
    """App configuration for PosLicenseService."""

    name = "PosLicenseService"
    verbose_name = "POS License Service"

    def ready(self):
        """Register event handlers and tracing once apps are loaded."""
        from core.infrastructure.event_handlers import register_event_handlers

        # Registers the OpenAPI security scheme with drf-spectacular
        import core.schema_extensions  # noqa: F401

        register_event_handlers()

        if len(sys.argv) > 1 and sys.argv[1] in SKIP_SETUP_COMMANDS:
            return
        self.setup_observability()

    def setup_observability(self):
        """Setup observability after apps are ready."""
        from core.instrumentation import setup_opentelemetry

        try:
            setup_opentelemetry()
        except Exception as e:  # pylint: disable=broad-exception-caught
            # Tracing must never keep the service from starting
            logger.warning("Failed to setup OpenTelemetry: %s", e)
