"""
Django management command to send expiration warnings.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from licenses.application.handlers.expiration_warning_handler import ExpirationWarningJob
from licenses.infrastructure.notifiers import LoggingExpirationNotifier
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.infrastructure.repositories.django_subscription_repository import (
    DjangoSubscriptionRepository,
)


class Command(BaseCommand):
    """Command to warn customers whose subscription ends soon."""

    help = "Send warnings for subscriptions ending in the configured number of days"

    def handle(self, *args, **options):
        """Execute the command."""
        job = ExpirationWarningJob(
            DjangoLicenseRepository(),
            DjangoSubscriptionRepository(),
            LoggingExpirationNotifier(),
        )
        result = async_to_sync(job.run)()
        # pylint: disable=no-member
        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {result['checked']} subscription(s), sent {result['notified']} warning(s)"
            )
        )
