"""
Django management command to run the expiry sweep.

Marks licenses whose licensed period has ended as expired. The same job
runs hourly from Celery beat; concurrent runs are refused.
"""

import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from core.domain.exceptions import JobAlreadyRunningError
from licenses.application.handlers.expiry_sweep_handler import ExpirySweepJob
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.infrastructure.repositories.django_subscription_repository import (
    DjangoSubscriptionRepository,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to check and mark expired licenses."""

    help = "Mark licenses whose subscription has ended as expired"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - report without updating licenses",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        dry_run = options["dry_run"]
        job = ExpirySweepJob(DjangoLicenseRepository(), DjangoSubscriptionRepository())

        try:
            result = async_to_sync(job.run)(dry_run=dry_run)
        except JobAlreadyRunningError as e:
            raise CommandError(e.message) from e

        if dry_run:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes were made"))
            self.stdout.write(
                f"{result.updated} license(s) would expire, "
                f"{result.grace_period} subscription(s) would enter grace period"
            )
            return

        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS(result.message))
