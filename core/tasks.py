"""
Celery tasks for background processing.

Periodic license maintenance: the expiry sweep and expiration warnings.
"""
import logging

from asgiref.sync import async_to_sync

from PosLicenseService.celery import app

from core.domain.exceptions import JobAlreadyRunningError

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def update_expired_licenses_task(self):
    """
    Celery task for the expiry sweep.

    A run refused because another one holds the lease is not retried;
    the next scheduled run picks up whatever is left.

    Returns:
        Dict with the sweep result
    """
    from licenses.application.handlers.expiry_sweep_handler import ExpirySweepJob
    from licenses.infrastructure.repositories.django_license_repository import (
        DjangoLicenseRepository,
    )
    from licenses.infrastructure.repositories.django_subscription_repository import (
        DjangoSubscriptionRepository,
    )

    job = ExpirySweepJob(DjangoLicenseRepository(), DjangoSubscriptionRepository())
    try:
        result = async_to_sync(job.run)()
    except JobAlreadyRunningError:
        logger.info("Expiry sweep skipped, another run is in progress")
        return {"skipped": True}
    except Exception as exc:
        logger.error("Expiry sweep task failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries * 60)
    return result.to_dict()


@app.task
def send_expiration_warnings_task():
    """
    Celery task sending expiration warnings.

    Returns:
        Dict with checked and notified counts
    """
    from licenses.application.handlers.expiration_warning_handler import ExpirationWarningJob
    from licenses.infrastructure.notifiers import LoggingExpirationNotifier
    from licenses.infrastructure.repositories.django_license_repository import (
        DjangoLicenseRepository,
    )
    from licenses.infrastructure.repositories.django_subscription_repository import (
        DjangoSubscriptionRepository,
    )

    job = ExpirationWarningJob(
        DjangoLicenseRepository(),
        DjangoSubscriptionRepository(),
        LoggingExpirationNotifier(),
    )
    return async_to_sync(job.run)()
