"""
Celery configuration for background tasks.

Runs the periodic license maintenance jobs.
"""
import os

from celery import Celery
from celery.schedules import crontab

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "PosLicenseService.settings.base")

app = Celery("PosLicenseService")

# Load configuration from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()

app.conf.beat_schedule = {
    "update-expired-licenses": {
        "task": "core.tasks.update_expired_licenses_task",
        "schedule": crontab(minute=0),
    },
    "send-expiration-warnings": {
        "task": "core.tasks.send_expiration_warnings_task",
        "schedule": crontab(minute=0, hour=9),
    },
}
