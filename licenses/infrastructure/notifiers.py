"""
ExpirationNotifier adapters.
"""
import logging

from licenses.ports.expiration_notifier import ExpirationNotifier, ExpirationWarning

logger = logging.getLogger(__name__)


class LoggingExpirationNotifier(ExpirationNotifier):
    """Writes expiration warnings to the log instead of sending them."""

    async def notify(self, warning: ExpirationWarning) -> bool:
        kind = "free trial" if warning.is_free_trial else "license"
        unit = "day" if warning.days_remaining == 1 else "days"
        logger.warning(
            "Your %s expires in %d %s",
            kind,
            warning.days_remaining,
            unit,
            extra={
                "license_id": str(warning.license_id),
                "customer_phone": warning.customer_phone,
                "location_name": warning.location_name,
                "expires_at": warning.expires_at.isoformat(),
                "days_remaining": warning.days_remaining,
            },
        )
        return True
