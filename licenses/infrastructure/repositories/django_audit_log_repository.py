"""
Django ORM writer for the audit trail.
"""
import uuid
from typing import Optional

from asgiref.sync import sync_to_async

from licenses.infrastructure.models import AuditLog


class DjangoAuditLogRepository:
    """Append-only access to the AuditLog table."""

    @sync_to_async
    def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        changes: dict,
        actor: str = "system",
        license_id: Optional[uuid.UUID] = None,
    ) -> AuditLog:
        return AuditLog.objects.create(
            license_id=license_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            changes=changes,
            actor=actor,
        )

    @sync_to_async
    def list_for_license(self, license_id: uuid.UUID) -> list:
        return list(AuditLog.objects.filter(license_id=license_id).order_by("created_at"))
