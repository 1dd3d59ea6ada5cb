from __future__ import annotations

import logging
from typing import Protocol

from django.db import transaction

from .contracts import AuditRecord

trail_logger = logging.getLogger("apps.audit.trail")


class AuditBackend(Protocol):
    def append(self, record: AuditRecord) -> None:
        ...


class DatabaseAuditBackend:
    """
    Primary backend.
    Appends one AuditLog row per record.
    """

    def append(self, record: AuditRecord) -> None:
        from .models import AuditLog

        # Savepoint keeps a failed insert from breaking the caller's transaction.
        with transaction.atomic():
            AuditLog.objects.create(**record.as_fields())


class LoggingAuditBackend:
    """Writes the record to the audit trail logger instead of the database."""

    def append(self, record: AuditRecord) -> None:
        trail_logger.info(
            "%s %s:%s by %s",
            record.action,
            record.entity_type,
            record.entity_id,
            record.actor_name,
            extra={"audit_record": record.as_fields()},
        )


class NoopAuditBackend:
    def append(self, record: AuditRecord) -> None:  # pragma: no cover
        return None
