from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings

from .backends import (
    AuditBackend,
    DatabaseAuditBackend,
    LoggingAuditBackend,
    NoopAuditBackend,
)
from .context import resolve_actor, resolve_origin
from .contracts import AuditContext, AuditRecord
from .exceptions import AuditContextError, AuditPersistenceError

logger = logging.getLogger(__name__)


class AuditRecordBuilder:
    """Resolves actor and origin and assembles an immutable AuditRecord."""

    @staticmethod
    def build(
        *,
        entity_type: str,
        entity_id,
        action: str,
        description: str = "",
        previous_state: Optional[str] = None,
        new_state: Optional[str] = None,
        context: Optional[AuditContext] = None,
    ) -> AuditRecord:
        context = context or AuditContext.system()
        try:
            actor_id, actor_name = resolve_actor(context.actor)
        except Exception as exc:
            raise AuditContextError(f"Cannot resolve actor: {exc}") from exc
        origin_address, origin_agent = resolve_origin(context.request)

        return AuditRecord(
            entity_type=str(entity_type),
            entity_id=str(entity_id),
            action=str(action),
            actor_id=actor_id,
            actor_name=actor_name,
            previous_state=previous_state,
            new_state=new_state,
            description=description or "",
            origin_address=origin_address,
            origin_agent=origin_agent,
        )


class AuditService:
    """
    Unified entrypoint for audit storage.

    Modes:
    - primary_only (default): write only to primary backend
    - dual_write: write to primary and secondary backends
    """

    def __init__(
        self,
        primary_backend: Optional[AuditBackend] = None,
        secondary_backend: Optional[AuditBackend] = None,
        mode: Optional[str] = None,
    ) -> None:
        self.primary_backend = primary_backend or self._build_backend(
            getattr(settings, "AUDIT_PRIMARY_BACKEND", "database")
        )
        self.secondary_backend = secondary_backend or self._build_backend(
            getattr(settings, "AUDIT_SECONDARY_BACKEND", "logging")
        )
        self.mode = mode or getattr(settings, "AUDIT_WRITE_MODE", "primary_only")

    def _build_backend(self, name: str) -> AuditBackend:
        if name == "database":
            return DatabaseAuditBackend()
        if name == "logging":
            return LoggingAuditBackend()
        return NoopAuditBackend()

    def write(self, record: AuditRecord) -> None:
        try:
            self.primary_backend.append(record)
        except Exception as exc:
            raise AuditPersistenceError(f"Audit backend failed: {exc}") from exc

        if self.mode == "dual_write":
            # The primary write is durable at this point.
            try:
                self.secondary_backend.append(record)
            except Exception as exc:
                logger.warning(
                    "Secondary audit backend failed for %s %s:%s: %s",
                    record.action,
                    record.entity_type,
                    record.entity_id,
                    exc,
                )
        logger.debug(
            "Audit log created: %s %s by user %s",
            record.action,
            record.entity_type,
            record.actor_name,
        )


def log_activity(
    *,
    entity_type: str,
    entity_id,
    action: str,
    description: str = "",
    previous_state: Optional[str] = None,
    new_state: Optional[str] = None,
    context: Optional[AuditContext] = None,
) -> bool:
    """Build and store one record; failures are logged and reported as False."""
    try:
        record = AuditRecordBuilder.build(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            description=description,
            previous_state=previous_state,
            new_state=new_state,
            context=context,
        )
        AuditService().write(record)
    except Exception as exc:
        # Audit must not break the main request flow.
        logger.exception("Failed to log activity: %s", exc)
        return False
    return True
