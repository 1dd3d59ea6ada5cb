"""Audit trail for project, task, user and subscription writes."""

from .contracts import AuditContext
from .events import AuditAction, EntityType
from .interception import audited
from .services import log_activity

__all__ = ["AuditAction", "AuditContext", "EntityType", "audited", "log_activity"]
