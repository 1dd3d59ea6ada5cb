from datetime import timedelta

from django.core.exceptions import PermissionDenied
from django.db import models
from django.utils import timezone

from .events import SYSTEM_ACTOR, AuditAction, EntityType


class AuditLogQuerySet(models.QuerySet):
    def for_entity(self, entity_type, entity_id):
        return self.filter(entity_type=entity_type, entity_id=str(entity_id))

    def for_actor(self, actor_id):
        return self.filter(actor_id=str(actor_id))

    def for_action(self, action):
        return self.filter(action=action)

    def between(self, start=None, end=None):
        qs = self
        if start is not None:
            qs = qs.filter(created_at__gte=start)
        if end is not None:
            qs = qs.filter(created_at__lte=end)
        return qs

    def since(self, hours: int):
        return self.filter(created_at__gte=timezone.now() - timedelta(hours=hours))


class AuditLog(models.Model):
    """
    Append-only audit trail row.
    Written only through apps.audit backends; never updated or deleted.
    """

    entity_type = models.CharField("Entity type", max_length=30, choices=EntityType.choices)
    entity_id = models.CharField("Entity ID", max_length=100)
    action = models.CharField("Action", max_length=30, choices=AuditAction.choices)

    actor_id = models.CharField("Actor ID", max_length=100, null=True, blank=True)
    actor_name = models.CharField("Actor", max_length=150, default=SYSTEM_ACTOR)

    previous_state = models.TextField("Previous state", null=True, blank=True)
    new_state = models.TextField("New state", null=True, blank=True)
    description = models.CharField("Description", max_length=500, blank=True)

    origin_address = models.CharField("Origin address", max_length=45, null=True, blank=True)
    origin_agent = models.CharField("Origin agent", max_length=500, null=True, blank=True)
    created_at = models.DateTimeField("Created", auto_now_add=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        verbose_name = "Audit log"
        verbose_name_plural = "Audit log"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="idx_audit_entity"),
            models.Index(fields=["actor_id"], name="idx_audit_actor"),
            models.Index(fields=["action"], name="idx_audit_action"),
            models.Index(fields=["created_at"], name="idx_audit_created"),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise PermissionDenied("Audit log entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Audit log entries cannot be deleted.")

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id} by {self.actor_name}"
