from __future__ import annotations

from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from apps.audit import AuditContext, audited
from apps.projects.models import Project

from .models import Task
from .policies import TaskPolicy
from .serializers import TaskSerializer


User = get_user_model()
UPDATABLE_FIELDS = ("title", "description", "status", "priority", "due_date")


def _resolve_assignee(user_id):
    if user_id is None:
        return None
    assignee = User.objects.filter(pk=user_id, is_active=True).first()
    if assignee is None:
        raise ValidationError({"assigned_to_id": "Assignee not found."})
    return assignee


def _task_queryset():
    return Task.objects.select_related("project", "assigned_to", "created_by")


class TaskService:
    @staticmethod
    @audited("create_task")
    @transaction.atomic
    def create_task(data: dict, *, creator, context: Optional[AuditContext] = None) -> dict:
        project = get_object_or_404(Project, pk=data["project_id"])
        if not TaskPolicy.can_create_in(creator, project):
            raise PermissionDenied("You do not have permission to add tasks to this project.")

        task = Task.objects.create(
            title=data["title"],
            description=data.get("description", ""),
            priority=data.get("priority", Task.Priority.MEDIUM),
            project=project,
            assigned_to=_resolve_assignee(data.get("assigned_to_id")),
            created_by=creator,
            due_date=data.get("due_date"),
        )
        return TaskSerializer(task).data

    @staticmethod
    def get_task(task_id) -> dict:
        return TaskSerializer(get_object_or_404(_task_queryset(), pk=task_id)).data

    @staticmethod
    def list_tasks(*, project_id=None, assigned_to_id=None, status=None, priority=None) -> list[dict]:
        qs = _task_queryset()
        if project_id is not None:
            qs = qs.filter(project_id=project_id)
        if assigned_to_id is not None:
            qs = qs.filter(assigned_to_id=assigned_to_id)
        if status:
            qs = qs.filter(status=status)
        if priority:
            qs = qs.filter(priority=priority)
        return TaskSerializer(qs, many=True).data

    @staticmethod
    def list_overdue_tasks() -> list[dict]:
        qs = _task_queryset().filter(due_date__lt=timezone.localdate()).exclude(status=Task.Status.DONE)
        return TaskSerializer(qs, many=True).data

    @staticmethod
    @audited("update_task")
    @transaction.atomic
    def update_task(task_id, data: dict, *, actor, context: Optional[AuditContext] = None) -> dict:
        task = get_object_or_404(_task_queryset(), pk=task_id)
        if not TaskPolicy.can_edit(actor, task):
            raise PermissionDenied("You do not have permission to update this task.")

        changed = [field for field in UPDATABLE_FIELDS if field in data]
        for field in changed:
            setattr(task, field, data[field])
        if "assigned_to_id" in data:
            task.assigned_to = _resolve_assignee(data["assigned_to_id"])
            changed.append("assigned_to")
        if changed:
            task.save(update_fields=[*changed, "updated_at"])
        return TaskSerializer(task).data

    @staticmethod
    @audited("update_task_status")
    @transaction.atomic
    def update_task_status(task_id, status, *, actor, context: Optional[AuditContext] = None) -> dict:
        if status not in Task.Status.values:
            raise ValidationError({"status": f"Unknown status: {status}."})
        task = get_object_or_404(_task_queryset(), pk=task_id)
        if not TaskPolicy.can_edit(actor, task):
            raise PermissionDenied("You do not have permission to update this task.")

        task.status = status
        task.save(update_fields=["status", "updated_at"])
        return TaskSerializer(task).data

    @staticmethod
    @audited("delete_task")
    @transaction.atomic
    def delete_task(task_id, *, actor, context: Optional[AuditContext] = None) -> None:
        task = get_object_or_404(Task.objects.select_related("project"), pk=task_id)
        if not TaskPolicy.can_delete(actor, task):
            raise PermissionDenied("You do not have permission to delete this task.")
        task.delete()
