from __future__ import annotations

from typing import Optional

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import PermissionDenied

from apps.audit import AuditContext, audited

from .models import Project
from .policies import ProjectPolicy
from .serializers import ProjectSerializer

UPDATABLE_FIELDS = ("name", "description", "status")


class ProjectService:
    @staticmethod
    @audited("create_project")
    @transaction.atomic
    def create_project(data: dict, *, owner, context: Optional[AuditContext] = None) -> dict:
        project = Project.objects.create(
            name=data["name"],
            description=data.get("description", ""),
            owner=owner,
        )
        return ProjectSerializer(project).data

    @staticmethod
    def get_project(project_id) -> dict:
        project = get_object_or_404(Project.objects.select_related("owner"), pk=project_id)
        return ProjectSerializer(project).data

    @staticmethod
    def list_projects(*, owner=None) -> list[dict]:
        qs = Project.objects.select_related("owner")
        if owner is not None:
            qs = qs.filter(owner=owner)
        return ProjectSerializer(qs, many=True).data

    @staticmethod
    @audited("update_project")
    @transaction.atomic
    def update_project(project_id, data: dict, *, actor, context: Optional[AuditContext] = None) -> dict:
        project = get_object_or_404(Project.objects.select_for_update(), pk=project_id)
        if not ProjectPolicy.can_manage(actor, project):
            raise PermissionDenied("You do not have permission to update this project.")

        changed = [field for field in UPDATABLE_FIELDS if field in data]
        for field in changed:
            setattr(project, field, data[field])
        if changed:
            project.save(update_fields=[*changed, "updated_at"])
        return ProjectSerializer(project).data

    @staticmethod
    @audited("delete_project")
    @transaction.atomic
    def delete_project(project_id, *, actor, context: Optional[AuditContext] = None) -> None:
        project = get_object_or_404(Project, pk=project_id)
        if not ProjectPolicy.can_manage(actor, project):
            raise PermissionDenied("You do not have permission to delete this project.")
        project.delete()
