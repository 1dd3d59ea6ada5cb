from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from accounts.models import User
from apps.audit.models import AuditLog
from apps.projects.models import Project

from .models import Task
from .services import TaskService


class TasksApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.owner = User.objects.create_user(username="lead_task", password="StrongPass123!")
        self.assignee = User.objects.create_user(username="dev_task", password="StrongPass123!")
        self.outsider = User.objects.create_user(username="out_task", password="StrongPass123!")
        self.project = Project.objects.create(name="Board", owner=self.owner)
        self.task = Task.objects.create(
            title="Existing",
            project=self.project,
            created_by=self.owner,
            assigned_to=self.assignee,
        )

    def test_owner_creates_task(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(
            "/api/v1/tasks/",
            {
                "title": "Task 1",
                "description": "Desc",
                "priority": "HIGH",
                "project_id": self.project.id,
                "assigned_to_id": self.assignee.id,
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "TODO")
        self.assertEqual(response.data["assigned_to"]["username"], "dev_task")

        entry = AuditLog.objects.get(entity_type="TASK", action="CREATED")
        self.assertEqual(entry.entity_id, str(response.data["id"]))
        self.assertEqual(entry.description, "Task created: Task 1")

    def test_outsider_cannot_create_in_foreign_project(self):
        self.client.force_authenticate(user=self.outsider)
        response = self.client.post(
            "/api/v1/tasks/",
            {"title": "Nope", "project_id": self.project.id},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertFalse(AuditLog.objects.exists())

    def test_unknown_assignee_rejected(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(
            "/api/v1/tasks/",
            {"title": "Ghost", "project_id": self.project.id, "assigned_to_id": 999999},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Task.objects.filter(title="Ghost").exists())

    def test_assignee_changes_status(self):
        self.client.force_authenticate(user=self.assignee)
        response = self.client.patch(
            f"/api/v1/tasks/{self.task.id}/status/",
            {"status": "DONE"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "DONE")

        entry = AuditLog.objects.get(entity_type="TASK", action="STATUS_CHANGED")
        self.assertEqual(entry.entity_id, str(self.task.id))
        self.assertEqual(entry.new_state, "DONE")
        self.assertIsNone(entry.previous_state)
        self.assertEqual(entry.actor_name, "dev_task")

    def test_invalid_status_rejected(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.patch(
            f"/api/v1/tasks/{self.task.id}/status/",
            {"status": "SHIPPED"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

        with self.assertRaises(ValidationError):
            TaskService.update_task_status(self.task.id, "SHIPPED", actor=self.owner)
        self.assertFalse(AuditLog.objects.exists())

    def test_outsider_cannot_change_status(self):
        self.client.force_authenticate(user=self.outsider)
        response = self.client.patch(
            f"/api/v1/tasks/{self.task.id}/status/",
            {"status": "DONE"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, Task.Status.TODO)
        self.assertFalse(AuditLog.objects.exists())

    def test_update_task_reassigns(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.patch(
            f"/api/v1/tasks/{self.task.id}/",
            {"title": "Renamed", "assigned_to_id": None},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["title"], "Renamed")
        self.assertIsNone(response.data["assigned_to"])

        entry = AuditLog.objects.get(entity_type="TASK", action="UPDATED")
        self.assertEqual(entry.description, "Task updated: Renamed")

    def test_assignee_cannot_delete(self):
        self.client.force_authenticate(user=self.assignee)
        response = self.client.delete(f"/api/v1/tasks/{self.task.id}/")
        self.assertEqual(response.status_code, 403)
        self.assertTrue(Task.objects.filter(pk=self.task.id).exists())

    def test_owner_deletes_task(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.delete(f"/api/v1/tasks/{self.task.id}/")
        self.assertEqual(response.status_code, 204)

        entry = AuditLog.objects.get(entity_type="TASK", action="DELETED")
        self.assertEqual(entry.entity_id, str(self.task.id))

    def test_my_and_overdue_lists(self):
        overdue = Task.objects.create(
            title="Late",
            project=self.project,
            created_by=self.owner,
            due_date=timezone.localdate() - timedelta(days=1),
        )
        Task.objects.create(
            title="Late but done",
            project=self.project,
            created_by=self.owner,
            status=Task.Status.DONE,
            due_date=timezone.localdate() - timedelta(days=1),
        )

        self.client.force_authenticate(user=self.assignee)
        response = self.client.get("/api/v1/tasks/my/")
        self.assertEqual([row["id"] for row in response.data], [self.task.id])

        response = self.client.get("/api/v1/tasks/overdue/")
        self.assertEqual([row["id"] for row in response.data], [overdue.id])
        self.assertTrue(response.data[0]["is_overdue"])

    def test_list_filters_by_project(self):
        other_project = Project.objects.create(name="Other", owner=self.outsider)
        Task.objects.create(title="Elsewhere", project=other_project, created_by=self.outsider)

        self.client.force_authenticate(user=self.owner)
        response = self.client.get("/api/v1/tasks/", {"project_id": self.project.id})
        self.assertEqual([row["title"] for row in response.data], ["Existing"])
