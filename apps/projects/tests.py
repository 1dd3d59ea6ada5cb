import json

from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from apps.audit.models import AuditLog

from .models import Project


class ProjectsApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.owner = User.objects.create_user(username="owner", password="StrongPass123!")
        self.other = User.objects.create_user(username="other", password="StrongPass123!")
        self.admin = User.objects.create_user(
            username="admin_projects",
            password="StrongPass123!",
            role=User.Role.ADMIN,
        )
        self.project = Project.objects.create(name="Existing", owner=self.owner)
        Project.objects.create(name="Someone else's", owner=self.other)

    def test_create_project(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(
            "/api/v1/projects/",
            {"name": "Apollo", "description": "Moon"},
            format="json",
            REMOTE_ADDR="198.51.100.7",
            HTTP_USER_AGENT="tests/1.0",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["owner"]["username"], "owner")
        self.assertEqual(response.data["status"], "ACTIVE")

        entry = AuditLog.objects.get(entity_type="PROJECT", action="CREATED")
        self.assertEqual(entry.entity_id, str(response.data["id"]))
        self.assertEqual(entry.description, "Project created: Apollo")
        self.assertEqual(entry.actor_name, "owner")
        self.assertEqual(entry.origin_address, "198.51.100.7")
        self.assertEqual(entry.origin_agent, "tests/1.0")

    def test_create_requires_name(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post("/api/v1/projects/", {"description": "No name"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertFalse(AuditLog.objects.exists())

    def test_list_own_projects_and_admin_all(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get("/api/v1/projects/")
        self.assertEqual([row["name"] for row in response.data], ["Existing"])

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/projects/", {"all": "1"})
        self.assertEqual(len(response.data), 2)

    def test_owner_updates_project(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.patch(
            f"/api/v1/projects/{self.project.id}/",
            {"status": "COMPLETED"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "COMPLETED")

        entry = AuditLog.objects.get(entity_type="PROJECT", action="UPDATED")
        self.assertEqual(json.loads(entry.previous_state), {"status": "COMPLETED"})
        self.assertEqual(json.loads(entry.new_state)["status"], "COMPLETED")

    def test_non_owner_cannot_update(self):
        self.client.force_authenticate(user=self.other)
        response = self.client.patch(
            f"/api/v1/projects/{self.project.id}/",
            {"name": "Hijacked"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.project.refresh_from_db()
        self.assertEqual(self.project.name, "Existing")
        self.assertFalse(AuditLog.objects.exists())

    def test_admin_deletes_project(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/v1/projects/{self.project.id}/")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Project.objects.filter(pk=self.project.id).exists())

        entry = AuditLog.objects.get(entity_type="PROJECT", action="DELETED")
        self.assertEqual(entry.entity_id, str(self.project.id))
        self.assertEqual(entry.actor_name, "admin_projects")

    def test_get_missing_project(self):
        self.client.force_authenticate(user=self.owner)
        self.assertEqual(self.client.get("/api/v1/projects/999999/").status_code, 404)
