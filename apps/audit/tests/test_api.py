from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from apps.audit import log_activity
from apps.audit.events import AuditAction, EntityType
from apps.audit.models import AuditLog


class AuditLogApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="reader", password="StrongPass123!")
        self.admin = User.objects.create_user(
            username="auditor",
            password="StrongPass123!",
            role=User.Role.ADMIN,
        )
        log_activity(entity_type=EntityType.TASK, entity_id="5", action=AuditAction.CREATED)
        log_activity(
            entity_type=EntityType.TASK,
            entity_id="5",
            action=AuditAction.STATUS_CHANGED,
            new_state="DONE",
        )
        log_activity(entity_type=EntityType.PROJECT, entity_id="2", action=AuditAction.DELETED)

    def test_list_requires_admin(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/v1/audit-logs/")
        self.assertEqual(response.status_code, 403)

    def test_list_is_paginated_and_filtered(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/audit-logs/", {"size": 2})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 3)
        self.assertEqual(len(response.data["results"]), 2)

        response = self.client.get("/api/v1/audit-logs/", {"entity_type": "TASK", "action": "STATUS_CHANGED"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["new_state"], "DONE")

    def test_list_rejects_inverted_date_range(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(
            "/api/v1/audit-logs/",
            {"start_date": "2024-02-01T00:00:00Z", "end_date": "2024-01-01T00:00:00Z"},
        )
        self.assertEqual(response.status_code, 400)

    def test_entity_timeline_newest_first(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/v1/audit-logs/entity/task/5/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["action"] for row in response.data], ["STATUS_CHANGED", "CREATED"])

    def test_entity_timeline_rejects_unknown_type(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/v1/audit-logs/entity/invoice/5/")
        self.assertEqual(response.status_code, 400)

    def test_recent_activity_respects_limit(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/v1/audit-logs/recent/", {"hours": 1, "limit": 2})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 2)

        response = self.client.get("/api/v1/audit-logs/recent/", {"limit": "many"})
        self.assertEqual(response.status_code, 400)

    def test_counts(self):
        AuditLog.objects.create(
            entity_type=EntityType.PROJECT,
            entity_id="2",
            action=AuditAction.UPDATED,
            actor_id="42",
            actor_name="someone",
        )
        self.client.force_authenticate(user=self.user)

        response = self.client.get("/api/v1/audit-logs/count/entity/TASK/5/")
        self.assertEqual(response.data, {"count": 2})

        response = self.client.get("/api/v1/audit-logs/count/user/42/")
        self.assertEqual(response.data, {"count": 1})

        response = self.client.get("/api/v1/audit-logs/user/42/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["results"][0]["actor_name"], "someone")

    def test_requires_authentication(self):
        response = self.client.get("/api/v1/audit-logs/recent/")
        self.assertEqual(response.status_code, 401)
