import json
from decimal import Decimal

from django.http import Http404
from django.test import TestCase

from accounts.models import User
from accounts.services import UserService
from apps.audit import AuditContext
from apps.audit.contracts import ActorContext, RequestContext
from apps.audit.events import AuditAction, EntityType
from apps.audit.models import AuditLog
from apps.projects.services import ProjectService
from apps.subscriptions.models import SubscriptionPlan
from apps.subscriptions.services import SubscriptionService
from apps.tasks.services import TaskService


class AuditedOperationsTests(TestCase):
    """Every bound service operation leaves exactly one row behind."""

    def setUp(self):
        self.admin = User.objects.create_user(
            username="audit_admin",
            password="StrongPass123!",
            role=User.Role.ADMIN,
        )
        self.context = AuditContext(
            actor=ActorContext.from_user(self.admin),
            request=RequestContext(remote_addr="127.0.0.1", user_agent="tests/1.0"),
        )
        self.plan = SubscriptionPlan.objects.create(name="Pro", price=Decimal("499.00"), duration_days=30)

    def _single_entry(self, entity_type, action):
        entries = AuditLog.objects.filter(entity_type=entity_type, action=action)
        self.assertEqual(entries.count(), 1)
        entry = entries.get()
        self.assertEqual(entry.actor_name, "audit_admin")
        self.assertIsNone(entry.actor_id)
        self.assertEqual(entry.origin_address, "127.0.0.1")
        return entry

    def test_project_lifecycle(self):
        project = ProjectService.create_project({"name": "Apollo"}, owner=self.admin, context=self.context)
        entry = self._single_entry(EntityType.PROJECT, AuditAction.CREATED)
        self.assertEqual(entry.entity_id, str(project["id"]))
        self.assertEqual(entry.description, "Project created: Apollo")
        self.assertIsNone(entry.previous_state)
        self.assertEqual(json.loads(entry.new_state)["name"], "Apollo")

        ProjectService.update_project(
            project["id"], {"name": "Apollo 2"}, actor=self.admin, context=self.context
        )
        entry = self._single_entry(EntityType.PROJECT, AuditAction.UPDATED)
        self.assertEqual(entry.description, "Project updated: Apollo 2")
        self.assertEqual(json.loads(entry.previous_state), {"name": "Apollo 2"})
        self.assertEqual(json.loads(entry.new_state)["name"], "Apollo 2")

        ProjectService.delete_project(project["id"], actor=self.admin, context=self.context)
        entry = self._single_entry(EntityType.PROJECT, AuditAction.DELETED)
        self.assertEqual(entry.entity_id, str(project["id"]))
        self.assertEqual(entry.description, "Project deleted")
        self.assertIsNone(entry.previous_state)
        self.assertIsNone(entry.new_state)

        self.assertEqual(AuditLog.objects.count(), 3)

    def test_task_lifecycle(self):
        project = ProjectService.create_project({"name": "Apollo"}, owner=self.admin, context=None)
        task = TaskService.create_task(
            {"title": "Write docs", "project_id": project["id"]},
            creator=self.admin,
            context=self.context,
        )
        entry = self._single_entry(EntityType.TASK, AuditAction.CREATED)
        self.assertEqual(entry.description, "Task created: Write docs")
        self.assertEqual(entry.entity_id, str(task["id"]))

        TaskService.update_task(task["id"], {"priority": "HIGH"}, actor=self.admin, context=self.context)
        entry = self._single_entry(EntityType.TASK, AuditAction.UPDATED)
        self.assertEqual(json.loads(entry.new_state)["priority"], "HIGH")

        TaskService.update_task_status(task["id"], "DONE", actor=self.admin, context=self.context)
        entry = self._single_entry(EntityType.TASK, AuditAction.STATUS_CHANGED)
        self.assertEqual(entry.entity_id, str(task["id"]))
        self.assertEqual(entry.new_state, "DONE")
        self.assertIsNone(entry.previous_state)

        TaskService.delete_task(task["id"], actor=self.admin, context=self.context)
        entry = self._single_entry(EntityType.TASK, AuditAction.DELETED)
        self.assertEqual(entry.description, "Task deleted")

        self.assertEqual(AuditLog.objects.filter(entity_type=EntityType.TASK).count(), 4)

    def test_user_lifecycle(self):
        user = UserService.create_user(
            {"username": "bob", "email": "bob@example.com", "password": "StrongPass123!"},
            context=self.context,
        )
        entry = self._single_entry(EntityType.USER, AuditAction.CREATED)
        self.assertEqual(entry.description, "User created: bob")
        self.assertNotIn("password", json.loads(entry.new_state))

        UserService.delete_user(user["id"], context=self.context)
        entry = self._single_entry(EntityType.USER, AuditAction.DELETED)
        self.assertEqual(entry.entity_id, str(user["id"]))
        self.assertEqual(entry.description, "User deleted")

    def test_subscription_lifecycle(self):
        subscription = SubscriptionService.create_subscription(
            {"plan_id": self.plan.id}, user=self.admin, context=self.context
        )
        entry = self._single_entry(EntityType.SUBSCRIPTION, AuditAction.CREATED)
        self.assertEqual(entry.description, "Subscription created")
        self.assertEqual(json.loads(entry.new_state)["status"], "ACTIVE")

        SubscriptionService.cancel_subscription(subscription["id"], user=self.admin, context=self.context)
        entry = self._single_entry(EntityType.SUBSCRIPTION, AuditAction.STATUS_CHANGED)
        self.assertEqual(entry.entity_id, str(subscription["id"]))
        self.assertEqual(entry.previous_state, "ACTIVE")
        self.assertEqual(entry.new_state, "CANCELLED")
        self.assertEqual(entry.description, "Subscription cancelled")

    def test_rejected_operation_writes_nothing(self):
        with self.assertRaises(Http404):
            TaskService.update_task_status(999, "DONE", actor=self.admin, context=self.context)
        self.assertEqual(AuditLog.objects.count(), 0)
