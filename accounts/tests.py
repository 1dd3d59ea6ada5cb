from django.test import TestCase
from rest_framework.test import APIClient

from apps.audit.models import AuditLog

from .access_policy import AccessPolicy
from .models import User


class UserModelTests(TestCase):
    def test_superuser_gets_admin_role(self):
        user = User.objects.create_superuser(username="root", password="StrongPass123!")
        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(user.is_admin_like)

    def test_access_policy(self):
        user = User.objects.create_user(username="plain", password="StrongPass123!")
        admin = User.objects.create_user(username="boss", password="StrongPass123!", role=User.Role.ADMIN)

        self.assertFalse(AccessPolicy.is_admin(user))
        self.assertTrue(AccessPolicy.is_admin(admin))
        self.assertTrue(AccessPolicy.can_view_user(user, user.id))
        self.assertFalse(AccessPolicy.can_view_user(user, admin.id))
        self.assertTrue(AccessPolicy.can_view_user(admin, user.id))


class UsersApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username="employee1",
            email="employee1@example.com",
            password="StrongPass123!",
            first_name="Ann",
            last_name="Lee",
        )
        self.admin = User.objects.create_user(
            username="admin1",
            email="admin1@example.com",
            password="StrongPass123!",
            role=User.Role.ADMIN,
        )

    def test_me_returns_current_user(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/v1/accounts/users/me/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["username"], "employee1")
        self.assertEqual(response.data["full_name"], "Ann Lee")

    def test_admin_creates_user_and_it_is_audited(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/accounts/users/",
            {"username": "newbie", "email": "newbie@example.com", "password": "AnotherPass456!"},
            format="json",
            HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.1",
        )
        self.assertEqual(response.status_code, 201)
        self.assertNotIn("password", response.data)
        self.assertTrue(User.objects.get(username="newbie").check_password("AnotherPass456!"))

        entry = AuditLog.objects.get(entity_type="USER", action="CREATED")
        self.assertEqual(entry.entity_id, str(response.data["id"]))
        self.assertEqual(entry.actor_name, "admin1")
        self.assertEqual(entry.origin_address, "203.0.113.5")

    def test_regular_user_cannot_create_users(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/v1/accounts/users/",
            {"username": "newbie", "email": "newbie@example.com", "password": "AnotherPass456!"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)
        self.assertFalse(AuditLog.objects.exists())

    def test_duplicate_username_rejected(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/v1/accounts/users/",
            {"username": "employee1", "email": "other@example.com", "password": "AnotherPass456!"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("username", response.data)

    def test_user_can_view_self_but_not_others(self):
        self.client.force_authenticate(user=self.user)
        self.assertEqual(self.client.get(f"/api/v1/accounts/users/{self.user.id}/").status_code, 200)
        self.assertEqual(self.client.get(f"/api/v1/accounts/users/{self.admin.id}/").status_code, 403)

    def test_admin_deletes_user(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(f"/api/v1/accounts/users/{self.user.id}/")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(User.objects.filter(pk=self.user.id).exists())

        entry = AuditLog.objects.get(entity_type="USER", action="DELETED")
        self.assertEqual(entry.entity_id, str(self.user.id))
        self.assertIsNone(entry.new_state)

    def test_delete_missing_user_is_not_audited(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete("/api/v1/accounts/users/999999/")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(AuditLog.objects.exists())
