from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from apps.audit.models import AuditLog

from .models import Subscription, SubscriptionPlan


class SubscriptionsApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="subscriber", password="StrongPass123!")
        self.other = User.objects.create_user(username="stranger", password="StrongPass123!")
        self.plan = SubscriptionPlan.objects.create(name="Pro", price=Decimal("499.00"), duration_days=30)
        self.retired_plan = SubscriptionPlan.objects.create(
            name="Legacy",
            price=Decimal("99.00"),
            is_active=False,
        )

    def _subscribe(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post("/api/v1/subscriptions/", {"plan_id": self.plan.id}, format="json")
        self.assertEqual(response.status_code, 201)
        return response.data

    def test_plans_lists_only_active(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/v1/subscriptions/plans/")
        self.assertEqual([row["name"] for row in response.data], ["Pro"])

    def test_subscribe_creates_active_subscription(self):
        data = self._subscribe()
        self.assertEqual(data["status"], "ACTIVE")
        self.assertEqual(data["plan"]["name"], "Pro")

        entry = AuditLog.objects.get(entity_type="SUBSCRIPTION", action="CREATED")
        self.assertEqual(entry.entity_id, str(data["id"]))
        self.assertEqual(entry.actor_name, "subscriber")

        response = self.client.get("/api/v1/subscriptions/active/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["id"], data["id"])

    def test_second_live_subscription_rejected(self):
        self._subscribe()
        response = self.client.post("/api/v1/subscriptions/", {"plan_id": self.plan.id}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(Subscription.objects.filter(user=self.user).count(), 1)
        self.assertEqual(AuditLog.objects.filter(action="CREATED").count(), 1)

    def test_inactive_plan_rejected(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post("/api/v1/subscriptions/", {"plan_id": self.retired_plan.id}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertFalse(AuditLog.objects.exists())

    def test_cancel_moves_active_to_cancelled(self):
        data = self._subscribe()

        response = self.client.post(f"/api/v1/subscriptions/{data['id']}/cancel/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "CANCELLED")
        self.assertFalse(response.data["auto_renew"])

        entry = AuditLog.objects.get(entity_type="SUBSCRIPTION", action="STATUS_CHANGED")
        self.assertEqual(entry.entity_id, str(data["id"]))
        self.assertEqual(entry.previous_state, "ACTIVE")
        self.assertEqual(entry.new_state, "CANCELLED")

        response = self.client.get("/api/v1/subscriptions/active/")
        self.assertEqual(response.status_code, 404)

    def test_cancel_twice_rejected(self):
        data = self._subscribe()
        self.client.post(f"/api/v1/subscriptions/{data['id']}/cancel/")

        response = self.client.post(f"/api/v1/subscriptions/{data['id']}/cancel/")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(AuditLog.objects.filter(action="STATUS_CHANGED").count(), 1)

    def test_stranger_cannot_cancel(self):
        data = self._subscribe()
        self.client.force_authenticate(user=self.other)
        response = self.client.post(f"/api/v1/subscriptions/{data['id']}/cancel/")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(Subscription.objects.get(pk=data["id"]).status, Subscription.Status.ACTIVE)

    def test_active_ignores_lapsed_live_subscription(self):
        now = timezone.now()
        Subscription.objects.create(
            user=self.user,
            plan=self.plan,
            status=Subscription.Status.ACTIVE,
            start_date=now - timedelta(days=31),
            end_date=now - timedelta(minutes=1),
        )
        self.client.force_authenticate(user=self.user)
        response = self.client.get("/api/v1/subscriptions/active/")
        self.assertEqual(response.status_code, 404)

    def test_list_shows_own_subscriptions(self):
        self._subscribe()
        self.client.force_authenticate(user=self.other)
        response = self.client.get("/api/v1/subscriptions/")
        self.assertEqual(response.data, [])


class ExpireSubscriptionsTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="expiring", password="StrongPass123!")
        self.plan = SubscriptionPlan.objects.create(name="Basic", price=Decimal("0.00"))

    def test_command_expires_lapsed_subscriptions_without_audit(self):
        now = timezone.now()
        lapsed = Subscription.objects.create(
            user=self.user,
            plan=self.plan,
            status=Subscription.Status.ACTIVE,
            start_date=now - timedelta(days=31),
            end_date=now - timedelta(days=1),
        )
        current = Subscription.objects.create(
            user=self.user,
            plan=self.plan,
            status=Subscription.Status.TRIAL,
            start_date=now,
            end_date=now + timedelta(days=7),
        )

        out = StringIO()
        call_command("expire_subscriptions", stdout=out)

        self.assertIn("expired=1", out.getvalue())
        lapsed.refresh_from_db()
        current.refresh_from_db()
        self.assertEqual(lapsed.status, Subscription.Status.EXPIRED)
        self.assertEqual(current.status, Subscription.Status.TRIAL)
        self.assertFalse(AuditLog.objects.exists())
