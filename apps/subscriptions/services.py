from __future__ import annotations

from datetime import timedelta
from typing import Optional

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied, ValidationError

from accounts.access_policy import AccessPolicy
from apps.audit import AuditContext, audited

from .models import Subscription, SubscriptionPlan
from .serializers import SubscriptionSerializer


def _subscription_queryset():
    return Subscription.objects.select_related("plan", "user")


class SubscriptionService:
    @staticmethod
    @audited("create_subscription")
    @transaction.atomic
    def create_subscription(data: dict, *, user, context: Optional[AuditContext] = None) -> dict:
        plan = get_object_or_404(SubscriptionPlan, pk=data["plan_id"])
        if not plan.is_active:
            raise ValidationError({"plan_id": "Subscription plan is not available."})
        if Subscription.objects.filter(user=user, status__in=Subscription.LIVE_STATUSES).exists():
            raise ValidationError({"detail": "User already has an active subscription."})

        now = timezone.now()
        subscription = Subscription.objects.create(
            user=user,
            plan=plan,
            status=Subscription.Status.ACTIVE,
            start_date=now,
            end_date=now + timedelta(days=plan.duration_days),
            auto_renew=data.get("auto_renew", True),
        )
        return SubscriptionSerializer(subscription).data

    @staticmethod
    def get_subscription(subscription_id) -> dict:
        return SubscriptionSerializer(get_object_or_404(_subscription_queryset(), pk=subscription_id)).data

    @staticmethod
    def get_active_subscription(user) -> Optional[dict]:
        subscription = (
            _subscription_queryset()
            .filter(user=user, status__in=Subscription.LIVE_STATUSES, end_date__gt=timezone.now())
            .first()
        )
        if subscription is None:
            return None
        return SubscriptionSerializer(subscription).data

    @staticmethod
    def list_user_subscriptions(user) -> list[dict]:
        return SubscriptionSerializer(_subscription_queryset().filter(user=user), many=True).data

    @staticmethod
    @audited("cancel_subscription")
    @transaction.atomic
    def cancel_subscription(subscription_id, *, user, context: Optional[AuditContext] = None) -> dict:
        subscription = get_object_or_404(_subscription_queryset(), pk=subscription_id)
        if subscription.user_id != user.id and not AccessPolicy.is_admin(user):
            raise PermissionDenied("You do not have permission to cancel this subscription.")
        if not subscription.is_live:
            raise ValidationError({"detail": "Only active subscriptions can be cancelled."})

        subscription.status = Subscription.Status.CANCELLED
        subscription.auto_renew = False
        subscription.save(update_fields=["status", "auto_renew", "updated_at"])
        return SubscriptionSerializer(subscription).data

    @staticmethod
    @transaction.atomic
    def expire_subscriptions(now=None) -> int:
        now = now or timezone.now()
        return Subscription.objects.filter(
            status__in=Subscription.LIVE_STATUSES,
            end_date__lte=now,
        ).update(status=Subscription.Status.EXPIRED, updated_at=now)
