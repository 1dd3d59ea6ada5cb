from django.urls import path

from .views import (
    SubscriptionActiveAPIView,
    SubscriptionCancelAPIView,
    SubscriptionListCreateAPIView,
    SubscriptionPlanListAPIView,
)


urlpatterns = [
    path("", SubscriptionListCreateAPIView.as_view(), name="subscriptions-list"),
    path("plans/", SubscriptionPlanListAPIView.as_view(), name="subscriptions-plans"),
    path("active/", SubscriptionActiveAPIView.as_view(), name="subscriptions-active"),
    path("<int:pk>/cancel/", SubscriptionCancelAPIView.as_view(), name="subscriptions-cancel"),
]
