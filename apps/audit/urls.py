from django.urls import path

from .views import (
    AuditLogListAPIView,
    EntityActivityCountAPIView,
    EntityTimelineAPIView,
    RecentActivityAPIView,
    UserActivityAPIView,
    UserActivityCountAPIView,
)


urlpatterns = [
    path("", AuditLogListAPIView.as_view(), name="audit-logs"),
    path("recent/", RecentActivityAPIView.as_view(), name="audit-logs-recent"),
    path("entity/<str:entity_type>/<str:entity_id>/", EntityTimelineAPIView.as_view(), name="audit-logs-entity"),
    path("user/<str:actor_id>/", UserActivityAPIView.as_view(), name="audit-logs-user"),
    path(
        "count/entity/<str:entity_type>/<str:entity_id>/",
        EntityActivityCountAPIView.as_view(),
        name="audit-logs-count-entity",
    ),
    path("count/user/<str:actor_id>/", UserActivityCountAPIView.as_view(), name="audit-logs-count-user"),
]
