from django.urls import path

from .views import (
    TaskDetailAPIView,
    TaskListCreateAPIView,
    TaskMyAPIView,
    TaskOverdueAPIView,
    TaskStatusAPIView,
)


urlpatterns = [
    path("", TaskListCreateAPIView.as_view(), name="tasks-list"),
    path("my/", TaskMyAPIView.as_view(), name="tasks-my"),
    path("overdue/", TaskOverdueAPIView.as_view(), name="tasks-overdue"),
    path("<int:pk>/", TaskDetailAPIView.as_view(), name="tasks-detail"),
    path("<int:pk>/status/", TaskStatusAPIView.as_view(), name="tasks-status"),
]
