from django.urls import path

from .views import MeView, UserDetailAPIView, UserListCreateAPIView


urlpatterns = [
    path("users/", UserListCreateAPIView.as_view(), name="users-list"),
    path("users/me/", MeView.as_view(), name="users-me"),
    path("users/<int:pk>/", UserDetailAPIView.as_view(), name="users-detail"),
]
