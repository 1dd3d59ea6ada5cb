from __future__ import annotations

from typing import Optional

from django.db import transaction
from django.shortcuts import get_object_or_404

from apps.audit import AuditContext, audited

from .models import User
from .serializers import UserSerializer


class UserService:
    @staticmethod
    @audited("create_user")
    @transaction.atomic
    def create_user(data: dict, *, context: Optional[AuditContext] = None) -> dict:
        password = data.get("password")
        fields = {key: value for key, value in data.items() if key != "password"}
        user = User.objects.create_user(password=password, **fields)
        return UserSerializer(user).data

    @staticmethod
    def get_user(user_id) -> dict:
        return UserSerializer(get_object_or_404(User, pk=user_id)).data

    @staticmethod
    def list_users() -> list[dict]:
        return UserSerializer(User.objects.order_by("username"), many=True).data

    @staticmethod
    @audited("delete_user")
    @transaction.atomic
    def delete_user(user_id, *, context: Optional[AuditContext] = None) -> None:
        user = get_object_or_404(User, pk=user_id)
        user.delete()
