from __future__ import annotations


class AccessPolicy:
    """Centralized access checks for role and ownership rules."""

    @staticmethod
    def _is_authenticated(user) -> bool:
        return bool(user and user.is_authenticated)

    @classmethod
    def is_admin(cls, user) -> bool:
        return cls._is_authenticated(user) and bool(getattr(user, "is_admin_like", False))

    @classmethod
    def is_self(cls, user, target_id) -> bool:
        return cls._is_authenticated(user) and str(user.pk) == str(target_id)

    @classmethod
    def can_view_user(cls, actor, target_id) -> bool:
        return cls.is_admin(actor) or cls.is_self(actor, target_id)

    @classmethod
    def can_manage_users(cls, actor) -> bool:
        return cls.is_admin(actor)
