from __future__ import annotations

from accounts.access_policy import AccessPolicy


class TaskPolicy:
    @staticmethod
    def _authenticated(actor) -> bool:
        return bool(actor and actor.is_authenticated)

    @classmethod
    def can_create_in(cls, actor, project) -> bool:
        if not cls._authenticated(actor):
            return False
        return AccessPolicy.is_admin(actor) or project.owner_id == actor.id

    @classmethod
    def can_edit(cls, actor, task) -> bool:
        if not cls._authenticated(actor):
            return False
        if AccessPolicy.is_admin(actor):
            return True
        return actor.id in {task.project.owner_id, task.created_by_id, task.assigned_to_id}

    @classmethod
    def can_delete(cls, actor, task) -> bool:
        if not cls._authenticated(actor):
            return False
        if AccessPolicy.is_admin(actor):
            return True
        return actor.id in {task.project.owner_id, task.created_by_id}
