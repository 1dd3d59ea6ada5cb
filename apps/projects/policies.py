from __future__ import annotations

from accounts.access_policy import AccessPolicy


class ProjectPolicy:
    @staticmethod
    def can_manage(actor, project) -> bool:
        if not actor or not actor.is_authenticated:
            return False
        if AccessPolicy.is_admin(actor):
            return True
        return project.owner_id == actor.id
