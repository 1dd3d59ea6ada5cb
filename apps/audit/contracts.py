from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .events import SYSTEM_ACTOR, AuditAction


@dataclass(frozen=True)
class AuditRecord:
    entity_type: str
    entity_id: str
    action: str
    actor_name: str = SYSTEM_ACTOR
    actor_id: Optional[str] = None
    previous_state: Optional[str] = None
    new_state: Optional[str] = None
    description: str = ""
    origin_address: Optional[str] = None
    origin_agent: Optional[str] = None

    def __post_init__(self):
        if not self.entity_type or not self.action:
            raise ValueError("Audit record needs an entity type and an action.")
        if not self.actor_name:
            raise ValueError("Audit record needs an actor name.")
        if self.action == AuditAction.CREATED and self.previous_state is not None:
            raise ValueError("CREATED records carry no previous state.")
        if self.action == AuditAction.DELETED and (
            self.previous_state is not None or self.new_state is not None
        ):
            raise ValueError("DELETED records carry no state snapshots.")

    def as_fields(self) -> dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "previous_state": self.previous_state,
            "new_state": self.new_state,
            "description": self.description,
            "origin_address": self.origin_address,
            "origin_agent": self.origin_agent,
        }


@dataclass(frozen=True)
class ActorContext:
    """Snapshot of the principal that triggered an operation."""

    username: Optional[str] = None
    is_authenticated: bool = False
    is_anonymous: bool = True

    @classmethod
    def from_user(cls, user) -> "ActorContext":
        if user is None:
            return cls()
        return cls(
            username=user.get_username() or None,
            is_authenticated=bool(user.is_authenticated),
            is_anonymous=bool(user.is_anonymous),
        )


@dataclass(frozen=True)
class RequestContext:
    """Snapshot of the request headers the audit trail cares about."""

    forwarded_for: Optional[str] = None
    remote_addr: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request) -> "RequestContext":
        meta = request.META
        return cls(
            forwarded_for=meta.get("HTTP_X_FORWARDED_FOR"),
            remote_addr=meta.get("REMOTE_ADDR"),
            user_agent=meta.get("HTTP_USER_AGENT"),
        )


@dataclass(frozen=True)
class AuditContext:
    actor: Optional[ActorContext] = None
    request: Optional[RequestContext] = None

    @classmethod
    def from_request(cls, request) -> "AuditContext":
        return cls(
            actor=ActorContext.from_user(getattr(request, "user", None)),
            request=RequestContext.from_request(request),
        )

    @classmethod
    def system(cls) -> "AuditContext":
        return cls()
