"""Which service operations are audited and what each one records."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .events import AuditAction, EntityType
from .serialization import serialize_state


@dataclass(frozen=True)
class Invocation:
    operation: str
    args: tuple
    result: Any


Extractor = Callable[[Invocation], Any]


def _field(obj, name: str):
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


def arg(index: int) -> Extractor:
    return lambda invocation: invocation.args[index]


def result_field(name: str) -> Extractor:
    return lambda invocation: _field(invocation.result, name)


def result() -> Extractor:
    return lambda invocation: invocation.result


def snapshot(extractor: Extractor) -> Extractor:
    return lambda invocation: serialize_state(extractor(invocation))


def text(extractor: Extractor) -> Extractor:
    return lambda invocation: str(extractor(invocation))


def literal(value: str) -> Extractor:
    return lambda invocation: value


def describe(template: str, extractor: Optional[Extractor] = None) -> Extractor:
    if extractor is None:
        return literal(template)
    return lambda invocation: template.format(extractor(invocation))


@dataclass(frozen=True)
class AuditBinding:
    operation: str
    entity_type: str
    action: str
    entity_id: Extractor
    description: Extractor
    previous_state: Optional[Extractor] = None
    new_state: Optional[Extractor] = None


_BINDINGS = (
    # Projects
    AuditBinding(
        operation="create_project",
        entity_type=EntityType.PROJECT,
        action=AuditAction.CREATED,
        entity_id=result_field("id"),
        description=describe("Project created: {}", result_field("name")),
        new_state=snapshot(result()),
    ),
    AuditBinding(
        operation="update_project",
        entity_type=EntityType.PROJECT,
        action=AuditAction.UPDATED,
        entity_id=result_field("id"),
        description=describe("Project updated: {}", result_field("name")),
        previous_state=snapshot(arg(1)),
        new_state=snapshot(result()),
    ),
    AuditBinding(
        operation="delete_project",
        entity_type=EntityType.PROJECT,
        action=AuditAction.DELETED,
        entity_id=arg(0),
        description=describe("Project deleted"),
    ),
    # Tasks
    AuditBinding(
        operation="create_task",
        entity_type=EntityType.TASK,
        action=AuditAction.CREATED,
        entity_id=result_field("id"),
        description=describe("Task created: {}", result_field("title")),
        new_state=snapshot(result()),
    ),
    AuditBinding(
        operation="update_task",
        entity_type=EntityType.TASK,
        action=AuditAction.UPDATED,
        entity_id=result_field("id"),
        description=describe("Task updated: {}", result_field("title")),
        previous_state=snapshot(arg(1)),
        new_state=snapshot(result()),
    ),
    AuditBinding(
        operation="delete_task",
        entity_type=EntityType.TASK,
        action=AuditAction.DELETED,
        entity_id=arg(0),
        description=describe("Task deleted"),
    ),
    AuditBinding(
        operation="update_task_status",
        entity_type=EntityType.TASK,
        action=AuditAction.STATUS_CHANGED,
        entity_id=result_field("id"),
        description=describe("Task status changed to: {}", text(arg(1))),
        new_state=text(arg(1)),
    ),
    # Users
    AuditBinding(
        operation="create_user",
        entity_type=EntityType.USER,
        action=AuditAction.CREATED,
        entity_id=result_field("id"),
        description=describe("User created: {}", result_field("username")),
        new_state=snapshot(result()),
    ),
    AuditBinding(
        operation="delete_user",
        entity_type=EntityType.USER,
        action=AuditAction.DELETED,
        entity_id=arg(0),
        description=describe("User deleted"),
    ),
    # Subscriptions
    AuditBinding(
        operation="create_subscription",
        entity_type=EntityType.SUBSCRIPTION,
        action=AuditAction.CREATED,
        entity_id=result_field("id"),
        description=describe("Subscription created"),
        new_state=snapshot(result()),
    ),
    AuditBinding(
        operation="cancel_subscription",
        entity_type=EntityType.SUBSCRIPTION,
        action=AuditAction.STATUS_CHANGED,
        entity_id=arg(0),
        description=describe("Subscription cancelled"),
        previous_state=literal("ACTIVE"),
        new_state=literal("CANCELLED"),
    ),
)

AUDIT_BINDINGS: dict[str, AuditBinding] = {binding.operation: binding for binding in _BINDINGS}
