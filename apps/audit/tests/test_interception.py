import json
from unittest.mock import Mock, patch

from django.db import DatabaseError
from django.test import TestCase

from apps.audit import AuditContext, audited
from apps.audit.bindings import AUDIT_BINDINGS
from apps.audit.contracts import ActorContext, RequestContext
from apps.audit.events import AuditAction, EntityType
from apps.audit.exceptions import AuditPersistenceError
from apps.audit.interception import AuditInterceptor
from apps.audit.models import AuditLog
from apps.audit.services import AuditService


def _context(username="alice"):
    return AuditContext(
        actor=ActorContext(username=username, is_authenticated=True, is_anonymous=False),
        request=RequestContext(forwarded_for="203.0.113.5, 10.0.0.1", remote_addr="10.0.0.9"),
    )


@audited("update_task_status")
def change_status(task_id, status, *, context=None):
    return {"id": task_id, "title": "Write docs", "status": status}


@audited("cancel_subscription")
def cancel(subscription_id, *, context=None):
    return {"id": subscription_id, "status": "CANCELLED"}


@audited("create_project")
def create_opaque_project(*, context=None):
    return {"id": 7, "name": "Opaque", "payload": object()}


@audited("delete_project")
def failing_delete(project_id, *, context=None):
    raise ValueError("project is locked")


class Board:
    @audited("update_task")
    def rename(self, task_id, data, *, context=None):
        return {"id": task_id, "title": data["title"]}


class AuditedDecoratorTests(TestCase):
    def test_status_change_records_new_status(self):
        result = change_status("T1", "DONE", context=_context())

        self.assertEqual(result["status"], "DONE")
        entry = AuditLog.objects.get()
        self.assertEqual(entry.entity_type, EntityType.TASK)
        self.assertEqual(entry.action, AuditAction.STATUS_CHANGED)
        self.assertEqual(entry.entity_id, "T1")
        self.assertEqual(entry.new_state, "DONE")
        self.assertIsNone(entry.previous_state)
        self.assertEqual(entry.description, "Task status changed to: DONE")
        self.assertEqual(entry.actor_name, "alice")
        self.assertEqual(entry.origin_address, "203.0.113.5")

    def test_cancel_records_fixed_transition(self):
        cancel("S9")

        entry = AuditLog.objects.get()
        self.assertEqual(entry.entity_type, EntityType.SUBSCRIPTION)
        self.assertEqual(entry.action, AuditAction.STATUS_CHANGED)
        self.assertEqual(entry.entity_id, "S9")
        self.assertEqual(entry.previous_state, "ACTIVE")
        self.assertEqual(entry.new_state, "CANCELLED")
        self.assertEqual(entry.actor_name, "system")
        self.assertIsNone(entry.origin_address)

    def test_keyword_arguments_bind_by_position(self):
        change_status(task_id="T2", status="IN_PROGRESS")

        entry = AuditLog.objects.get()
        self.assertEqual(entry.entity_id, "T2")
        self.assertEqual(entry.new_state, "IN_PROGRESS")

    def test_oversized_forwarded_for_still_records(self):
        context = AuditContext(
            request=RequestContext(forwarded_for="x" * 300 + ", 10.0.0.1", remote_addr="198.51.100.7"),
        )
        change_status("T3", "DONE", context=context)

        entry = AuditLog.objects.get()
        self.assertEqual(entry.origin_address, "198.51.100.7")

    def test_method_arguments_skip_self(self):
        Board().rename(5, {"title": "Renamed"}, context=_context())

        entry = AuditLog.objects.get()
        self.assertEqual(entry.entity_id, "5")
        self.assertEqual(json.loads(entry.previous_state), {"title": "Renamed"})
        self.assertEqual(json.loads(entry.new_state), {"id": 5, "title": "Renamed"})

    def test_failing_operation_writes_nothing(self):
        with self.assertRaises(ValueError):
            failing_delete(3, context=_context())
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_serialization_failure_is_logged_and_swallowed(self):
        with self.assertLogs("apps.audit.interception", level="ERROR") as logs:
            result = create_opaque_project(context=_context())

        self.assertEqual(result["id"], 7)
        self.assertEqual(AuditLog.objects.count(), 0)
        self.assertEqual(len(logs.records), 1)
        self.assertIn("create_project", logs.output[0])

    @patch("apps.audit.backends.DatabaseAuditBackend.append", side_effect=DatabaseError("disk full"))
    def test_persistence_failure_does_not_reach_caller(self, append):
        with self.assertLogs("apps.audit.interception", level="ERROR"):
            result = change_status(1, "IN_PROGRESS", context=_context())

        self.assertEqual(result["id"], 1)
        append.assert_called_once()
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_extraction_failure_is_logged(self):
        @audited("create_task")
        def create_without_dto(*, context=None):
            return None

        with self.assertLogs("apps.audit.interception", level="ERROR"):
            self.assertIsNone(create_without_dto())
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_binding_is_exposed(self):
        self.assertIs(change_status.audit_binding, AUDIT_BINDINGS["update_task_status"])

    def test_unknown_operation_is_rejected_at_decoration(self):
        with self.assertRaises(KeyError):
            audited("archive_everything")

    def test_custom_interceptor_receives_positional_arguments(self):
        interceptor = Mock(spec=AuditInterceptor)

        @audited("delete_task", interceptor=interceptor)
        def remove(task_id, *, context=None):
            return None

        ctx = _context()
        remove(11, context=ctx)

        interceptor.after_returning.assert_called_once_with(
            AUDIT_BINDINGS["delete_task"], (11,), None, ctx
        )


class AuditServiceModeTests(TestCase):
    def _record(self):
        from apps.audit.services import AuditRecordBuilder

        return AuditRecordBuilder.build(
            entity_type=EntityType.USER,
            entity_id=1,
            action=AuditAction.DELETED,
        )

    def test_primary_only_skips_secondary(self):
        primary, secondary = Mock(), Mock()
        AuditService(primary, secondary, mode="primary_only").write(self._record())
        primary.append.assert_called_once()
        secondary.append.assert_not_called()

    def test_dual_write_hits_both(self):
        primary, secondary = Mock(), Mock()
        AuditService(primary, secondary, mode="dual_write").write(self._record())
        primary.append.assert_called_once()
        secondary.append.assert_called_once()

    def test_dual_write_secondary_failure_keeps_primary(self):
        primary, secondary = Mock(), Mock()
        secondary.append.side_effect = OSError("log pipe closed")

        with self.assertLogs("apps.audit.services", level="WARNING") as logs:
            AuditService(primary, secondary, mode="dual_write").write(self._record())

        primary.append.assert_called_once()
        self.assertEqual(logs.records[0].levelname, "WARNING")
        self.assertIn("Secondary audit backend failed", logs.output[0])

    def test_primary_failure_is_persistence_error(self):
        primary, secondary = Mock(), Mock()
        primary.append.side_effect = DatabaseError("down")

        with self.assertRaises(AuditPersistenceError):
            AuditService(primary, secondary, mode="dual_write").write(self._record())
        secondary.append.assert_not_called()

    def test_logging_backend_emits_trail(self):
        service = AuditService(secondary_backend=Mock(), mode="primary_only")
        service.primary_backend = service._build_backend("logging")

        with self.assertLogs("apps.audit.trail", level="INFO") as logs:
            service.write(self._record())

        self.assertIn("DELETED USER:1 by system", logs.output[0])
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_interceptor_uses_service_factory(self):
        service = Mock()
        interceptor = AuditInterceptor(service_factory=lambda: service)

        interceptor.after_returning(AUDIT_BINDINGS["delete_user"], (4,), None, None)

        record = service.write.call_args.args[0]
        self.assertEqual(record.entity_id, "4")
        self.assertEqual(record.description, "User deleted")
