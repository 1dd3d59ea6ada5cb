import json
from datetime import date
from decimal import Decimal

from django.core.exceptions import PermissionDenied
from django.test import SimpleTestCase, TestCase

from apps.audit.contracts import ActorContext, AuditContext, AuditRecord, RequestContext
from apps.audit.events import AuditAction, EntityType
from apps.audit.exceptions import AuditSerializationError
from apps.audit.models import AuditLog
from apps.audit.serialization import serialize_state
from apps.audit.services import AuditRecordBuilder, log_activity


class AuditRecordTests(SimpleTestCase):
    def test_defaults_to_system_actor(self):
        record = AuditRecord(entity_type=EntityType.TASK, entity_id="1", action=AuditAction.UPDATED)
        self.assertEqual(record.actor_name, "system")
        self.assertIsNone(record.actor_id)

    def test_created_rejects_previous_state(self):
        with self.assertRaises(ValueError):
            AuditRecord(
                entity_type=EntityType.TASK,
                entity_id="1",
                action=AuditAction.CREATED,
                previous_state="{}",
            )

    def test_deleted_rejects_any_state(self):
        with self.assertRaises(ValueError):
            AuditRecord(
                entity_type=EntityType.TASK,
                entity_id="1",
                action=AuditAction.DELETED,
                new_state="{}",
            )

    def test_requires_entity_type(self):
        with self.assertRaises(ValueError):
            AuditRecord(entity_type="", entity_id="1", action=AuditAction.UPDATED)


class AuditRecordBuilderTests(SimpleTestCase):
    def test_builds_from_context(self):
        context = AuditContext(
            actor=ActorContext(username="alice", is_authenticated=True, is_anonymous=False),
            request=RequestContext(forwarded_for="203.0.113.5, 10.0.0.1", user_agent="tests/1.0"),
        )
        record = AuditRecordBuilder.build(
            entity_type=EntityType.PROJECT,
            entity_id=12,
            action=AuditAction.UPDATED,
            description="Project updated: Apollo",
            context=context,
        )
        self.assertEqual(record.entity_id, "12")
        self.assertEqual(record.actor_name, "alice")
        self.assertIsNone(record.actor_id)
        self.assertEqual(record.origin_address, "203.0.113.5")
        self.assertEqual(record.origin_agent, "tests/1.0")

    def test_without_context_uses_system(self):
        record = AuditRecordBuilder.build(
            entity_type=EntityType.PROJECT,
            entity_id=1,
            action=AuditAction.DELETED,
        )
        self.assertEqual(record.actor_name, "system")
        self.assertIsNone(record.origin_address)
        self.assertIsNone(record.origin_agent)


class SerializeStateTests(SimpleTestCase):
    def test_none_stays_none(self):
        self.assertIsNone(serialize_state(None))

    def test_sorted_keys_and_rich_types(self):
        text = serialize_state({"b": Decimal("1.50"), "a": date(2024, 5, 1)})
        self.assertEqual(list(json.loads(text)), ["a", "b"])
        self.assertIn('"2024-05-01"', text)

    def test_unserializable_value_raises(self):
        with self.assertRaises(AuditSerializationError):
            serialize_state({"payload": object()})


class AuditLogModelTests(TestCase):
    def test_log_activity_writes_row(self):
        ok = log_activity(
            entity_type=EntityType.PAYMENT,
            entity_id="pay-1",
            action=AuditAction.CREATED,
            description="Payment received",
        )
        self.assertTrue(ok)
        entry = AuditLog.objects.get()
        self.assertEqual(entry.entity_id, "pay-1")
        self.assertEqual(entry.actor_name, "system")

    def test_log_activity_reports_invalid_record(self):
        with self.assertLogs("apps.audit.services", level="ERROR"):
            ok = log_activity(
                entity_type=EntityType.PAYMENT,
                entity_id="pay-1",
                action=AuditAction.DELETED,
                new_state="{}",
            )
        self.assertFalse(ok)
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_rows_are_immutable(self):
        log_activity(entity_type=EntityType.TASK, entity_id="1", action=AuditAction.UPDATED)
        entry = AuditLog.objects.get()

        entry.description = "changed"
        with self.assertRaises(PermissionDenied):
            entry.save()
        with self.assertRaises(PermissionDenied):
            entry.delete()
        self.assertEqual(AuditLog.objects.count(), 1)
