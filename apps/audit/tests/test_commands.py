import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase


class CheckAuditWritesCommandTests(SimpleTestCase):
    def _tree(self, files):
        root = tempfile.TemporaryDirectory()
        self.addCleanup(root.cleanup)
        for rel, content in files.items():
            path = Path(root.name) / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root.name

    def test_backend_writes_are_allowed(self):
        root = self._tree({"apps/audit/backends.py": "AuditLog.objects.create(**fields)\n"})
        out = StringIO()
        call_command("check_audit_writes", root=root, stdout=out)
        self.assertIn("No forbidden direct audit writes found.", out.getvalue())

    def test_direct_write_elsewhere_fails(self):
        root = self._tree({"apps/projects/services.py": "AuditLog.objects.create(entity_id='1')\n"})
        out = StringIO()
        with self.assertRaises(CommandError):
            call_command("check_audit_writes", root=root, stdout=out)
        self.assertIn("apps/projects/services.py:1", out.getvalue())

    def test_bulk_delete_is_flagged(self):
        root = self._tree({"scripts/cleanup.py": "AuditLog.objects.filter(pk=1).delete()\n"})
        with self.assertRaises(CommandError):
            call_command("check_audit_writes", root=root, stdout=StringIO())

    def test_test_modules_are_not_scanned(self):
        root = self._tree({
            "apps/projects/tests.py": "AuditLog.objects.create(entity_id='1')\n",
            "apps/audit/tests/test_api.py": "AuditLog.objects.create(entity_id='1')\n",
        })
        out = StringIO()
        call_command("check_audit_writes", root=root, stdout=out)
        self.assertIn("No forbidden direct audit writes found.", out.getvalue())
