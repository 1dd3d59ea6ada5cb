import re
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

DIRECT_WRITE = re.compile(
    r"\bAuditLog\.objects\."
    r"(?:(?:create|bulk_create|get_or_create|update_or_create)|[\w.()=, ]*\.(?:update|delete))\s*\("
)
WRITER = Path("apps/audit/backends.py")
IGNORED_PARTS = frozenset({".git", ".venv", "venv", "__pycache__", "tests", "migrations"})


def _scanned_files(root: Path):
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel == WRITER or rel.name.startswith("test") or IGNORED_PARTS.intersection(rel.parts):
            continue
        yield rel, path.read_text(encoding="utf-8", errors="ignore")


class Command(BaseCommand):
    help = "Fail if AuditLog rows are written outside the audit backends."

    def add_arguments(self, parser):
        parser.add_argument("--root", default=None, help="Project root to scan (defaults to cwd).")

    def handle(self, *args, **options):
        root = Path(options["root"] or Path.cwd())
        violations = [
            f"{rel}:{line_no} -> {line.strip()}"
            for rel, text in _scanned_files(root)
            for line_no, line in enumerate(text.splitlines(), start=1)
            if DIRECT_WRITE.search(line)
        ]
        if not violations:
            self.stdout.write(self.style.SUCCESS("No forbidden direct audit writes found."))
            return

        self.stdout.write(self.style.ERROR(f"{len(violations)} direct audit write(s):"))
        self.stdout.write("\n".join(violations))
        raise CommandError("Use @audited or apps.audit.log_activity(...) instead of writing AuditLog directly.")
