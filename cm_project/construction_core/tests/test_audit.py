from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings

from ..models import AuditLog
from ..services import edit_resource, log_action, recent_logs, resolve_approval
from .utils import make_ledger, make_member, make_org


class AuditLoggerTests(TestCase):
    def setUp(self):
        self.org = make_org("Org A")
        self.admin = make_member(self.org, "anita", role="admin")

    def test_writes_row_with_json_safe_metadata(self):
        entry = log_action(
            action="CREATE",
            entity="LEDGER",
            entity_id=7,
            details="Created ledger",
            organization=self.org,
            user=self.admin,
            metadata={"amount": Decimal("12.50")},
        )
        entry.refresh_from_db()
        self.assertEqual(entry.entity_id, "7")
        self.assertEqual(entry.metadata, {"amount": "12.50"})

    def test_failure_is_logged_and_swallowed(self):
        with mock.patch.object(AuditLog.objects, "create", side_effect=RuntimeError("db down")):
            with self.assertLogs("construction_core.services.audit_helper", level="ERROR"):
                result = log_action(action="CREATE", entity="LEDGER", entity_id=1,
                                    organization=self.org)
        self.assertIsNone(result)

    def test_business_operation_survives_audit_failure(self):
        user = make_member(self.org, "ravi")
        ledger = make_ledger(self.org, name="A")
        edit_resource("ledger", ledger.pk, {"name": "B"},
                      organization=self.org, user=user, role="user")

        with mock.patch.object(AuditLog.objects, "create", side_effect=RuntimeError("db down")):
            with self.assertLogs("construction_core.services.audit_helper", level="ERROR"):
                outcome = resolve_approval("ledger", ledger.pk, "approved",
                                           organization=self.org, user=self.admin,
                                           role="admin")
        self.assertEqual(outcome.action, "edited")
        ledger.refresh_from_db()
        self.assertEqual(ledger.name, "B")

    @override_settings(AUDIT_LOG_LIMIT=2)
    def test_recent_logs_newest_first_limited_and_scoped(self):
        other = make_org("Org B")
        for i in range(3):
            log_action(action="UPDATE", entity="TASK", entity_id=i, organization=self.org)
        log_action(action="UPDATE", entity="TASK", entity_id=99, organization=other)

        logs = recent_logs(self.org)
        self.assertEqual([entry.entity_id for entry in logs], ["2", "1"])
        self.assertEqual(len(recent_logs(self.org, limit=10)), 3)
