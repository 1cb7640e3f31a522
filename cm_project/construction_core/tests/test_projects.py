import datetime
from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from ..exceptions import Forbidden
from ..models import (Labor, Material, MaterialLedgerEntry, Organization, Record,
                      Task, Transaction)
from ..services import (accessible_projects, assign_user, create_project,
                        create_resource, ledger_summary, material_stock)
from .utils import make_ledger, make_member, make_org, make_project

TODAY = datetime.date(2025, 9, 17)


class ProjectTests(TestCase):
    def setUp(self):
        self.org = make_org("Org A")
        self.admin = make_member(self.org, "anita", role="admin")
        self.user = make_member(self.org, "ravi")

    def test_only_admins_create_projects(self):
        with self.assertRaises(Forbidden):
            create_project(self.org, name="Tower", role="user")
        project = create_project(self.org, name=" Tower ", role="admin", user=self.admin)
        self.assertEqual(project.name, "Tower")

    def test_assign_requires_membership(self):
        project = make_project(self.org)
        outsider = make_member(make_org("Org B"), "bala")
        with self.assertRaises(ValidationError):
            assign_user(project, outsider, role="admin")

    def test_accessible_projects_follow_active_assignments(self):
        a = make_project(self.org, "A")
        b = make_project(self.org, "B")
        assign_user(a, self.user, role="admin")
        assign_user(b, self.user, role="admin", status="inactive")

        self.assertEqual(accessible_projects(self.org, self.user, "user"), [a])
        self.assertEqual(accessible_projects(self.org, self.admin, "admin"), [a, b])

    def test_hajari_settlement_row_needs_no_project(self):
        labor = Labor.objects.create(organization=self.org, name="Ramesh")
        caller = {"organization": self.org, "user": self.admin, "role": "admin"}
        row = create_resource(
            "hajari", {"laborId": labor.pk, "date": TODAY, "status": "settlement",
                       "upad": "1500.00"}, **caller)
        self.assertIsNone(row.project_id)
        with self.assertRaises(ValidationError):
            create_resource(
                "hajari", {"laborId": labor.pk, "date": TODAY, "status": "present"}, **caller)


class BalanceTests(TestCase):
    def setUp(self):
        self.org = make_org("Org A")
        self.project = make_project(self.org)
        self.ledger = make_ledger(self.org)

    def txn(self, amount, type="expense", status="approved"):
        return Transaction.objects.create(
            organization=self.org, ledger=self.ledger, project=self.project,
            type=type, amount=Decimal(amount), description="x", date=TODAY,
            approval_status=status,
        )

    def test_ledger_summary_counts_effective_rows_only(self):
        self.txn("100.00")
        self.txn("40.00", type="income")
        self.txn("5.00", status="pending-edit")  # still live
        self.txn("999.00", status="pending-create")
        self.txn("999.00", status="rejected")

        summary = ledger_summary(self.ledger)
        self.assertEqual(summary["expense"], Decimal("105.00"))
        self.assertEqual(summary["income"], Decimal("40.00"))
        self.assertEqual(summary["net"], Decimal("-65.00"))

    def test_material_stock(self):
        cement = Material.objects.create(organization=self.org, name="Cement", unit="bags")
        other_site = make_project(self.org, "B")
        for type, qty, project, status in [
            ("in", "100", self.project, "approved"),
            ("out", "30.5", self.project, "approved"),
            ("in", "20", other_site, "approved"),
            ("in", "500", self.project, "pending-create"),
        ]:
            MaterialLedgerEntry.objects.create(
                organization=self.org, material=cement, project=project, date=TODAY,
                type=type, quantity=Decimal(qty), approval_status=status,
            )
        self.assertEqual(material_stock(cement), Decimal("89.500"))
        self.assertEqual(material_stock(cement, project=self.project), Decimal("69.500"))


class DemoCommandTests(TestCase):
    def test_seed_demo_builds_a_usable_tenant(self):
        call_command("seed_demo", organization="Acme Infra", stdout=StringIO())

        org = Organization.objects.get(name="Acme Infra")
        record = Record.objects.get(organization=org)
        self.assertEqual(record.status, "partial")
        self.assertEqual(Transaction.objects.filter(organization=org).count(), 1)
        self.assertEqual(
            Task.objects.for_organization(org).filter(approval_status="approved").count(), 2
        )
