import json

import pytest
from django.test import RequestFactory, TestCase

from ..exceptions import NotFound
from ..models import Ledger, Task
from ..services import (delete_resource, edit_resource, get_resource,
                        list_resources, resolve_approval)
from ..views import resource_collection
from .utils import assign, make_ledger, make_member, make_org, make_project


class TenantIsolationTests(TestCase):
    def setUp(self):
        self.org_a = make_org("Org A")
        self.org_b = make_org("Org B")
        self.admin_a = make_member(self.org_a, "anita", role="admin")
        self.admin_b = make_member(self.org_b, "bala", role="admin")

        # one ledger per organization
        self.ledger_a = make_ledger(self.org_a, name="A supplier")
        self.ledger_b = make_ledger(self.org_b, name="B supplier")

    def test_for_organization_returns_only_that_organization_objects(self):
        self.assertListEqual(
            list(Ledger.objects.for_organization(self.org_a).values_list("pk", flat=True)),
            [self.ledger_a.pk],
        )
        self.assertListEqual(
            list(Ledger.objects.for_organization(self.org_b).values_list("pk", flat=True)),
            [self.ledger_b.pk],
        )

    def test_get_other_organization_resource_is_not_found(self):
        with self.assertRaises(NotFound):
            get_resource("ledger", self.ledger_b.pk, organization=self.org_a,
                         user=self.admin_a, role="admin")

    def test_edit_other_organization_resource_is_not_found_and_unchanged(self):
        with self.assertRaises(NotFound):
            edit_resource("ledger", self.ledger_b.pk, {"name": "pwned"},
                          organization=self.org_a, user=self.admin_a, role="admin")
        self.ledger_b.refresh_from_db()
        self.assertEqual(self.ledger_b.name, "B supplier")

    def test_delete_other_organization_resource_is_not_found_and_untouched(self):
        user_a = make_member(self.org_a, "ravi")
        # a user would only file a request, an admin would hard delete
        for user, role in ((user_a, "user"), (self.admin_a, "admin")):
            with self.assertRaises(NotFound):
                delete_resource("ledger", self.ledger_b.pk, organization=self.org_a,
                                user=user, role=role)
            self.ledger_b.refresh_from_db()
            self.assertEqual(self.ledger_b.approval_status, "approved")
            self.assertIsNone(self.ledger_b.submitted_by)
        self.assertTrue(Ledger.objects.filter(pk=self.ledger_b.pk).exists())

    def test_resolve_other_organization_item_is_not_found(self):
        self.ledger_b.approval_status = "pending-edit"
        self.ledger_b.pending_data = {"name": "x"}
        self.ledger_b.save()
        with self.assertRaises(NotFound):
            resolve_approval("ledger", self.ledger_b.pk, "approved",
                             organization=self.org_a, user=self.admin_a, role="admin")
        self.ledger_b.refresh_from_db()
        self.assertEqual(self.ledger_b.approval_status, "pending-edit")

    def test_list_resources_is_scoped(self):
        items = list_resources("ledger", organization=self.org_a,
                               user=self.admin_a, role="admin")
        self.assertEqual([i.pk for i in items], [self.ledger_a.pk])

    def test_user_only_lists_entries_of_assigned_projects(self):
        user = make_member(self.org_a, "ravi")
        mine = make_project(self.org_a, "Mine")
        other = make_project(self.org_a, "Other")
        assign(mine, user)
        visible = Task.objects.create(organization=self.org_a, project=mine, title="v")
        Task.objects.create(organization=self.org_a, project=other, title="h")

        items = list_resources("task", organization=self.org_a, user=user, role="user")
        self.assertEqual([i.pk for i in items], [visible.pk])

    def test_finance_listing_needs_can_view_finances(self):
        user = make_member(self.org_a, "ravi")
        site = make_project(self.org_a, "Site")
        assign(site, user, can_view_finances=False)
        Task.objects.create(organization=self.org_a, project=site, title="v")

        self.assertEqual(
            list_resources("record", organization=self.org_a, user=user, role="user"), []
        )
        self.assertEqual(
            len(list_resources("task", organization=self.org_a, user=user, role="user")), 1
        )


@pytest.mark.django_db
def test_resource_list_view_returns_only_tenant_data():
    org_a = make_org("Org A")
    org_b = make_org("Org B")
    admin = make_member(org_a, "anita", role="admin")
    make_ledger(org_a, name="C1 ledger")
    make_ledger(org_b, name="C2 ledger")

    # Bypass middleware & call view with a RequestFactory
    request = RequestFactory().get("/api/resources/ledger/")
    request.user = admin
    request.organization = org_a  # manually simulate middleware
    request.role = "admin"

    response = resource_collection(request, "ledger")
    names = [row["name"] for row in json.loads(response.content)["results"]]
    assert "C1 ledger" in names
    assert "C2 ledger" not in names
