import json
from decimal import Decimal
from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, TestCase, override_settings

from ..models import (FinancialAccount, Labor, Ledger, Notification, Project,
                      ProjectAssignment)
from ..views import (approvals, audit_logs, financial_account_detail,
                     financial_accounts, labor_detail, labors,
                     notification_detail, project_assignments, project_detail,
                     projects, record_settlements, resource_collection,
                     resource_detail)
from .utils import (assign, make_ledger, make_member, make_org, make_project,
                    make_record)


class ApiTestCase(TestCase):
    """RequestFactory requests with the middleware attributes filled in by hand."""

    def setUp(self):
        self.factory = RequestFactory()
        self.org = make_org("Org A")
        self.admin = make_member(self.org, "anita", role="admin")
        self.user = make_member(self.org, "ravi", role="user")
        self.project = make_project(self.org)
        assign(self.project, self.user)

    def _request(self, method, path, user, role, data=None, body=None):
        if body is None and data is not None:
            body = json.dumps(data)
        builder = getattr(self.factory, method)
        if method == "get":
            request = builder(path)
        else:
            request = builder(path, data=body or "", content_type="application/json")
        # manually simulate middleware
        request.user = user
        request.organization = self.org if role else None
        request.role = role
        return request


class ViewTests(ApiTestCase):
    def test_anonymous_is_unauthorized(self):
        request = self._request("get", "/api/resources/ledger/", AnonymousUser(), None)
        response = resource_collection(request, "ledger")
        self.assertEqual(response.status_code, 401)

    def test_member_without_organization_is_unauthorized(self):
        request = self._request("get", "/api/resources/ledger/", self.user, None)
        self.assertEqual(resource_collection(request, "ledger").status_code, 401)

    def test_create_returns_201_with_serialized_row(self):
        request = self._request(
            "post", "/api/resources/ledger/", self.user, "user",
            data={"name": "Shree Cement", "isGstRegistered": True},
        )
        response = resource_collection(request, "ledger")
        self.assertEqual(response.status_code, 201)
        payload = json.loads(response.content)
        self.assertEqual(payload["name"], "Shree Cement")
        self.assertTrue(payload["is_gst_registered"])
        self.assertEqual(payload["approval_status"], "approved")

    def test_unknown_module_is_400(self):
        request = self._request("get", "/api/resources/journal/", self.admin, "admin")
        self.assertEqual(resource_collection(request, "journal").status_code, 400)

    def test_invalid_json_is_400(self):
        request = self._request(
            "post", "/api/resources/ledger/", self.admin, "admin", body="{not json"
        )
        self.assertEqual(resource_collection(request, "ledger").status_code, 400)

    def test_method_not_allowed(self):
        request = self._request("put", "/api/resources/ledger/", self.admin, "admin", data={})
        self.assertEqual(resource_collection(request, "ledger").status_code, 405)

    def test_cross_tenant_detail_is_404(self):
        other = make_org("Org B")
        foreign = make_ledger(other, name="Theirs")
        request = self._request("get", f"/api/resources/ledger/{foreign.pk}/", self.admin, "admin")
        self.assertEqual(resource_detail(request, "ledger", foreign.pk).status_code, 404)

    def test_user_delete_goes_pending(self):
        ledger = make_ledger(self.org)
        request = self._request(
            "delete", f"/api/resources/ledger/{ledger.pk}/", self.user, "user",
            data={"requestMessage": "duplicate"},
        )
        response = resource_detail(request, "ledger", ledger.pk)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.content)["status"], "pending-delete")
        ledger.refresh_from_db()
        self.assertEqual(ledger.request_message, "duplicate")

    def test_approvals_are_admin_only(self):
        request = self._request("get", "/api/approvals/", self.user, "user")
        self.assertEqual(approvals(request).status_code, 403)

    def test_resolve_through_approvals_endpoint(self):
        ledger = make_ledger(self.org, name="A")
        ledger.approval_status = "pending-edit"
        ledger.pending_data = {"name": "B"}
        ledger.submitted_by = self.user
        ledger.save()

        request = self._request(
            "post", "/api/approvals/", self.admin, "admin",
            data={"type": "ledger", "id": ledger.pk, "status": "approved"},
        )
        response = approvals(request)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.content)["action"], "edited")
        self.assertEqual(Ledger.objects.get(pk=ledger.pk).name, "B")

        # second time around there is nothing to resolve
        again = self._request(
            "post", "/api/approvals/", self.admin, "admin",
            data={"type": "ledger", "id": ledger.pk, "status": "approved"},
        )
        self.assertEqual(approvals(again).status_code, 400)

    def test_settlement_endpoint(self):
        record = make_record(self.org, self.project, make_ledger(self.org), amount="1000.00")
        request = self._request(
            "post", f"/api/records/{record.pk}/settlements/", self.admin, "admin",
            data={"amountPaid": 400.0, "settlementDate": "2025-09-17",
                  "paymentMode": "cash"},
        )
        response = record_settlements(request, record.pk)
        self.assertEqual(response.status_code, 201)
        body = json.loads(response.content)
        self.assertEqual(body["record"]["status"], "partial")
        self.assertEqual(body["record"]["balance_amount"], "600.00")

    def test_notification_of_someone_else_is_404(self):
        note = Notification.objects.create(user=self.admin, message="hi")
        request = self._request(
            "patch", f"/api/notifications/{note.pk}/", self.user, "user", data={"isRead": True}
        )
        self.assertEqual(notification_detail(request, note.pk).status_code, 404)

    def test_audit_log_is_admin_only(self):
        request = self._request("get", "/api/audit-logs/", self.user, "user")
        self.assertEqual(audit_logs(request).status_code, 403)

    @override_settings(DEBUG=False)
    def test_unexpected_errors_hide_details(self):
        request = self._request("get", "/api/resources/ledger/", self.admin, "admin")
        with mock.patch("construction_core.views.list_resources", side_effect=RuntimeError("secret")):
            with self.assertLogs("construction_core.views", level="ERROR"):
                response = resource_collection(request, "ledger")
        self.assertEqual(response.status_code, 500)
        self.assertNotIn("secret", response.content.decode())


class ProjectAndMasterDataViewTests(ApiTestCase):
    """Projects, laborers and financial accounts over the JSON API."""

    def test_project_listing_follows_assignments(self):
        make_project(self.org, "Site B")
        mine = projects(self._request("get", "/api/projects/", self.user, "user"))
        everything = projects(self._request("get", "/api/projects/", self.admin, "admin"))
        self.assertEqual([p["name"] for p in json.loads(mine.content)["results"]], ["Site A"])
        self.assertEqual(len(json.loads(everything.content)["results"]), 2)

    def test_admin_creates_project_with_its_team(self):
        request = self._request(
            "post", "/api/projects/", self.admin, "admin",
            data={"name": "Tower B", "location": "Pune", "assignedUsers": [self.user.pk]},
        )
        response = projects(request)
        self.assertEqual(response.status_code, 201)
        project = Project.objects.get(pk=json.loads(response.content)["id"])
        self.assertTrue(ProjectAssignment.objects.filter(project=project, user=self.user).exists())

        duplicate = self._request(
            "post", "/api/projects/", self.admin, "admin", data={"name": "Tower B"}
        )
        self.assertEqual(projects(duplicate).status_code, 400)

        as_user = self._request("post", "/api/projects/", self.user, "user", data={"name": "Mine"})
        self.assertEqual(projects(as_user).status_code, 403)

    def test_project_detail_of_unassigned_project_is_forbidden(self):
        other = make_project(self.org, "Site B")
        request = self._request("get", f"/api/projects/{other.pk}/", self.user, "user")
        self.assertEqual(project_detail(request, other.pk).status_code, 403)

    def test_project_with_records_cannot_be_deleted(self):
        make_record(self.org, self.project, make_ledger(self.org))
        request = self._request("delete", f"/api/projects/{self.project.pk}/", self.admin, "admin")
        self.assertEqual(project_detail(request, self.project.pk).status_code, 400)
        self.assertTrue(Project.objects.filter(pk=self.project.pk).exists())

        empty = make_project(self.org, "Empty")
        request = self._request("delete", f"/api/projects/{empty.pk}/", self.admin, "admin")
        self.assertEqual(project_detail(request, empty.pk).status_code, 200)
        self.assertFalse(Project.objects.filter(pk=empty.pk).exists())

    def test_assignments_endpoint(self):
        site = make_project(self.org, "Site B")
        request = self._request(
            "post", f"/api/projects/{site.pk}/assignments/", self.admin, "admin",
            data={"userId": self.user.pk, "canViewFinances": False},
        )
        self.assertEqual(project_assignments(request, site.pk).status_code, 201)
        assignment = ProjectAssignment.objects.get(project=site, user=self.user)
        self.assertFalse(assignment.can_view_finances)
        self.assertTrue(assignment.can_create_entries)

        # members of another organization can't be put on the team
        outsider = make_member(make_org("Org B"), "bala")
        request = self._request(
            "post", f"/api/projects/{site.pk}/assignments/", self.admin, "admin",
            data={"userId": outsider.pk},
        )
        self.assertEqual(project_assignments(request, site.pk).status_code, 404)

        request = self._request("get", f"/api/projects/{site.pk}/assignments/", self.user, "user")
        self.assertEqual(project_assignments(request, site.pk).status_code, 403)

    def test_laborers_are_managed_by_admins(self):
        payload = {"name": "Ramesh", "type": "LABORER", "rate": "650"}
        as_user = self._request("post", "/api/labors/", self.user, "user", data=payload)
        self.assertEqual(labors(as_user).status_code, 403)

        response = labors(self._request("post", "/api/labors/", self.admin, "admin", data=payload))
        self.assertEqual(response.status_code, 201)
        labor = Labor.objects.get(organization=self.org, name="Ramesh")
        self.assertEqual(labor.type, "laborer")
        self.assertEqual(labor.rate, Decimal("650.00"))

        request = self._request(
            "patch", f"/api/labors/{labor.pk}/", self.admin, "admin", data={"rate": 700.5}
        )
        self.assertEqual(labor_detail(request, labor.pk).status_code, 200)
        labor.refresh_from_db()
        self.assertEqual(labor.rate, Decimal("700.50"))

        listing = labors(self._request("get", "/api/labors/", self.user, "user"))
        self.assertEqual([row["name"] for row in json.loads(listing.content)["results"]], ["Ramesh"])

    def test_laborer_of_other_organization_is_404(self):
        foreign = Labor.objects.create(organization=make_org("Org B"), name="Suresh")
        request = self._request(
            "patch", f"/api/labors/{foreign.pk}/", self.admin, "admin", data={"rate": "1"}
        )
        self.assertEqual(labor_detail(request, foreign.pk).status_code, 404)

    def test_financial_account_names_are_unique_per_organization(self):
        payload = {"name": "Site cash", "type": "CASH", "openingBalance": "5000"}
        first = self._request("post", "/api/financial-accounts/", self.admin, "admin", data=payload)
        self.assertEqual(financial_accounts(first).status_code, 201)
        again = self._request("post", "/api/financial-accounts/", self.admin, "admin", data=payload)
        self.assertEqual(financial_accounts(again).status_code, 400)

        no_bank = self._request(
            "post", "/api/financial-accounts/", self.admin, "admin",
            data={"name": "HDFC current", "type": "BANK"},
        )
        self.assertEqual(financial_accounts(no_bank).status_code, 400)

        as_user = self._request(
            "post", "/api/financial-accounts/", self.user, "user",
            data={"name": "Petty cash", "type": "cash"},
        )
        self.assertEqual(financial_accounts(as_user).status_code, 403)

        account = FinancialAccount.objects.get(organization=self.org, name="Site cash")
        self.assertEqual(account.opening_balance, Decimal("5000.00"))
        request = self._request(
            "patch", f"/api/financial-accounts/{account.pk}/", self.admin, "admin",
            data={"name": "Main cash"},
        )
        self.assertEqual(financial_account_detail(request, account.pk).status_code, 200)
        account.refresh_from_db()
        self.assertEqual(account.name, "Main cash")

    def test_attendance_posted_end_to_end(self):
        response = labors(self._request(
            "post", "/api/labors/", self.admin, "admin",
            data={"name": "Ramesh", "type": "laborer", "rate": "650"},
        ))
        labor_id = json.loads(response.content)["id"]

        request = self._request(
            "post", "/api/resources/hajari/", self.user, "user",
            data={"laborId": labor_id, "projectId": self.project.pk,
                  "date": "2025-09-17", "status": "present"},
        )
        response = resource_collection(request, "hajari")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(json.loads(response.content)["labor_id"], labor_id)
