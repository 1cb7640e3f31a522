from unittest import mock

from django.test import SimpleTestCase

from ..exceptions import UnknownModule
from ..permissions import (MODULES, _load_matrix, can_access_project,
                           can_access_resource, filter_accessible_projects,
                           normalize_module, requires_approval)


class RequiresApprovalTests(SimpleTestCase):
    def test_admin_never_needs_approval(self):
        for module in MODULES:
            for action in ("create", "edit", "delete"):
                self.assertFalse(requires_approval(module, action, "admin"))

    def test_default_user_row(self):
        # creates go live, edits and deletes wait for an admin
        for module in MODULES:
            self.assertFalse(requires_approval(module, "create", "user"))
            self.assertTrue(requires_approval(module, "edit", "user"))
            self.assertTrue(requires_approval(module, "delete", "user"))

    def test_role_is_case_insensitive_and_unknown_roles_are_users(self):
        self.assertFalse(requires_approval("ledger", "edit", "ADMIN"))
        self.assertTrue(requires_approval("ledger", "edit", "Manager"))
        self.assertTrue(requires_approval("ledger", "edit", None))

    def test_unknown_module_fails_fast_even_for_admin(self):
        with self.assertRaises(UnknownModule):
            requires_approval("journal", "edit", "admin")
        with self.assertRaises(UnknownModule):
            requires_approval("journal", "edit", "user")

    def test_unknown_action_fails_fast(self):
        with self.assertRaises(UnknownModule):
            requires_approval("ledger", "archive", "admin")

    def test_aliases(self):
        self.assertEqual(normalize_module("materialLedger"), "material-ledger")
        self.assertEqual(normalize_module("MaterialLedgerEntry"), "material-ledger")
        self.assertEqual(normalize_module("recordable"), "record")

    def test_settings_override_only_touches_its_row(self):
        matrix = _load_matrix({"task": {"create": True}})
        with mock.patch("construction_core.permissions.APPROVAL_MATRIX", matrix):
            self.assertTrue(requires_approval("task", "create", "user"))
            self.assertFalse(requires_approval("ledger", "create", "user"))
            self.assertFalse(requires_approval("task", "create", "admin"))

    def test_override_with_unknown_module_is_rejected(self):
        with self.assertRaises(UnknownModule):
            _load_matrix({"journal": {"create": True}})

    def test_matrix_is_read_only(self):
        matrix = _load_matrix()
        with self.assertRaises(TypeError):
            matrix["ledger"]["edit"] = False
        with self.assertRaises(TypeError):
            matrix["journal"] = {}


class ProjectAccessTests(SimpleTestCase):
    def setUp(self):
        self.assignments = [
            {"project_id": 1, "user_id": 10, "status": "active"},
            {"project_id": 2, "user_id": 10, "status": "inactive"},
            {"project_id": 3, "user_id": 11, "status": "active"},
        ]

    def test_active_assignment_grants_access(self):
        self.assertTrue(can_access_project(1, 10, "user", self.assignments))
        # ids compare by value, whatever their type
        self.assertTrue(can_access_project("1", "10", "user", self.assignments))

    def test_inactive_or_foreign_assignment_denies(self):
        self.assertFalse(can_access_project(2, 10, "user", self.assignments))
        self.assertFalse(can_access_project(3, 10, "user", self.assignments))
        self.assertFalse(can_access_project(1, 10, "user", []))

    def test_admin_accesses_everything(self):
        self.assertTrue(can_access_project(99, 10, "admin", []))

    def test_filter_accessible_projects(self):
        projects = [{"id": 1}, {"id": 2}, {"id": 3}]
        self.assertEqual(
            filter_accessible_projects(projects, 10, "user", self.assignments),
            [{"id": 1}],
        )
        self.assertEqual(
            filter_accessible_projects(projects, 10, "admin", []), projects
        )

    def test_resource_without_project_is_admin_only(self):
        resource = {"project_id": None}
        self.assertFalse(can_access_resource(resource, 10, "user", self.assignments))
        self.assertTrue(can_access_resource(resource, 10, "admin", []))
        self.assertTrue(
            can_access_resource({"project_id": 1}, 10, "user", self.assignments)
        )
