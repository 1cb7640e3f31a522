"""
Permission matrix and project access helpers.

Which actions need an admin's approval depends on the resource module and the
caller's role. Admins never need approval; for everybody else the answer is a
plain lookup in APPROVAL_MATRIX.
"""
from types import MappingProxyType
from typing import Iterable, Mapping

from django.conf import settings

from .exceptions import UnknownModule

MODULES = (
    "ledger",
    "transaction",
    "record",
    "task",
    "material",
    "material-ledger",
    "hajari",
    "photo",
    "document",
)
ACTIONS = ("create", "edit", "delete")

# Older clients send these tags
MODULE_ALIASES = {
    "materialledger": "material-ledger",
    "materialledgerentry": "material-ledger",
    "material_ledger": "material-ledger",
    "recordable": "record",
}

# Creates are effective immediately (admins still see them),
# edits and deletes wait for an admin. One row per module so they can diverge.
DEFAULT_APPROVAL_MATRIX = {
    "ledger": {"create": False, "edit": True, "delete": True},
    "transaction": {"create": False, "edit": True, "delete": True},
    "record": {"create": False, "edit": True, "delete": True},
    "task": {"create": False, "edit": True, "delete": True},
    "material": {"create": False, "edit": True, "delete": True},
    "material-ledger": {"create": False, "edit": True, "delete": True},
    "hajari": {"create": False, "edit": True, "delete": True},
    "photo": {"create": False, "edit": True, "delete": True},
    "document": {"create": False, "edit": True, "delete": True},
}


def _load_matrix(overrides=None):
    """Merge settings.APPROVAL_MATRIX over the defaults and freeze the result."""
    overrides = overrides or {}
    frozen = {}
    for module in MODULES:
        row = dict(DEFAULT_APPROVAL_MATRIX[module])
        row.update(overrides.get(module, {}))
        if set(row) != set(ACTIONS):
            raise UnknownModule(f"Approval matrix row for {module!r} must define {ACTIONS}")
        frozen[module] = MappingProxyType({a: bool(row[a]) for a in ACTIONS})
    unknown = set(overrides) - set(MODULES)
    if unknown:
        raise UnknownModule(f"Unknown modules in APPROVAL_MATRIX: {sorted(unknown)}")
    return MappingProxyType(frozen)


APPROVAL_MATRIX: Mapping[str, Mapping[str, bool]] = _load_matrix(
    getattr(settings, "APPROVAL_MATRIX", None)
)


def normalize_module(module: str) -> str:
    tag = (module or "").strip().lower()
    tag = MODULE_ALIASES.get(tag, tag)
    if tag not in APPROVAL_MATRIX:
        raise UnknownModule(f"Invalid module {module!r}")
    return tag


def normalize_role(role) -> str:
    # anything that isn't explicitly admin is treated as a plain user
    return "admin" if str(role or "").strip().lower() == "admin" else "user"


def requires_approval(module: str, action: str, role: str) -> bool:
    """
    True when `role` performing `action` on `module` must wait for an admin.
    Unknown modules/actions raise UnknownModule, even for admins.
    """
    row = APPROVAL_MATRIX[normalize_module(module)]
    if action not in row:
        raise UnknownModule(f"Invalid action {action!r}")
    if normalize_role(role) == "admin":
        return False
    return row[action]


# ---------- Project access ----------
def _field(assignment, name):
    # accept model instances and plain dicts alike
    if isinstance(assignment, Mapping):
        return assignment.get(name)
    return getattr(assignment, name, None)


def _same_id(a, b):
    return a is not None and b is not None and str(a) == str(b)


def can_access_project(project_id, user_id, role, assignments: Iterable) -> bool:
    if normalize_role(role) == "admin":
        return True
    return any(
        _same_id(_field(pu, "project_id"), project_id)
        and _same_id(_field(pu, "user_id"), user_id)
        and _field(pu, "status") == "active"
        for pu in assignments
    )


def filter_accessible_projects(projects, user_id, role, assignments):
    if normalize_role(role) == "admin":
        return list(projects)
    assignments = list(assignments)
    return [
        p for p in projects
        if can_access_project(_field(p, "id"), user_id, role, assignments)
    ]


def can_access_resource(resource, user_id, role, assignments) -> bool:
    """Resources without a project are organization level, so admin only."""
    project_id = _field(resource, "project_id")
    if not project_id:
        return normalize_role(role) == "admin"
    return can_access_project(project_id, user_id, role, assignments)
