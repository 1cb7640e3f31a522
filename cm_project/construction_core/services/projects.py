from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models.deletion import ProtectedError

from ..exceptions import Forbidden, NotFound
from ..models import Membership, Project, ProjectAssignment
from ..permissions import (can_access_project, filter_accessible_projects,
                           normalize_role)
from .audit_helper import log_action


def _require_admin(role, message="Only admins can manage projects"):
    if normalize_role(role) != "admin":
        raise Forbidden(message)


def _clean_name(name):
    name = (name or "").strip()
    if len(name) < 2:
        raise ValidationError({"name": "Project name must be at least 2 characters"})
    return name


def _clean_status(status):
    status = (status or "").strip().lower()
    if status not in dict(Project._meta.get_field("status").choices):
        raise ValidationError({"status": f"Unknown project status {status!r}"})
    return status


def _check_unique_name(organization, name, exclude_pk=None):
    qs = Project.objects.for_organization(organization).filter(name=name)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError({"name": "A project with this name already exists"})


def get_member(organization, user_id):
    """Active member of `organization` with primary key `user_id`, else NotFound."""
    try:
        membership = Membership.objects.select_related("user").get(
            organization=organization, user_id=user_id, is_active=True
        )
    except (Membership.DoesNotExist, ValueError, TypeError):
        raise NotFound("Member")
    return membership.user


def _replace_assignments(project, user_ids):
    # the submitted list is the whole team: everyone else is dropped
    if not isinstance(user_ids, (list, tuple)):
        raise ValidationError({"assigned_users": "Expected a list of user ids"})
    members = [get_member(project.organization, uid) for uid in user_ids]
    ProjectAssignment.objects.filter(project=project).delete()
    ProjectAssignment.objects.bulk_create(
        ProjectAssignment(project=project, user=member, status="active")
        for member in {m.pk: m for m in members}.values()
    )


def create_project(organization, *, name, role, user=None, location=None,
                   assigned_user_ids=None):
    _require_admin(role)
    name = _clean_name(name)
    _check_unique_name(organization, name)
    with transaction.atomic():
        project = Project.objects.create(
            organization=organization, name=name, location=location or None
        )
        if assigned_user_ids is not None:
            _replace_assignments(project, assigned_user_ids)
    log_action(
        action="CREATE",
        entity="PROJECT",
        entity_id=project.pk,
        details=f"Created project {project.name}",
        organization=organization,
        user=user,
    )
    return project


def update_project(organization, project_id, *, role, user=None, name=None,
                   location=None, status=None, assigned_user_ids=None):
    """
    Only the given values change. `assigned_user_ids`, when given, replaces
    the project's team.
    """
    _require_admin(role)
    with transaction.atomic():
        project = get_project(organization, project_id, lock=True)
        if name is not None:
            project.name = _clean_name(name)
            _check_unique_name(organization, project.name, exclude_pk=project.pk)
        if location is not None:
            project.location = location or None
        if status is not None:
            project.status = _clean_status(status)
        project.save()
        if assigned_user_ids is not None:
            _replace_assignments(project, assigned_user_ids)
    log_action(
        action="UPDATE",
        entity="PROJECT",
        entity_id=project.pk,
        details=f"Updated project {project.name}",
        organization=organization,
        user=user,
    )
    return project


def delete_project(organization, project_id, *, role, user=None):
    _require_admin(role)
    project = get_project(organization, project_id)
    name = project.name
    try:
        with transaction.atomic():
            project.delete()
    except ProtectedError:
        raise ValidationError(
            "Cannot delete a project that still has financial records or material entries."
        )
    log_action(
        action="DELETE",
        entity="PROJECT",
        entity_id=project_id,
        details=f"Deleted project {name}",
        organization=organization,
        user=user,
    )


def assign_user(project, member, *, role, can_view_finances=True,
                can_create_entries=True, status="active"):
    """Create or update the assignment of `member` to `project`."""
    _require_admin(role)
    is_member = Membership.objects.filter(
        organization_id=project.organization_id, user=member, is_active=True
    ).exists()
    if not is_member:
        raise ValidationError("User is not a member of this organization")
    if status not in dict(ProjectAssignment.STATUS_CHOICES):
        raise ValidationError({"status": f"Unknown assignment status {status!r}"})

    with transaction.atomic():
        assignment, _ = ProjectAssignment.objects.update_or_create(
            project=project,
            user=member,
            defaults={
                "status": status,
                "can_view_finances": can_view_finances,
                "can_create_entries": can_create_entries,
            },
        )
    return assignment


def list_assignments(project, *, role):
    _require_admin(role)
    return list(
        ProjectAssignment.objects.filter(project=project)
        .select_related("user")
        .order_by("user__username")
    )


def assignments_for(user):
    return list(ProjectAssignment.objects.filter(user=user))


def get_project(organization, project_id, *, lock=False):
    qs = Project.objects.for_organization(organization)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=project_id)
    except (Project.DoesNotExist, ValueError, TypeError):
        raise NotFound("Project")


def accessible_projects(organization, user, role):
    projects = Project.objects.for_organization(organization).order_by("name")
    if normalize_role(role) == "admin":
        return list(projects)
    return filter_accessible_projects(projects, user.pk, role, assignments_for(user))


def accessible_project_ids(organization, user, role, *, finance=False):
    """
    None means "every project" (admins).
    Finance listings also need the can_view_finances flag.
    """
    if normalize_role(role) == "admin":
        return None
    qs = ProjectAssignment.objects.filter(
        user=user, status="active", project__organization=organization
    )
    if finance:
        qs = qs.filter(can_view_finances=True)
    return list(qs.values_list("project_id", flat=True))


def ensure_project_access(project_id, *, user, role, creating_entry=False):
    """
    Raise Forbidden unless the caller may post to `project_id`.
    Entries without a project are organization level: admins only, the same
    rule get_resource/list_resources apply when reading them.
    """
    if normalize_role(role) == "admin":
        return
    if project_id is None:
        raise Forbidden("Only admins can manage entries that aren't tied to a project")
    assignments = assignments_for(user)
    if not can_access_project(project_id, user.pk, role, assignments):
        raise Forbidden("You don't have access to this project")
    if creating_entry:
        allowed = any(
            a.project_id == project_id and a.can_create_entries
            for a in assignments
        )
        if not allowed:
            raise Forbidden(
                "You don't have permission to create financial entries for this project"
            )
