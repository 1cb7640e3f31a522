import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models.deletion import ProtectedError

from ..exceptions import Forbidden, InvalidTransition, NotFound
from ..models import (APPROVED, PENDING_CREATE, PENDING_DELETE, PENDING_EDIT,
                      REJECTED)
from ..permissions import normalize_role, requires_approval
from .audit_helper import log_action
from .notifications import notify, queue_admin_notification
from .projects import accessible_project_ids, ensure_project_access
from .registry import ResourceModule, all_modules, get_module

logger = logging.getLogger(__name__)

DECISIONS = (APPROVED, REJECTED)


@dataclass
class Resolution:
    # "approved" | "edited" | "deleted" | "rejected"
    action: str
    pk: Any
    instance: Optional[Any] = None


# ----------------------------
# Lookups (tenant guard)
# ----------------------------
def _lookup(descriptor: ResourceModule, pk, organization, *, lock=False):
    """
    Every read/write goes through here: an id from another organization is
    indistinguishable from an id that doesn't exist.
    """
    qs = descriptor.model.objects.for_organization(organization)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=pk)
    except (descriptor.model.DoesNotExist, ValueError, TypeError):
        raise NotFound(descriptor.model._meta.verbose_name.capitalize())


def _check_project(descriptor, project_id, *, user, role, creating=False):
    if descriptor.project_scoped:
        ensure_project_access(
            project_id, user=user, role=role,
            creating_entry=creating and descriptor.finance,
        )


def _hard_delete(descriptor, instance):
    try:
        with transaction.atomic():
            instance.delete()
    except ProtectedError:
        raise ValidationError(
            f"Cannot delete this {descriptor.model._meta.verbose_name}: "
            "other entries still refer to it."
        )


def _label(descriptor, instance):
    return f"{descriptor.model._meta.verbose_name} '{instance}'"


def get_resource(module, pk, *, organization, user, role):
    descriptor = get_module(module)
    instance = _lookup(descriptor, pk, organization)
    if descriptor.project_scoped:
        allowed = accessible_project_ids(
            organization, user, role, finance=descriptor.finance
        )
        # project-less rows are organization level, admins only
        if allowed is not None and instance.project_id not in allowed:
            raise Forbidden("You don't have access to this project")
    return instance


def list_resources(module, *, organization, user, role, limit=100, page=1):
    descriptor = get_module(module)
    qs = descriptor.model.objects.for_organization(organization)
    if descriptor.project_scoped:
        allowed = accessible_project_ids(
            organization, user, role, finance=descriptor.finance
        )
        if allowed is not None:
            qs = qs.filter(project_id__in=allowed)
    qs = qs.order_by("-created_at", "-pk")
    start = (max(int(page), 1) - 1) * limit
    return list(qs[start:start + limit])


# ----------------------------
# Create / edit / delete
# ----------------------------
def create_resource(module, payload, *, organization, user, role, request_message=None):
    """Create immediately (approved) or as pending-create, per the matrix."""
    descriptor = get_module(module)
    role = normalize_role(role)
    cleaned = descriptor.clean_payload(payload, organization, creating=True)
    _check_project(descriptor, cleaned.get("project_id"), user=user, role=role, creating=True)

    pending = requires_approval(descriptor.tag, "create", role)
    instance = descriptor.model(organization=organization, created_by=user)
    descriptor.apply(instance, cleaned)
    instance.approval_status = PENDING_CREATE if pending else APPROVED
    instance.rejection_count = 0
    if role != "admin":
        # still tagged so admins can see who added what
        instance.submitted_by = user
        instance.request_message = request_message

    with transaction.atomic():
        instance.full_clean()
        instance.save()

    log_action(
        action="SUBMIT" if pending else "CREATE",
        entity=descriptor.entity,
        entity_id=instance.pk,
        details=f"Created {_label(descriptor, instance)} ({instance.approval_status})",
        organization=organization,
        user=user,
        metadata={"module": descriptor.tag, "fields": cleaned},
    )
    if role != "admin":
        queue_admin_notification(
            organization,
            f"{user} added {_label(descriptor, instance)}",
            submitter=user,
            item_type=descriptor.tag,
            item_id=instance.pk,
        )
    logger.info("%s %s created as %s", descriptor.tag, instance.pk, instance.approval_status)
    return instance


def edit_resource(module, pk, diff, *, organization, user, role, request_message=None):
    """
    Admins (or modules without edit approval) apply the diff right away.
    Everyone else only parks it in pending_data; a second request overwrites
    the first.
    """
    descriptor = get_module(module)
    role = normalize_role(role)
    with transaction.atomic():
        instance = _lookup(descriptor, pk, organization, lock=True)
        cleaned = descriptor.clean_payload(diff, organization)
        if descriptor.project_scoped:
            _check_project(descriptor, instance.project_id, user=user, role=role)
            target = cleaned.get("project_id")
            if "project_id" in cleaned and target != instance.project_id:
                _check_project(descriptor, target, user=user, role=role)

        if requires_approval(descriptor.tag, "edit", role):
            instance.approval_status = PENDING_EDIT
            instance.pending_data = descriptor.to_pending(cleaned)
            instance.submitted_by = user
            instance.request_message = request_message
            instance.save(update_fields=[
                "approval_status", "pending_data", "submitted_by",
                "request_message", "updated_at",
            ])
            action = "SUBMIT"
        else:
            descriptor.apply(instance, cleaned)
            instance.approval_status = APPROVED
            # a direct edit supersedes whatever was proposed
            instance.pending_data = None
            instance.full_clean()
            instance.save()
            action = "UPDATE"

    log_action(
        action=action,
        entity=descriptor.entity,
        entity_id=instance.pk,
        details=f"Edited {_label(descriptor, instance)} ({instance.approval_status})",
        organization=organization,
        user=user,
        metadata={"module": descriptor.tag, "changes": cleaned},
    )
    if action == "SUBMIT":
        queue_admin_notification(
            organization,
            f"{user} requested changes to {_label(descriptor, instance)}",
            submitter=user,
            item_type=descriptor.tag,
            item_id=instance.pk,
        )
    return instance


def delete_resource(module, pk, *, organization, user, role, request_message=None):
    descriptor = get_module(module)
    role = normalize_role(role)
    with transaction.atomic():
        instance = _lookup(descriptor, pk, organization, lock=True)
        if descriptor.project_scoped:
            _check_project(descriptor, instance.project_id, user=user, role=role)

        if requires_approval(descriptor.tag, "delete", role):
            # stays live and visible until an admin decides
            instance.approval_status = PENDING_DELETE
            instance.submitted_by = user
            instance.request_message = request_message
            instance.save(update_fields=[
                "approval_status", "submitted_by", "request_message", "updated_at",
            ])
            result = {"status": PENDING_DELETE, "instance": instance}
        else:
            label = _label(descriptor, instance)
            _hard_delete(descriptor, instance)
            result = {"status": "deleted", "instance": None}

    if result["status"] == PENDING_DELETE:
        log_action(
            action="SUBMIT",
            entity=descriptor.entity,
            entity_id=pk,
            details=f"Requested deletion of {_label(descriptor, instance)}",
            organization=organization,
            user=user,
        )
        queue_admin_notification(
            organization,
            f"{user} requested deletion of {_label(descriptor, instance)}",
            submitter=user,
            item_type=descriptor.tag,
            item_id=pk,
        )
    else:
        log_action(
            action="DELETE",
            entity=descriptor.entity,
            entity_id=pk,
            details=f"Deleted {label}",
            organization=organization,
            user=user,
        )
    return result


# ----------------------------
# Admin decision
# ----------------------------
def resolve_approval(module, pk, decision, *, organization, user, role, remarks=None):
    """
    Resolve a pending request.

    approved + pending-delete  -> row deleted             (action "deleted")
    approved + pending-edit    -> pending_data merged     (action "edited")
    approved + anything else   -> status flipped          (action "approved")
    rejected                   -> label only, counter +1  (action "rejected")

    Items that aren't pending raise InvalidTransition, so resolving twice
    changes nothing.
    """
    if normalize_role(role) != "admin":
        raise Forbidden("Only admins can resolve approvals")
    decision = (decision or "").strip().lower()
    if decision not in DECISIONS:
        raise ValidationError({"status": f"Invalid status {decision!r}"})
    descriptor = get_module(module)
    remarks = remarks or None

    with transaction.atomic():
        instance = _lookup(descriptor, pk, organization, lock=True)
        prior = instance.approval_status
        if not instance.is_pending:
            raise InvalidTransition(
                f"{_label(descriptor, instance)} is {prior}, there is nothing to resolve"
            )
        submitter = instance.submitted_by
        label = _label(descriptor, instance)

        if decision == APPROVED:
            if prior == PENDING_DELETE:
                _hard_delete(descriptor, instance)
                outcome = Resolution("deleted", pk)
            elif prior == PENDING_EDIT and instance.pending_data is not None:
                descriptor.apply(instance, instance.pending_data)
                instance.pending_data = None
                instance.approval_status = APPROVED
                instance.remarks = remarks
                instance.full_clean()
                instance.save()
                outcome = Resolution("edited", pk, instance)
            else:
                instance.approval_status = APPROVED
                instance.remarks = remarks
                instance.save(update_fields=["approval_status", "remarks", "updated_at"])
                outcome = Resolution("approved", pk, instance)
        else:
            # rejection is a label, live values stay as they are;
            # the stale proposal is dropped so it can't be replayed later
            instance.approval_status = REJECTED
            instance.remarks = remarks
            instance.rejection_count = (instance.rejection_count or 0) + 1
            instance.pending_data = None
            instance.save(update_fields=[
                "approval_status", "remarks", "rejection_count",
                "pending_data", "updated_at",
            ])
            outcome = Resolution("rejected", pk, instance)

        verb = "rejected" if decision == REJECTED else "approved"
        note = f": {remarks}" if remarks else ""
        notify(
            submitter,
            f"Your {prior.replace('pending-', '')} request for {label} was {verb}{note}",
            organization=organization,
            item_type=descriptor.tag,
            item_id=pk,
            type=verb,
        )

    log_action(
        action="REJECT" if decision == REJECTED else "APPROVE",
        entity=descriptor.entity,
        entity_id=pk,
        details=f"{outcome.action.capitalize()} {label} (was {prior})",
        organization=organization,
        user=user,
        metadata={"module": descriptor.tag, "prior": prior, "remarks": remarks},
    )
    logger.info("%s %s resolved: %s (was %s)", descriptor.tag, pk, outcome.action, prior)
    return outcome


def list_pending(organization):
    """Every pending-* row of the organization, grouped by module."""
    return {
        descriptor.listing_key: list(
            descriptor.model.objects.for_organization(organization)
            .pending()
            .order_by("created_at", "pk")
        )
        for descriptor in all_modules()
    }
