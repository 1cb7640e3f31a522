from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from construction_core.services.approval import resolve_approval
from construction_core.services.registry import module_for_model

# ---------- Admin actions ----------


def _admin_role(request):
    # superusers act as admins of whatever they resolve
    if request.user.is_superuser:
        return "admin"
    return getattr(request, "role", None)


def _resolve_selected(modeladmin, request, queryset, decision):
    """
    Resolve each selected pending row through the same state machine the API
    uses, one row per transaction, and report per-row failures.
    """
    descriptor = module_for_model(queryset.model)
    candidates = queryset.filter(approval_status__startswith="pending")
    total = candidates.count()
    success = 0
    failures = 0

    for obj in candidates:
        try:
            resolve_approval(
                descriptor.tag,
                obj.pk,
                decision,
                organization=obj.organization,
                user=request.user,
                role=_admin_role(request),
                remarks="Resolved from admin",
            )
            success += 1
        except ValidationError as exc:
            failures += 1
            modeladmin.message_user(
                request,
                _("Could not resolve %(obj)s: %(err)s") % {"obj": obj, "err": "; ".join(exc.messages)},
                level=messages.ERROR,
            )
        except Exception as exc:
            failures += 1
            # one failure doesn't stop the whole batch
            modeladmin.message_user(
                request,
                _("Error resolving %(obj)s: %(err)s") % {"obj": obj, "err": exc},
                level=messages.ERROR,
            )

    # Final summary message
    modeladmin.message_user(
        request,
        _("%(decision)s %(success)d of %(total)d pending item(s). %(failures)d failed.") % {
            "decision": decision.capitalize(),
            "success": success,
            "total": total,
            "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )


@admin.action(description="Approve selected pending items")
def approve_selected(modeladmin, request, queryset):
    _resolve_selected(modeladmin, request, queryset, "approved")


@admin.action(description="Reject selected pending items")
def reject_selected(modeladmin, request, queryset):
    _resolve_selected(modeladmin, request, queryset, "rejected")
