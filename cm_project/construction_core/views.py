import json
import logging
from functools import wraps

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .exceptions import Forbidden, NotFound, Unauthorized
from .permissions import normalize_role
from .services import (accept_invite, accessible_projects, add_settlement,
                       assign_user, create_financial_account, create_invite,
                       create_labor, create_project, create_resource,
                       delete_labor, delete_notification, delete_project,
                       delete_resource, edit_resource, get_member,
                       get_project, get_resource, list_assignments,
                       list_financial_accounts, list_invites, list_labors,
                       list_notifications, list_pending, list_resources,
                       list_settlements, mark_all_read, mark_read,
                       recent_logs, resolve_approval, revoke_invite,
                       update_financial_account, update_labor, update_project)
from .services.projects import ensure_project_access

logger = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------
def serialize(instance):
    """Every concrete column, FKs as <name>_id. Decimals/dates go through DjangoJSONEncoder."""
    if instance is None:
        return None
    data = {
        field.attname: getattr(instance, field.attname)
        for field in instance._meta.concrete_fields
    }
    # computed flags the clients like to have
    for prop in ("is_pending", "status"):
        if prop not in data and hasattr(type(instance), prop):
            data[prop] = getattr(instance, prop)
    # secrets never leave the server
    data.pop("password", None)
    data.pop("token", None)
    return data


def _body(request):
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _pick(payload, *names, default=None):
    # accept both camelCase and snake_case keys
    for name in names:
        if name in payload:
            return payload[name]
    return default


def _error(message, status):
    return JsonResponse({"error": message}, status=status)


def _validation_message(exc):
    if hasattr(exc, "error_dict"):
        return exc.message_dict
    return "; ".join(exc.messages)


def api_view(methods, *, public=False):
    """
    JSON endpoint decorator.
    Checks the method, requires a logged-in member of an organization
    (unless public) and maps service exceptions to HTTP status codes.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in methods:
                return _error(f"Method {request.method} not allowed", 405)
            try:
                if not public:
                    user = getattr(request, "user", None)
                    if user is None or not user.is_authenticated:
                        raise Unauthorized("Unauthorized")
                    if getattr(request, "organization", None) is None:
                        raise Unauthorized("No active organization")
                return view(request, *args, **kwargs)
            except Unauthorized as exc:
                return _error(str(exc) or "Unauthorized", 401)
            except PermissionDenied as exc:  # Forbidden included
                return _error(str(exc) or "Forbidden", 403)
            except (NotFound, Http404) as exc:
                return _error(str(exc) or "Not found", 404)
            except ValidationError as exc:
                return _error(_validation_message(exc), 400)
            except Exception as exc:
                logger.exception("Unhandled error in %s", view.__name__)
                detail = str(exc) if settings.DEBUG else "Internal server error"
                return _error(detail, 500)
        return wrapper
    return decorator


def _caller(request):
    return {
        "organization": request.organization,
        "user": request.user,
        "role": request.role,
    }


def _require_admin(request):
    if normalize_role(request.role) != "admin":
        raise Forbidden("Admin access required")


# ----------------------------
# Governed resources
# ----------------------------
@api_view(["GET", "POST"])
def resource_collection(request, module):
    if request.method == "GET":
        page = request.GET.get("page") or 1
        try:
            page = int(page)
        except ValueError:
            raise ValidationError("page must be an integer")
        items = list_resources(module, page=page, **_caller(request))
        return JsonResponse({"results": [serialize(i) for i in items]})

    payload = _body(request)
    message = _pick(payload, "requestMessage", "request_message")
    instance = create_resource(module, payload, request_message=message, **_caller(request))
    return JsonResponse(serialize(instance), status=201)


@api_view(["GET", "PUT", "PATCH", "DELETE"])
def resource_detail(request, module, pk):
    if request.method == "GET":
        return JsonResponse(serialize(get_resource(module, pk, **_caller(request))))

    payload = _body(request)
    message = _pick(payload, "requestMessage", "request_message")
    if request.method == "DELETE":
        result = delete_resource(module, pk, request_message=message, **_caller(request))
        return JsonResponse({
            "status": result["status"],
            "data": serialize(result["instance"]),
        })

    instance = edit_resource(module, pk, payload, request_message=message, **_caller(request))
    return JsonResponse(serialize(instance))


# ----------------------------
# Approvals
# ----------------------------
@api_view(["GET", "POST"])
def approvals(request):
    _require_admin(request)
    if request.method == "GET":
        pending = list_pending(request.organization)
        return JsonResponse({
            key: [serialize(i) for i in items] for key, items in pending.items()
        })

    payload = _body(request)
    module = _pick(payload, "type", "module")
    pk = _pick(payload, "id", "pk")
    decision = _pick(payload, "status", "decision")
    if not module or pk is None:
        raise ValidationError("Missing required fields")
    outcome = resolve_approval(
        module, pk, decision,
        remarks=_pick(payload, "remarks"),
        **_caller(request),
    )
    return JsonResponse({"action": outcome.action, "data": serialize(outcome.instance)})


# ----------------------------
# Settlements
# ----------------------------
@api_view(["GET", "POST"])
def record_settlements(request, pk):
    if request.method == "GET":
        items = list_settlements(pk, request.organization)
        return JsonResponse({"results": [serialize(s) for s in items]})

    payload = _body(request)
    settlement, record = add_settlement(
        pk,
        organization=request.organization,
        user=request.user,
        settlement_date=_pick(payload, "settlementDate", "settlement_date"),
        amount_paid=_pick(payload, "amountPaid", "amount_paid"),
        payment_mode=_pick(payload, "paymentMode", "payment_mode", default="cash"),
        financial_account_id=_pick(payload, "financialAccountId", "financial_account_id"),
        remarks=_pick(payload, "remarks"),
        convert_to_transaction=bool(
            _pick(payload, "convertToTransaction", "convert_to_transaction", default=False)
        ),
    )
    return JsonResponse(
        {"settlement": serialize(settlement), "record": serialize(record)}, status=201
    )


# ----------------------------
# Projects
# ----------------------------
@api_view(["GET", "POST"])
def projects(request):
    if request.method == "GET":
        items = accessible_projects(request.organization, request.user, request.role)
        return JsonResponse({"results": [serialize(p) for p in items]})

    payload = _body(request)
    project = create_project(
        request.organization,
        name=_pick(payload, "name"),
        location=_pick(payload, "location"),
        assigned_user_ids=_pick(payload, "assignedUsers", "assigned_users"),
        role=request.role,
        user=request.user,
    )
    return JsonResponse(serialize(project), status=201)


@api_view(["GET", "PUT", "PATCH", "DELETE"])
def project_detail(request, pk):
    if request.method == "GET":
        project = get_project(request.organization, pk)
        ensure_project_access(project.pk, user=request.user, role=request.role)
        return JsonResponse(serialize(project))

    if request.method == "DELETE":
        delete_project(request.organization, pk, role=request.role, user=request.user)
        return JsonResponse({"success": True})

    payload = _body(request)
    project = update_project(
        request.organization,
        pk,
        name=_pick(payload, "name"),
        location=_pick(payload, "location"),
        status=_pick(payload, "status"),
        assigned_user_ids=_pick(payload, "assignedUsers", "assigned_users"),
        role=request.role,
        user=request.user,
    )
    return JsonResponse(serialize(project))


@api_view(["GET", "POST"])
def project_assignments(request, pk):
    _require_admin(request)
    project = get_project(request.organization, pk)
    if request.method == "GET":
        items = list_assignments(project, role=request.role)
        return JsonResponse({"results": [serialize(a) for a in items]})

    payload = _body(request)
    member = get_member(request.organization, _pick(payload, "userId", "user_id"))
    assignment = assign_user(
        project,
        member,
        role=request.role,
        can_view_finances=bool(
            _pick(payload, "canViewFinances", "can_view_finances", default=True)
        ),
        can_create_entries=bool(
            _pick(payload, "canCreateEntries", "can_create_entries", default=True)
        ),
        status=_pick(payload, "status", default="active"),
    )
    return JsonResponse(serialize(assignment), status=201)


# ----------------------------
# Laborers & financial accounts
# ----------------------------
@api_view(["GET", "POST"])
def labors(request):
    if request.method == "GET":
        items = list_labors(request.organization)
        return JsonResponse({"results": [serialize(labor) for labor in items]})
    labor = create_labor(
        request.organization, _body(request), role=request.role, user=request.user
    )
    return JsonResponse(serialize(labor), status=201)


@api_view(["PUT", "PATCH", "DELETE"])
def labor_detail(request, pk):
    if request.method == "DELETE":
        delete_labor(request.organization, pk, role=request.role, user=request.user)
        return JsonResponse({"success": True})
    labor = update_labor(
        request.organization, pk, _body(request), role=request.role, user=request.user
    )
    return JsonResponse(serialize(labor))


@api_view(["GET", "POST"])
def financial_accounts(request):
    if request.method == "GET":
        items = list_financial_accounts(request.organization)
        return JsonResponse({"results": [serialize(a) for a in items]})
    account = create_financial_account(
        request.organization, _body(request), role=request.role, user=request.user
    )
    return JsonResponse(serialize(account), status=201)


@api_view(["PUT", "PATCH"])
def financial_account_detail(request, pk):
    account = update_financial_account(
        request.organization, pk, _body(request), role=request.role, user=request.user
    )
    return JsonResponse(serialize(account))


# ----------------------------
# Notifications
# ----------------------------
@api_view(["GET", "PATCH"])
def notifications(request):
    if request.method == "PATCH":
        updated = mark_all_read(request.user)
        return JsonResponse({"updated": updated})
    unread_only = request.GET.get("unread") in ("1", "true")
    items = list_notifications(request.user, unread_only=unread_only)
    return JsonResponse({"results": [serialize(n) for n in items]})


@api_view(["PATCH", "DELETE"])
def notification_detail(request, pk):
    if request.method == "DELETE":
        delete_notification(pk, request.user)
        return JsonResponse({"success": True})
    payload = _body(request)
    notification = mark_read(pk, request.user, _pick(payload, "isRead", "is_read", default=True))
    return JsonResponse(serialize(notification))


# ----------------------------
# Audit log
# ----------------------------
@api_view(["GET"])
def audit_logs(request):
    _require_admin(request)
    logs = recent_logs(request.organization)
    return JsonResponse({"results": [serialize(entry) for entry in logs]})


# ----------------------------
# Invites
# ----------------------------
@api_view(["GET", "POST"])
def invites(request):
    if request.method == "GET":
        _require_admin(request)
        return JsonResponse({"results": [serialize(i) for i in list_invites(request.organization)]})

    payload = _body(request)
    invite = create_invite(
        request.organization,
        email=_pick(payload, "email"),
        role=_pick(payload, "role", default="user"),
        name=_pick(payload, "name", default=""),
        invited_by=request.user,
        inviter_role=request.role,
    )
    return JsonResponse({"success": True, "inviteId": invite.pk}, status=201)


@api_view(["DELETE"])
def invite_detail(request, pk):
    revoke_invite(pk, request.organization, role=request.role, user=request.user)
    return JsonResponse({"success": True})


# the invitee has no session yet
@csrf_exempt
@api_view(["POST"], public=True)
def invite_accept(request):
    payload = _body(request)
    user, _ = accept_invite(
        _pick(payload, "token"),
        _pick(payload, "password"),
        username=_pick(payload, "username"),
    )
    return JsonResponse({"success": True, "email": user.email})
