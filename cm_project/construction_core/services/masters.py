"""
Organization master data outside the approval workflow: laborers on the
muster roll and the cash/bank accounts payments are drawn from.

Anyone in the organization can read them, only admins change them.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..exceptions import Forbidden, NotFound
from ..models import FinancialAccount, Labor
from ..permissions import normalize_role
from .audit_helper import log_action
from .registry import snake_case

logger = logging.getLogger(__name__)

LABOR_FIELDS = ("name", "type", "rate")
FINANCIAL_ACCOUNT_FIELDS = (
    "name", "type", "account_number", "bank_name", "ifsc_code", "opening_balance",
)


def _require_admin(role, what):
    if normalize_role(role) != "admin":
        raise Forbidden(f"Only admins can manage {what}")


def _apply(instance, payload, fields, *, required=()):
    """
    Copy the allowed keys of `payload` (snake_case or camelCase) onto
    `instance`, then let full_clean() convert and validate them.
    """
    given = {}
    for key, value in (payload or {}).items():
        name = snake_case(key)
        if name not in fields:
            continue
        if isinstance(value, bool):
            raise ValidationError({name: "Enter a value, not true/false."})
        if isinstance(value, float):
            value = str(value)
        if name == "type" and isinstance(value, str):
            # clients send "BANK" / "Cash"
            value = value.strip().lower()
        given[name] = value

    missing = [name for name in required if given.get(name) in (None, "")]
    if missing:
        raise ValidationError({name: "This field is required." for name in missing})
    for name, value in given.items():
        setattr(instance, name, value)
    if len((instance.name or "").strip()) < 2:
        raise ValidationError({"name": "Name must be at least 2 characters"})
    instance.name = instance.name.strip()
    instance.full_clean()
    return instance


def _get(model, organization, pk, *, lock=False):
    qs = model.objects.for_organization(organization)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(model._meta.verbose_name.capitalize())


def _audit(action, entity, instance, details, organization, user):
    log_action(
        action=action,
        entity=entity,
        entity_id=instance.pk,
        details=details,
        organization=organization,
        user=user,
    )


# ----------------------------
# Laborers
# ----------------------------
def list_labors(organization):
    return list(Labor.objects.for_organization(organization).order_by("name", "pk"))


def create_labor(organization, payload, *, role, user=None):
    _require_admin(role, "laborers")
    labor = _apply(
        Labor(organization=organization), payload, LABOR_FIELDS,
        required=("name", "rate"),
    )
    labor.save()
    _audit("CREATE", "LABOR", labor, f"Added laborer {labor.name}", organization, user)
    return labor


def update_labor(organization, labor_id, payload, *, role, user=None):
    _require_admin(role, "laborers")
    with transaction.atomic():
        labor = _apply(_get(Labor, organization, labor_id, lock=True), payload, LABOR_FIELDS)
        labor.save()
    _audit("UPDATE", "LABOR", labor, f"Updated laborer {labor.name}", organization, user)
    return labor


def delete_labor(organization, labor_id, *, role, user=None):
    _require_admin(role, "laborers")
    labor = _get(Labor, organization, labor_id)
    name = labor.name
    with transaction.atomic():
        # refused by the pre_delete signal once attendance exists
        labor.delete()
    log_action(
        action="DELETE",
        entity="LABOR",
        entity_id=labor_id,
        details=f"Deleted laborer {name}",
        organization=organization,
        user=user,
    )


# ----------------------------
# Financial accounts
# ----------------------------
def list_financial_accounts(organization):
    return list(
        FinancialAccount.objects.for_organization(organization).order_by("created_at", "pk")
    )


def create_financial_account(organization, payload, *, role, user=None):
    _require_admin(role, "financial accounts")
    account = _apply(
        FinancialAccount(organization=organization), payload, FINANCIAL_ACCOUNT_FIELDS,
        required=("name", "type"),
    )
    account.save()
    _audit("CREATE", "FINANCIAL_ACCOUNT", account,
           f"Created financial account {account}", organization, user)
    logger.info("Financial account %s created for org %s", account.pk, organization.pk)
    return account


def update_financial_account(organization, account_id, payload, *, role, user=None):
    _require_admin(role, "financial accounts")
    with transaction.atomic():
        account = _apply(
            _get(FinancialAccount, organization, account_id, lock=True),
            payload, FINANCIAL_ACCOUNT_FIELDS,
        )
        account.save()
    _audit("UPDATE", "FINANCIAL_ACCOUNT", account,
           f"Updated financial account {account}", organization, user)
    return account
