"""
Read-side totals. Only effective rows count: approved ones plus rows whose
edit/delete is still waiting (with their live values).
"""
from decimal import Decimal

from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from ..models import MaterialLedgerEntry, Transaction


def _sum(qs, field, condition, zero):
    places = -zero.as_tuple().exponent
    return qs.aggregate(
        total=Coalesce(
            Sum(field, filter=condition), zero,
            output_field=models.DecimalField(max_digits=18, decimal_places=places),
        )
    )["total"]


def ledger_summary(ledger):
    qs = Transaction.objects.for_organization(ledger.organization_id).effective().filter(
        ledger=ledger
    )
    zero = Decimal("0.00")
    income = _sum(qs, "amount", Q(type="income"), zero)
    expense = _sum(qs, "amount", Q(type="expense"), zero)
    return {"income": income, "expense": expense, "net": income - expense}


def material_stock(material, project=None):
    qs = MaterialLedgerEntry.objects.for_organization(material.organization_id).effective().filter(
        material=material
    )
    if project is not None:
        qs = qs.filter(project=project)
    zero = Decimal("0.000")
    return _sum(qs, "quantity", Q(type="in"), zero) - _sum(qs, "quantity", Q(type="out"), zero)
