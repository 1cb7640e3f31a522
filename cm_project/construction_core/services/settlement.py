import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import connection, transaction

from ..exceptions import NotFound
from ..models import (APPROVED, PENDING_DELETE, PENDING_EDIT,
                      FinancialAccount, Record, RecordSettlement, Transaction)
from .audit_helper import log_action

logger = logging.getLogger(__name__)

# only live records take payments
SETTLEABLE_STATUSES = (APPROVED, PENDING_EDIT, PENDING_DELETE)
PAYMENT_MODES = ("cash", "bank")


def _to_amount(value) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError({"amount_paid": "Amount must be a number"})
    if not amount.is_finite() or amount <= Decimal("0.00"):
        raise ValidationError({"amount_paid": "Amount must be positive"})
    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError({"amount_paid": "Amount can have at most 2 decimal places"})
    return amount


def _set_statement_timeout():
    # ceiling for the whole write set; SQLite has no equivalent
    if connection.vendor == "postgresql":
        with connection.cursor() as cursor:
            cursor.execute(
                "SET LOCAL statement_timeout = %s",
                [int(settings.SETTLEMENT_TX_TIMEOUT_MS)],
            )


# ----------------------------
# Settlement workflow
# ----------------------------
def add_settlement(record_id, *, organization, user, settlement_date, amount_paid,
                   payment_mode, financial_account_id=None, remarks=None,
                   convert_to_transaction=False):
    """
    Record a (partial) payment against a record.

    Locks the record row, inserts the settlement, optionally books it as a
    cash book Transaction, then recomputes paid/balance/status from the sum of
    all settlements. Everything commits together or not at all.
    Returns (settlement, record).
    """
    amount = _to_amount(amount_paid)
    if payment_mode not in PAYMENT_MODES:
        raise ValidationError({"payment_mode": f"Invalid payment mode {payment_mode!r}"})
    if not settlement_date:
        raise ValidationError({"settlement_date": "Settlement date is required"})

    with transaction.atomic():
        _set_statement_timeout()

        # Lock the record until the transaction finishes
        try:
            record = Record.objects.select_for_update().get(
                pk=record_id, organization=organization
            )
        except (Record.DoesNotExist, ValueError, TypeError):
            raise NotFound("Record")

        if record.approval_status not in SETTLEABLE_STATUSES:
            raise ValidationError(
                f"Cannot settle a record that is {record.approval_status}"
            )

        account = None
        if financial_account_id:
            try:
                account = FinancialAccount.objects.get(
                    pk=financial_account_id, organization=organization
                )
            except (FinancialAccount.DoesNotExist, ValueError, TypeError):
                raise ValidationError({"financial_account": "Financial account not found"})

        # Validation: prevent over-settlement
        already_paid = record.total_settled()
        if already_paid + amount > record.amount:
            raise ValidationError(
                f"Payment exceeds record outstanding amount "
                f"({record.amount - already_paid} left)"
            )

        settlement = RecordSettlement.objects.create(
            organization=organization,
            record=record,
            settlement_date=settlement_date,
            amount_paid=amount,
            payment_mode=payment_mode,
            financial_account=account,
            remarks=remarks or None,
            created_by=user,
        )

        txn = None
        if convert_to_transaction:
            # booked directly, the settlement itself is the approval
            txn = Transaction(
                organization=organization,
                type=record.type,
                amount=amount,
                description=f"Settlement for: {record.description}",
                date=settlement_date,
                project_id=record.project_id,
                ledger_id=record.ledger_id,
                payment_mode=payment_mode,
                financial_account=account,
                converted_from_record=record,
                approval_status=APPROVED,
                created_by=user,
            )
            txn.full_clean()
            txn.save()
            settlement.transaction = txn
            settlement.save(update_fields=["transaction"])

        # Recompute from the DB sum, never from a running counter
        record.recalc_totals()
        record.save(update_fields=["paid_amount", "balance_amount", "status", "updated_at"])

    # AUDIT LOGS
    log_action(
        action="CREATE",
        entity="SETTLEMENT",
        entity_id=settlement.pk,
        details=f"Settled {amount} against record {record.pk} ({record.status})",
        organization=organization,
        user=user,
        metadata={
            "record_id": record.pk,
            "amount_paid": amount,
            "paid_amount": record.paid_amount,
            "balance_amount": record.balance_amount,
            "transaction_id": txn.pk if txn else None,
        },
    )
    logger.info(
        "Record %s settled %s, now %s (balance %s)",
        record.pk, amount, record.status, record.balance_amount,
    )
    return settlement, record


def list_settlements(record_id, organization):
    if not Record.objects.for_organization(organization).filter(pk=record_id).exists():
        raise NotFound("Record")
    return list(
        RecordSettlement.objects.for_organization(organization)
        .filter(record_id=record_id)
        .select_related("transaction", "financial_account")
        .order_by("-settlement_date", "-created_at", "-id")
    )
