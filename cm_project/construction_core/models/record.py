from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from ..managers import TenantManager
from .approvable import (ApprovableModel, ENTRY_TYPE_CHOICES,
                         PAYMENT_MODE_CHOICES)
from .ledger import Ledger, Transaction
from .organization import Organization
from .project import FinancialAccount, Project

RECORD_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("partial", "Partially paid"),
    ("paid", "Paid"),
]

ZERO = Decimal("0.00")


def settlement_status(amount, paid_amount):
    """paid iff paid >= amount, partial iff 0 < paid < amount, else pending"""
    if paid_amount >= amount:
        return "paid"
    if paid_amount > ZERO:
        return "partial"
    return "pending"


# ---------- Record (outstanding bill / invoice) ----------
class Record(ApprovableModel):
    type = models.CharField(max_length=10, choices=ENTRY_TYPE_CHOICES)
    description = models.TextField()
    # Total owed
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    # Derived from settlements, never written by hand
    paid_amount = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    balance_amount = models.DecimalField(max_digits=18, decimal_places=2, default=ZERO)
    status = models.CharField(
        max_length=10, choices=RECORD_STATUS_CHOICES, default="pending"
    )

    due_date = models.DateField()
    project = models.ForeignKey(
        Project, on_delete=models.PROTECT, related_name="records"
    )
    ledger = models.ForeignKey(
        Ledger, on_delete=models.PROTECT, related_name="records"
    )
    payment_mode = models.CharField(
        max_length=10, choices=PAYMENT_MODE_CHOICES, default="cash"
    )
    financial_account = models.ForeignKey(
        FinancialAccount, null=True, blank=True, on_delete=models.PROTECT
    )
    bill_url = models.URLField(max_length=500, null=True, blank=True)

    # GST invoice details
    invoice_number = models.CharField(max_length=64, null=True, blank=True)
    invoice_date = models.DateField(null=True, blank=True)
    taxable_amount = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True
    )
    total_gst_amount = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True
    )

    class Meta:
        indexes = [
            models.Index(fields=["organization", "due_date"], name="record_org_due_idx"),
            models.Index(fields=["organization", "approval_status"], name="record_org_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="record_positive_amount",
            ),
        ]

    def __str__(self):
        return f"Record {self.invoice_number or self.pk} ({self.status})"

    def total_settled(self):
        # Sum in the database, Decimal all the way
        if not self.pk:
            return ZERO
        return self.settlements.aggregate(
            total=Coalesce(Sum("amount_paid"), ZERO,
                           output_field=models.DecimalField(max_digits=18, decimal_places=2))
        )["total"]

    def recalc_totals(self):
        """ Keep paid/balance/status in sync with the settlement history """
        self.paid_amount = self.total_settled()
        self.balance_amount = self.amount - self.paid_amount
        self.status = settlement_status(self.amount, self.paid_amount)

    def clean(self):
        if self.amount is not None and self.amount <= ZERO:
            raise ValidationError("Record amount must be positive")

    def save(self, *args, **kwargs):
        # totals are derived, so recompute on every full save
        # (amount edits included); partial saves pass update_fields
        if kwargs.get("update_fields") is None and self.amount is not None:
            self.recalc_totals()
        return super().save(*args, **kwargs)


# ---------- Settlement (partial payment against a record) ----------
class RecordSettlement(models.Model):
    """ Append-only: corrections are new settlements, never edits """

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE)
    record = models.ForeignKey(
        Record, on_delete=models.CASCADE, related_name="settlements"
    )
    settlement_date = models.DateField()
    amount_paid = models.DecimalField(max_digits=18, decimal_places=2)
    payment_mode = models.CharField(max_length=10, choices=PAYMENT_MODE_CHOICES)
    financial_account = models.ForeignKey(
        FinancialAccount, null=True, blank=True, on_delete=models.PROTECT
    )
    remarks = models.TextField(null=True, blank=True)
    # Set when the settlement was also booked as a cash book entry
    transaction = models.OneToOneField(
        Transaction, null=True, blank=True, on_delete=models.SET_NULL,
        related_name="settlement",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        indexes = [models.Index(fields=["organization", "record"], name="settlement_org_record_idx")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_paid__gt=0),
                name="settlement_positive_amount",
            ),
        ]

    def __str__(self):
        return f"{self.amount_paid} on {self.settlement_date} for {self.record_id}"

    def clean(self):
        if self.amount_paid is not None and self.amount_paid <= ZERO:
            raise ValidationError("Settlement amount must be positive")
        if self.record_id and self.organization_id != self.record.organization_id:
            raise ValidationError("Settlement and record must belong to same organization")

    def save(self, *args, **kwargs):
        if self.pk:
            # only the transaction back-link may be filled in after insert
            update_fields = kwargs.get("update_fields")
            if update_fields is None or set(update_fields) - {"transaction"}:
                raise ValidationError("Settlements are immutable")
            return super().save(*args, **kwargs)
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        # the record's own deletion cascades, single rows never go away
        raise ValidationError("Settlements cannot be deleted")
