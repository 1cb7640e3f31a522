from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from .approvable import (ApprovableModel, ENTRY_TYPE_CHOICES,
                         PAYMENT_MODE_CHOICES)
from .project import FinancialAccount, Project


# ---------- Ledger (party / head of account) ----------
class Ledger(ApprovableModel):
    # e.g. a supplier, a subcontractor, a client
    name = models.CharField(max_length=200)
    type = models.CharField(
        max_length=10, choices=ENTRY_TYPE_CHOICES, null=True, blank=True
    )
    # GST details for the register
    gst_number = models.CharField(max_length=20, null=True, blank=True)
    is_gst_registered = models.BooleanField(default=False)
    billing_address = models.TextField(null=True, blank=True)
    state = models.CharField(max_length=64, null=True, blank=True)

    class Meta:
        constraints = [
            # Within one organization ledger names are unique
            models.UniqueConstraint(
                fields=["organization", "name"], name="uq_org_ledger_name"
            ),
        ]
        indexes = [models.Index(fields=["organization", "approval_status"], name="ledger_org_status_idx")]

    def __str__(self):
        return self.name


# ---------- Transaction (cash book entry) ----------
class Transaction(ApprovableModel):
    type = models.CharField(max_length=10, choices=ENTRY_TYPE_CHOICES)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    description = models.TextField()
    date = models.DateField()

    project = models.ForeignKey(
        Project, null=True, blank=True, on_delete=models.PROTECT,
        related_name="transactions",
    )
    ledger = models.ForeignKey(
        Ledger, null=True, blank=True, on_delete=models.PROTECT,
        related_name="transactions",
    )
    payment_mode = models.CharField(
        max_length=10, choices=PAYMENT_MODE_CHOICES, default="cash"
    )
    financial_account = models.ForeignKey(
        FinancialAccount, null=True, blank=True, on_delete=models.PROTECT
    )
    bill_url = models.URLField(max_length=500, null=True, blank=True)

    # Set when the transaction was generated from a record settlement
    converted_from_record = models.ForeignKey(
        "Record", null=True, blank=True, on_delete=models.SET_NULL,
        related_name="generated_transactions",
    )

    class Meta:
        indexes = [
            models.Index(fields=["organization", "date"], name="txn_org_date_idx"),
            models.Index(fields=["organization", "approval_status"], name="txn_org_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="txn_positive_amount",
            ),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} on {self.date}"

    def clean(self):
        if self.amount is not None and self.amount <= Decimal("0.00"):
            raise ValidationError("Transaction amount must be positive")
