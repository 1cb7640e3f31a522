from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .organization import Organization

PROJECT_STATUS_CHOICES = [
    ("active", "Active"),
    ("completed", "Completed"),
    ("on_hold", "On hold"),
]


class Project(models.Model):  # A construction site / job
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE)
    name = models.CharField(max_length=200)
    location = models.CharField(max_length=255, null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=PROJECT_STATUS_CHOICES, default="active"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        indexes = [models.Index(fields=["organization", "status"], name="project_org_status_idx")]

    def __str__(self):
        return self.name


class ProjectAssignment(models.Model):
    """ Which non-admin users may see / post to a project """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("inactive", "Inactive"),
    ]

    project = models.ForeignKey(
        Project, on_delete=models.CASCADE, related_name="assignments"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="project_assignments",
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="active")
    can_view_finances = models.BooleanField(default=True)
    can_create_entries = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["project", "user"], name="uq_project_user_assignment"
            ),
        ]

    def __str__(self):
        return f"{self.user} on {self.project} ({self.status})"


class FinancialAccount(models.Model):  # Cash box or bank account
    TYPE_CHOICES = [
        ("cash", "Cash"),
        ("bank", "Bank"),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE)
    name = models.CharField(max_length=120)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default="cash")
    account_number = models.CharField(max_length=64, null=True, blank=True)
    bank_name = models.CharField(max_length=120, null=True, blank=True)
    ifsc_code = models.CharField(max_length=20, null=True, blank=True)
    opening_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "name"], name="uq_org_financial_account_name"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.type})"

    def clean(self):
        if self.type == "bank" and not self.bank_name:
            raise ValidationError("Bank accounts need a bank name")
