from django.conf import settings
from django.db import models
from ..managers import TenantManager
from .organization import Organization

APPROVED = "approved"
PENDING_CREATE = "pending-create"
PENDING_EDIT = "pending-edit"
PENDING_DELETE = "pending-delete"
REJECTED = "rejected"

APPROVAL_STATUS_CHOICES = [
    (APPROVED, "Approved"),
    (PENDING_CREATE, "Pending create"),
    (PENDING_EDIT, "Pending edit"),
    (PENDING_DELETE, "Pending delete"),
    (REJECTED, "Rejected"),
]

PAYMENT_MODE_CHOICES = [
    ("cash", "Cash"),
    ("bank", "Bank"),
]

ENTRY_TYPE_CHOICES = [
    ("income", "Income"),
    ("expense", "Expense"),
]


class ApprovableModel(models.Model):
    """
    Columns shared by every resource that goes through the admin approval queue.

        approved        live, nothing waiting
        pending-create  created by a user, waiting for an admin
        pending-edit    live values unchanged, proposed diff in pending_data
        pending-delete  still live and visible until an admin decides
        rejected        last request was turned down (not a rollback)
    """

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE)

    approval_status = models.CharField(
        max_length=20, choices=APPROVAL_STATUS_CHOICES, default=APPROVED
    )
    # Proposed field values, only meaningful while pending-edit
    pending_data = models.JSONField(null=True, blank=True)
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    request_message = models.TextField(null=True, blank=True)
    # Admin's note on the last decision
    remarks = models.TextField(null=True, blank=True)
    rejection_count = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()

    class Meta:
        abstract = True

    @property
    def is_pending(self):
        return (self.approval_status or "").startswith("pending")
