from django.conf import settings
from django.db import models
from ..managers import TenantManager
from .organization import Organization

AUDIT_ACTION_CHOICES = [
    ("CREATE", "Create"),
    ("UPDATE", "Update"),
    ("DELETE", "Delete"),
    ("SUBMIT", "Submit"),
    ("APPROVE", "Approve"),
    ("REJECT", "Reject"),
]


# ---------- Audit / Event log ----------
class AuditLog(models.Model):  # accountability across the whole system
    organization = models.ForeignKey(
        Organization,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
    )
    # Nullable in case the action was automated (e.g. a Celery task)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    action = models.CharField(max_length=20, choices=AUDIT_ACTION_CHOICES)
    # What kind of object was affected, e.g. "LEDGER", "RECORD"
    entity = models.CharField(max_length=40)
    entity_id = models.CharField(max_length=64)
    details = models.TextField(blank=True, default="")
    metadata = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["organization", "user"], name="auditlog_org_user_idx"),
            models.Index(fields=["organization", "created_at"], name="auditlog_org_created_idx"),
        ]

    def __str__(self):
        time = self.created_at
        return f"[{time:%Y-%m-%d %H:%M}] {self.user} {self.action} {self.entity}({self.entity_id})"
