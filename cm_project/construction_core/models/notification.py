from django.conf import settings
from django.db import models
from .organization import Organization

NOTIFICATION_TYPE_CHOICES = [
    ("submitted", "Submitted"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
    ("info", "Info"),
]


class Notification(models.Model):
    """ In-app message for one user (the submitter, or an admin) """

    organization = models.ForeignKey(
        Organization, null=True, blank=True, on_delete=models.CASCADE
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    message = models.TextField()
    # What the message is about, e.g. ("ledger", "42")
    item_type = models.CharField(max_length=40, blank=True, default="")
    item_id = models.CharField(max_length=64, blank=True, default="")
    type = models.CharField(
        max_length=12, choices=NOTIFICATION_TYPE_CHOICES, default="info"
    )
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [models.Index(fields=["user", "is_read"], name="notification_user_read_idx")]

    def __str__(self):
        return f"[{self.type}] {self.message[:40]}"
