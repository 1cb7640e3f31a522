from django.conf import settings
from django.db import models
from django.utils import timezone
from ..managers import TenantManager
from .organization import Membership, Organization


class Invite(models.Model):
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="invites"
    )
    email = models.EmailField()
    name = models.CharField(max_length=150, blank=True, default="")
    role = models.CharField(
        max_length=10, choices=Membership.ROLE_CHOICES, default="user"
    )
    # Random hex token sent in the invite link
    token = models.CharField(max_length=64, unique=True)
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL
    )
    expires_at = models.DateTimeField()
    accepted = models.BooleanField(default=False)
    accepted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        indexes = [models.Index(fields=["organization", "accepted"], name="invite_org_accepted_idx")]

    def __str__(self):
        return f"Invite {self.email} -> {self.organization}"

    @property
    def is_expired(self):
        return self.expires_at < timezone.now()

    @property
    def status(self):
        if self.accepted:
            return "accepted"
        return "expired" if self.is_expired else "pending"
