from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager, TenantUserManager


# ---------- Tenant / Organization ----------
class Organization(models.Model):

    """Tenant: every governed resource belongs to exactly one organization"""
    name = models.CharField(max_length=200)

    slug = models.SlugField(  # A URL-friendly identifier
        max_length=80, unique=True
    )

    # Creator of the organization (signup), kept if the user goes away
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="owned_organizations",
    )

    currency_code = models.CharField(max_length=10, default="INR")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


# ---------- Custom User ----------
class User(AbstractUser):
    """
    AUTH_USER_MODEL = "construction_core.User"
    A user may belong to several organizations, default_organization is the
    one used when the session didn't pick another.
    """
    default_organization = models.ForeignKey(
        "Organization",
        null=True,
        blank=True,
        # If the organization is deleted, just clear the default
        on_delete=models.SET_NULL,
        related_name="default_users",
    )

    phone = models.CharField(max_length=32, blank=True)
    # invited users pick a password on acceptance
    must_change_password = models.BooleanField(default=False)

    objects = TenantUserManager()

    class Meta:
        indexes = [models.Index(fields=["default_organization"], name="user_default_org_idx")]

    def __str__(self):
        # Fall back to username if no name is set
        return self.get_full_name() or self.username

    def membership_for(self, organization):
        if organization is None:
            return None
        return self.memberships.filter(
            organization=organization, is_active=True
        ).first()


# ---------- Membership ----------
class Membership(models.Model):  # join model between User and Organization

    ROLE_CHOICES = [
        # full control, never needs approval
        ("admin", "Admin"),
        # edits and deletes go through the approval queue
        ("user", "User"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    organization = models.ForeignKey(
        "Organization", on_delete=models.CASCADE, related_name="memberships"
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="user")

    # Suspend someone's access without deleting the record
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    class Meta:
        # one user can only have one membership per organization
        constraints = [
            models.UniqueConstraint(
                fields=["user", "organization"], name="uq_user_org_membership"
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "user"], name="membership_org_user_idx"),
        ]

    def __str__(self):
        return f"{self.user} @ {self.organization} ({self.role})"

    def clean(self):
        if self.role not in dict(self.ROLE_CHOICES):
            raise ValidationError(f"Unknown role {self.role!r}")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
