from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .approvable import ApprovableModel
from .organization import Organization
from .project import Project

ATTENDANCE_CHOICES = [
    ("present", "Present"),
    ("absent", "Absent"),
    ("half-day", "Half day"),
    # wage settlement rows carry the amount in `upad`, not tied to a project
    ("settlement", "Settlement"),
    ("pending-settlement", "Pending settlement"),
]


class Labor(models.Model):  # A worker on the muster roll
    TYPE_CHOICES = [
        ("laborer", "Laborer"),
        ("foreman", "Foreman"),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE)
    name = models.CharField(max_length=120)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default="laborer")
    # Daily wage
    rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TenantManager()

    def __str__(self):
        return self.name


# ---------- Hajari (daily attendance) ----------
class Hajari(ApprovableModel):
    labor = models.ForeignKey(Labor, on_delete=models.CASCADE, related_name="hajari")
    project = models.ForeignKey(
        Project, null=True, blank=True, on_delete=models.CASCADE, related_name="hajari"
    )
    date = models.DateField()
    status = models.CharField(max_length=20, choices=ATTENDANCE_CHOICES)
    overtime_hours = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00")
    )
    # Advance paid on the day, or the settled amount for settlement rows
    upad = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        verbose_name_plural = "hajari"
        indexes = [models.Index(fields=["organization", "date"], name="hajari_org_date_idx")]

    def __str__(self):
        return f"{self.labor_id} {self.status} on {self.date}"

    @property
    def is_settlement(self):
        return self.status in ("settlement", "pending-settlement")

    def clean(self):
        # attendance is always for a site, settlements aren't
        if not self.is_settlement and not self.project_id:
            raise ValidationError({"project": "Attendance needs a project"})
        if self.labor_id and self.labor.organization_id != self.organization_id:
            raise ValidationError("Labor must belong to the same organization")
