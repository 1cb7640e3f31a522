from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from .approvable import ApprovableModel
from .project import Project

MOVEMENT_CHOICES = [
    ("in", "Stock in"),
    ("out", "Stock out"),
]


# ---------- Material (cement, steel, sand ...) ----------
class Material(ApprovableModel):
    name = models.CharField(max_length=120)
    unit = models.CharField(max_length=20)  # bags, kg, brass, nos

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "name"], name="uq_org_material_name"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.unit})"


# ---------- Material ledger (stock movements per project) ----------
class MaterialLedgerEntry(ApprovableModel):
    material = models.ForeignKey(
        Material, on_delete=models.PROTECT, related_name="entries"
    )
    project = models.ForeignKey(
        Project, on_delete=models.PROTECT, related_name="material_entries"
    )
    date = models.DateField()
    type = models.CharField(max_length=3, choices=MOVEMENT_CHOICES)
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    description = models.TextField(null=True, blank=True)
    # Delivery challan scan
    challan_url = models.URLField(max_length=500, null=True, blank=True)

    class Meta:
        verbose_name_plural = "material ledger entries"
        indexes = [models.Index(fields=["organization", "material", "project"], name="matledger_org_mat_proj_idx")]

    def __str__(self):
        return f"{self.type} {self.quantity} {self.material_id} on {self.date}"

    def clean(self):
        if self.quantity is not None and self.quantity <= Decimal("0"):
            raise ValidationError("Quantity must be positive")
