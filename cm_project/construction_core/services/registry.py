"""
One descriptor per governed resource module.

The approval workflow is the same for all nine modules; what differs is the
model, which fields a payload may touch, which of them are required on create
and which foreign keys must resolve inside the caller's organization.
"""
import json
import re
from dataclasses import dataclass, field
from typing import Dict, Tuple, Type

from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from ..models import (Document, FinancialAccount, Hajari, Labor, Ledger,
                      Material, MaterialLedgerEntry, Photo, Project, Record,
                      Task, Transaction)
from ..permissions import normalize_module

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(key: str) -> str:
    # "dueDate" -> "due_date", "projectId" -> "project_id"
    return _CAMEL.sub("_", key).lower()


@dataclass(frozen=True)
class ResourceModule:
    tag: str
    model: Type[models.Model]
    entity: str  # audit log entity name
    listing_key: str  # key in the pending-approvals payload
    fields: Tuple[str, ...]
    required: Tuple[str, ...] = ()
    # finance entries need can_create_entries / can_view_finances
    finance: bool = False
    # foreign keys that must point inside the organization
    related: Dict[str, Type[models.Model]] = field(default_factory=dict)

    @property
    def project_scoped(self):
        return "project" in self.fields

    def _field(self, name):
        return self.model._meta.get_field(name)

    def clean_payload(self, payload, organization, *, creating=False):
        """
        Turn an untrusted payload into {attname: python value}.
        Keys may be snake_case or camelCase, FK keys with or without "_id".
        Unknown keys are ignored.
        """
        incoming = {}
        for key, value in (payload or {}).items():
            name = snake_case(key)
            if name.endswith("_id") and name[:-3] in self.related:
                name = name[:-3]
            if name in self.fields:
                if isinstance(value, float):
                    # 400.1 must become Decimal("400.1"), not its binary expansion
                    value = str(value)
                incoming[name] = value

        if creating:
            missing = [
                name for name in self.required
                if incoming.get(name) in (None, "")
            ]
            if missing:
                raise ValidationError(
                    {name: "This field is required." for name in missing}
                )

        cleaned = {}
        errors = {}
        for name, value in incoming.items():
            try:
                # bool is an int: true would otherwise clean to 1 / pk 1
                if isinstance(value, bool) and not isinstance(
                    self._field(name), models.BooleanField
                ):
                    raise ValidationError("Enter a value, not true/false.")
                if name in self.related:
                    cleaned[f"{name}_id"] = self._resolve(name, value, organization)
                else:
                    cleaned[name] = self._field(name).clean(value, None)
            except ValidationError as exc:
                errors[name] = exc.messages
        if errors:
            raise ValidationError(errors)
        return cleaned

    def _resolve(self, name, value, organization):
        if value in (None, ""):
            if not self._field(name).null:
                raise ValidationError("This field is required.")
            return None
        related_model = self.related[name]
        pk = getattr(value, "pk", value)
        try:
            obj = related_model.objects.get(pk=pk, organization=organization)
        except (related_model.DoesNotExist, ValueError, TypeError):
            raise ValidationError(f"{related_model.__name__} {pk!r} not found")
        return obj.pk

    def to_pending(self, cleaned):
        """JSON-safe copy of a cleaned diff, stored in pending_data."""
        return json.loads(json.dumps(cleaned, cls=DjangoJSONEncoder))

    def apply(self, instance, data):
        """Copy cleaned (or pending_data) values onto a live instance."""
        for attname, value in (data or {}).items():
            model_field = self._field(attname)
            if value is not None:
                value = model_field.to_python(value)
            setattr(instance, model_field.attname, value)
        return instance


_MODULES = (
    ResourceModule(
        tag="ledger",
        model=Ledger,
        entity="LEDGER",
        listing_key="ledgers",
        fields=("name", "type", "gst_number", "is_gst_registered",
                "billing_address", "state"),
        required=("name",),
    ),
    ResourceModule(
        tag="transaction",
        model=Transaction,
        entity="TRANSACTION",
        listing_key="transactions",
        fields=("type", "amount", "description", "date", "project", "ledger",
                "payment_mode", "financial_account", "bill_url"),
        required=("type", "amount", "description", "date"),
        finance=True,
        related={"project": Project, "ledger": Ledger,
                 "financial_account": FinancialAccount},
    ),
    ResourceModule(
        tag="record",
        model=Record,
        entity="RECORD",
        listing_key="records",
        fields=("type", "amount", "description", "due_date", "project",
                "ledger", "payment_mode", "financial_account", "bill_url",
                "invoice_number", "invoice_date", "taxable_amount",
                "total_gst_amount"),
        required=("type", "amount", "description", "due_date", "project",
                  "ledger"),
        finance=True,
        related={"project": Project, "ledger": Ledger,
                 "financial_account": FinancialAccount},
    ),
    ResourceModule(
        tag="task",
        model=Task,
        entity="TASK",
        listing_key="tasks",
        fields=("project", "title", "description", "status", "due_date"),
        required=("project", "title"),
        related={"project": Project},
    ),
    ResourceModule(
        tag="material",
        model=Material,
        entity="MATERIAL",
        listing_key="materials",
        fields=("name", "unit"),
        required=("name", "unit"),
    ),
    ResourceModule(
        tag="material-ledger",
        model=MaterialLedgerEntry,
        entity="MATERIAL_LEDGER",
        listing_key="material_ledgers",
        fields=("material", "project", "date", "type", "quantity",
                "description", "challan_url"),
        required=("material", "project", "date", "type", "quantity"),
        related={"material": Material, "project": Project},
    ),
    ResourceModule(
        tag="hajari",
        model=Hajari,
        entity="HAJARI",
        listing_key="hajari",
        fields=("labor", "project", "date", "status", "overtime_hours", "upad"),
        # project is checked by Hajari.clean(), settlements have none
        required=("labor", "date", "status"),
        related={"labor": Labor, "project": Project},
    ),
    ResourceModule(
        tag="photo",
        model=Photo,
        entity="PHOTO",
        listing_key="photos",
        fields=("project", "image_url", "description"),
        required=("project", "image_url"),
        related={"project": Project},
    ),
    ResourceModule(
        tag="document",
        model=Document,
        entity="DOCUMENT",
        listing_key="documents",
        fields=("project", "document_url", "document_name", "description"),
        required=("project", "document_url", "document_name"),
        related={"project": Project},
    ),
)

REGISTRY: Dict[str, ResourceModule] = {m.tag: m for m in _MODULES}


def get_module(tag: str) -> ResourceModule:
    """Resolve a module tag (aliases included); unknown tags raise UnknownModule."""
    return REGISTRY[normalize_module(tag)]


def all_modules():
    return _MODULES


def module_for_model(model) -> ResourceModule:
    for descriptor in _MODULES:
        if descriptor.model is model:
            return descriptor
    raise KeyError(model)
