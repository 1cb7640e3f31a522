from django.contrib import admin

from construction_core.models import (Document, Hajari, Ledger, Material,
                                      MaterialLedgerEntry, Photo, Record,
                                      Task, Transaction)

from .actions import approve_selected, reject_selected
from .inlines import RecordSettlementInline
from .mixins import TenantAdminMixin

APPROVAL_FIELDS = ("approval_status", "pending_data", "submitted_by",
                   "request_message", "remarks", "rejection_count")


class ApprovableAdmin(TenantAdminMixin, admin.ModelAdmin):
    """
    Shared config for the governed resources.
    Approval columns are read-only here; they only change through the
    approve/reject actions.
    """
    actions = [approve_selected, reject_selected]
    readonly_fields = APPROVAL_FIELDS + ("created_by", "created_at", "updated_at")
    list_filter = ("approval_status",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("organization", "submitted_by")


@admin.register(Ledger)
class LedgerAdmin(ApprovableAdmin):
    list_display = ("name", "type", "gst_number", "organization", "approval_status")
    search_fields = ("name", "gst_number")


@admin.register(Transaction)
class TransactionAdmin(ApprovableAdmin):
    list_display = ("date", "type", "amount", "project", "ledger",
                    "payment_mode", "approval_status")
    list_filter = ("approval_status", "type", "payment_mode")
    search_fields = ("description",)
    date_hierarchy = "date"


@admin.register(Record)
class RecordAdmin(ApprovableAdmin):
    list_display = ("invoice_number", "type", "amount", "paid_amount",
                    "balance_amount", "status", "due_date", "approval_status")
    list_filter = ("approval_status", "type", "status")
    search_fields = ("description", "invoice_number")
    # totals are derived from settlements
    readonly_fields = ApprovableAdmin.readonly_fields + (
        "paid_amount", "balance_amount", "status",
    )
    inlines = [RecordSettlementInline]


@admin.register(Task)
class TaskAdmin(ApprovableAdmin):
    list_display = ("title", "project", "status", "due_date", "approval_status")
    list_filter = ("approval_status", "status")
    search_fields = ("title",)


@admin.register(Material)
class MaterialAdmin(ApprovableAdmin):
    list_display = ("name", "unit", "approval_status")
    search_fields = ("name",)


@admin.register(MaterialLedgerEntry)
class MaterialLedgerEntryAdmin(ApprovableAdmin):
    list_display = ("date", "material", "project", "type", "quantity", "approval_status")
    list_filter = ("approval_status", "type")


@admin.register(Hajari)
class HajariAdmin(ApprovableAdmin):
    list_display = ("date", "labor", "project", "status", "overtime_hours",
                    "upad", "approval_status")
    list_filter = ("approval_status", "status")


@admin.register(Photo)
class PhotoAdmin(ApprovableAdmin):
    list_display = ("project", "description", "approval_status", "created_at")


@admin.register(Document)
class DocumentAdmin(ApprovableAdmin):
    list_display = ("document_name", "project", "approval_status", "created_at")
    search_fields = ("document_name",)
