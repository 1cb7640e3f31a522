from django.contrib import admin

from construction_core.models import ProjectAssignment, RecordSettlement


class RecordSettlementInline(admin.TabularInline):
    """Settlements are append-only, so the inline only shows them."""
    model = RecordSettlement
    extra = 0
    can_delete = False
    fields = ("settlement_date", "amount_paid", "payment_mode",
              "financial_account", "transaction", "remarks", "created_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        # new settlements go through add_settlement()
        return False


class ProjectAssignmentInline(admin.TabularInline):
    model = ProjectAssignment
    extra = 0
    fields = ("user", "status", "can_view_finances", "can_create_entries")
    autocomplete_fields = ("user",)
