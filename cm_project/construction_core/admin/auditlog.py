from django.contrib import admin

from construction_core.models import AuditLog

from .mixins import TenantAdminMixin


@admin.register(AuditLog)
class AuditLogAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = (
        "id",
        "organization",
        "user",
        "action",
        "entity",
        "entity_id",
        "created_at",
    )
    search_fields = ("entity", "entity_id", "details", "user__username")
    list_filter = ("action", "entity", "created_at")

    # Fetch everything in one SQL join
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("organization", "user")

    # audit rows are written by the services only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
