from django.contrib import admin

from construction_core.models import (FinancialAccount, Labor, Notification,
                                      Project)

from .inlines import ProjectAssignmentInline
from .mixins import TenantAdminMixin


@admin.register(Project)
class ProjectAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("name", "location", "status", "organization", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "location")
    inlines = [ProjectAssignmentInline]


@admin.register(FinancialAccount)
class FinancialAccountAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("name", "type", "bank_name", "opening_balance", "organization")
    list_filter = ("type",)


@admin.register(Labor)
class LaborAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("name", "type", "rate", "organization")
    list_filter = ("type",)
    search_fields = ("name",)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("user", "type", "message", "is_read", "created_at")
    list_filter = ("type", "is_read")

    def get_queryset(self, request):
        qs = super().get_queryset(request).select_related("user")
        if request.user.is_superuser:
            return qs
        return qs.filter(user=request.user)
