from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils.translation import gettext_lazy as _

from construction_core.models import Invite, Membership, Organization, User

from .forms import UserAdminChangeForm, UserAdminCreationForm
from .mixins import TenantAdminMixin


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "owner", "currency_code", "created_at")
    search_fields = ("name", "slug")
    ordering = ("name",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        # Fetch all memberships and their users in bulk
        return qs.prefetch_related("memberships__user")


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    add_form = UserAdminCreationForm
    form = UserAdminChangeForm
    model = User

    list_display = (
        "username", "email", "get_full_name", "is_staff", "default_organization")
    list_filter = ("is_staff", "is_superuser", "is_active")
    search_fields = ("username", "email", "first_name", "last_name")
    ordering = ("username",)

    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Personal info"), {"fields":
                              ("first_name", "last_name", "email", "phone")}),
        (_("Organization / Defaults"), {"fields":
                                        ("default_organization", "must_change_password")}),
        (
            _("Permissions"),
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": (
                    "username",
                    "email",
                    "default_organization",
                    "password1",
                    "password2",
                ),
            },
        ),
    )

    # Tenant scoping:
    # limit visible users to members of the request.user's organizations
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        allowed_organization_ids = request.user.memberships.values_list(
            "organization_id", flat=True
        )
        # .distinct(): a user in two shared organizations shows up once
        return qs.filter(
            memberships__organization_id__in=allowed_organization_ids).distinct()


@admin.register(Membership)
class MembershipAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("user", "organization", "role", "is_active", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("user__username", "user__email")


@admin.register(Invite)
class InviteAdmin(TenantAdminMixin, admin.ModelAdmin):
    list_display = ("email", "organization", "role", "status", "expires_at", "invited_by")
    list_filter = ("role", "accepted")
    search_fields = ("email", "name")
    # the token is only ever sent by email
    exclude = ("token",)
    readonly_fields = ("accepted", "accepted_at", "invited_by")

    # invites are created through the API so the email goes out
    def has_add_permission(self, request):
        return False
