from django.contrib.auth.models import UserManager
from django.db import models

# -----------------------------------------
# Enforce tenant scoping across all models
# that belong to an organization
# -----------------------------------------
class TenantQuerySet(models.QuerySet):
    def for_organization(self, organization):
        return self.filter(organization=organization)

    def pending(self):
        # pending-create / pending-edit / pending-delete
        return self.filter(approval_status__startswith="pending")

    def effective(self):
        """
        Rows that count towards balances and stock.
        pending-create rows only count once approved, rejected rows never do.
        pending-edit / pending-delete rows keep counting with their live values.
        """
        return self.exclude(approval_status__in=["pending-create", "rejected"])

    # Enables query:
    # Transaction.objects.for_organization(request.organization).effective()


class TenantManager(models.Manager.from_queryset(TenantQuerySet)):
    # every model using TenantManager can call:
    # Ledger.objects.for_organization(org).pending()
    pass


class TenantUserManager(UserManager):
    """ Users are global, organizations reach them through memberships """

    use_in_migrations = True

    def for_organization(self, organization):
        return self.get_queryset().filter(
            memberships__organization=organization,
            memberships__is_active=True,
        ).distinct()

    def admins_of(self, organization):
        return self.get_queryset().filter(
            memberships__organization=organization,
            memberships__is_active=True,
            memberships__role="admin",
        ).distinct()
