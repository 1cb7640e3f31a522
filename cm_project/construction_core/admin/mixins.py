class TenantAdminMixin:
    """
    Enforce tenant isolation in Django admin.
    Uses request.organization (set by CurrentOrganizationMiddleware).
    """

    def _get_request_organization(self, request):
        return getattr(request, "organization", None)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        organization = self._get_request_organization(request)

        # If superuser, show everything;
        # otherwise restrict to the active organization
        if request.user.is_superuser:
            return qs
        if organization is None:
            return qs.none()
        return qs.filter(organization=organization)

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        """
        Restrict foreignkey dropdowns to the current organization:
        project, ledger, material, labor, financial account ...
        """
        organization = self._get_request_organization(request)

        if not request.user.is_superuser:
            rel_model = getattr(db_field, "related_model", None)
            if db_field.name == "organization":
                kwargs["queryset"] = (
                    rel_model.objects.filter(pk=organization.pk)
                    if organization is not None else rel_model.objects.none()
                )
            elif rel_model is not None and hasattr(rel_model, "organization"):
                kwargs["queryset"] = (
                    rel_model.objects.filter(organization=organization)
                    if organization is not None else rel_model.objects.none()
                )

        return super().formfield_for_foreignkey(db_field, request, **kwargs)

    def save_model(self, request, obj, form, change):
        # Ensure object is always owned by the organization on save (unless superuser)
        if not request.user.is_superuser:
            organization = self._get_request_organization(request)
            if organization is not None:
                obj.organization = organization
        super().save_model(request, obj, form, change)
