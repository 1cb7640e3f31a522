from django.utils.deprecation import MiddlewareMixin

from .models import Organization


class CurrentOrganizationMiddleware(MiddlewareMixin):
    # Runs on every request and attaches .organization, .membership and .role
    # based on the logged-in user
    def process_request(self, request):
        request.organization = None
        request.membership = None
        request.role = None

        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return

        # Default organization fallback: if the user didn't pick one
        organization = user.default_organization

        # If the user switched organizations the choice lives in the session
        organization_id = request.session.get("active_organization_id")
        if organization_id:
            # the user must still be an active member, so a tampered session
            # can't jump into another organization
            organization = Organization.objects.filter(
                pk=organization_id,
                memberships__user=user,
                memberships__is_active=True,
            ).first()

        membership = user.membership_for(organization)
        if membership is None:
            return
        request.organization = organization
        request.membership = membership
        request.role = membership.role
