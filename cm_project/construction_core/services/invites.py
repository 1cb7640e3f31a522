import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from ..exceptions import Forbidden, NotFound
from ..models import Invite, Membership
from ..permissions import normalize_role
from .audit_helper import log_action
from .notifications import enqueue_on_commit

logger = logging.getLogger(__name__)


def _require_admin(role):
    if normalize_role(role) != "admin":
        raise Forbidden("Only admins can manage invites")


def create_invite(organization, *, email, role="user", name="", invited_by=None,
                  inviter_role=None):
    """Create a 7-day (by default) invitation and email the link after commit."""
    _require_admin(inviter_role)
    email = (email or "").strip().lower()
    validate_email(email)
    role = (role or "").strip().lower()
    if role not in dict(Membership.ROLE_CHOICES):
        raise ValidationError({"role": f"Unknown role {role!r}"})

    already_member = Membership.objects.filter(
        organization=organization, user__email__iexact=email
    ).exists()
    if already_member:
        raise ValidationError("User is already a member of this organization")

    with transaction.atomic():
        invite = Invite.objects.create(
            organization=organization,
            email=email,
            name=name or "",
            role=role,
            token=secrets.token_hex(32),
            invited_by=invited_by,
            expires_at=timezone.now() + timedelta(days=settings.INVITE_EXPIRY_DAYS),
        )
        from ..tasks import send_invite_email  # avoid cyc import

        enqueue_on_commit(send_invite_email, invite.pk)

    log_action(
        action="CREATE",
        entity="INVITE",
        entity_id=invite.pk,
        details=f"Invited {email} as {role}",
        organization=organization,
        user=invited_by,
    )
    return invite


def list_invites(organization):
    """Open invitations only; accepted ones show up as members instead."""
    return list(
        Invite.objects.for_organization(organization)
        .filter(accepted=False)
        .order_by("-expires_at")
    )


def revoke_invite(invite_id, organization, *, role, user=None):
    _require_admin(role)
    try:
        invite = Invite.objects.for_organization(organization).get(pk=invite_id)
    except (Invite.DoesNotExist, ValueError, TypeError):
        raise NotFound("Invite")
    email = invite.email
    invite.delete()
    log_action(
        action="DELETE",
        entity="INVITE",
        entity_id=invite_id,
        details=f"Revoked invite for {email}",
        organization=organization,
        user=user,
    )


def _unique_username(email):
    User = get_user_model()
    base = slugify(email.split("@")[0]) or "user"
    username = base
    i = 1
    while User.objects.filter(username=username).exists():
        username = f"{base}-{i}"
        i += 1
    return username


def accept_invite(token, password, username=None):
    """
    Turn an invitation into a user + membership.
    An existing account with the same email just gains the membership
    (and the new password).
    """
    if not token or not password:
        raise ValidationError("Missing required fields")

    User = get_user_model()
    with transaction.atomic():
        invite = (
            Invite.objects.select_for_update()
            .select_related("organization")
            .filter(token=token)
            .first()
        )
        if invite is None or invite.accepted or invite.is_expired:
            raise ValidationError("Invalid or expired invitation")

        user = User.objects.filter(email__iexact=invite.email).first()
        if user is None:
            user = User(
                username=username or _unique_username(invite.email),
                email=invite.email,
                first_name=invite.name or "",
                default_organization=invite.organization,
            )
        elif invite.name and not user.first_name:
            user.first_name = invite.name
        validate_password(password, user)
        user.set_password(password)
        user.must_change_password = False
        if user.default_organization_id is None:
            user.default_organization = invite.organization
        user.save()

        membership, _ = Membership.objects.update_or_create(
            user=user,
            organization=invite.organization,
            defaults={"role": invite.role, "is_active": True},
        )

        invite.accepted = True
        invite.accepted_at = timezone.now()
        invite.save(update_fields=["accepted", "accepted_at"])

    log_action(
        action="CREATE",
        entity="MEMBERSHIP",
        entity_id=membership.pk,
        details=f"{invite.email} joined as {invite.role}",
        organization=invite.organization,
        user=user,
    )
    logger.info("Invite %s accepted by user %s", invite.pk, user.pk)
    return user, membership
