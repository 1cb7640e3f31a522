import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def notify_admins_of_submission(organization_id, message, submitter_id=None,
                                item_type="", item_id=""):
    # import models lazily to avoid circular imports at module import time
    from .models import Organization
    from .services.notifications import notify_admins

    try:
        organization = Organization.objects.get(pk=organization_id)
    except Organization.DoesNotExist:
        logger.warning("Organization %s vanished before admins were notified", organization_id)
        return 0
    created = notify_admins(
        organization,
        message,
        exclude_user_id=submitter_id,
        item_type=item_type,
        item_id=item_id,
    )
    return len(created)


@shared_task
def send_invite_email(invite_id):
    from .models import Invite

    invite = Invite.objects.select_related("organization").get(pk=invite_id)
    link = f"{settings.APP_BASE_URL}/accept-invite?token={invite.token}"
    send_mail(
        subject=f"You're invited to join {invite.organization.name}",
        message=(
            f"Hello {invite.name or invite.email},\n\n"
            f"You have been invited to join {invite.organization.name}.\n"
            f"Accept the invitation here: {link}\n\n"
            f"This link expires on {invite.expires_at:%d %b %Y}."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[invite.email],
    )
    logger.info("Invite email sent to %s for org %s", invite.email, invite.organization_id)


@shared_task
def purge_expired_invites():
    from .models import Invite

    deleted, _ = Invite.objects.filter(
        accepted=False, expires_at__lt=timezone.now()
    ).delete()
    return deleted
