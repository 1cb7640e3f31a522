import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from ..exceptions import NotFound
from ..models import Notification

logger = logging.getLogger(__name__)


def notify(user, message, *, organization=None, item_type="", item_id="", type="info"):
    if user is None:
        return None
    return Notification.objects.create(
        organization=organization,
        user=user,
        message=message,
        item_type=item_type,
        item_id=str(item_id or ""),
        type=type,
    )


def notify_admins(organization, message, *, exclude_user_id=None,
                  item_type="", item_id="", type="submitted"):
    User = get_user_model()
    admins = User.objects.admins_of(organization)
    if exclude_user_id:
        admins = admins.exclude(pk=exclude_user_id)
    created = [
        notify(admin, message, organization=organization,
               item_type=item_type, item_id=item_id, type=type)
        for admin in admins
    ]
    logger.info("Notified %d admin(s) of org %s: %s", len(created), organization.pk, message)
    return created


def enqueue_on_commit(task, *args):
    """
    Queue `task` once the surrounding transaction commits.
    By then the caller's write is saved, so a broker outage is logged and
    the caller still gets its result.
    """
    def send():
        try:
            task.delay(*args)
        except Exception:
            logger.exception("Could not queue %s%r", getattr(task, "name", task), args)

    transaction.on_commit(send)


def queue_admin_notification(organization, message, *, submitter=None,
                             item_type="", item_id=""):
    """ Fan the message out to admins once the surrounding transaction commits """
    from ..tasks import notify_admins_of_submission  # avoid cyc import

    enqueue_on_commit(
        notify_admins_of_submission,
        organization.pk,
        message,
        getattr(submitter, "pk", None),
        item_type,
        str(item_id),
    )


def list_notifications(user, *, unread_only=False):
    qs = Notification.objects.filter(user=user)
    if unread_only:
        qs = qs.filter(is_read=False)
    return list(qs)


def _own_notification(notification_id, user):
    try:
        return Notification.objects.get(pk=notification_id, user=user)
    except (Notification.DoesNotExist, ValueError, TypeError):
        raise NotFound("Notification")


def mark_read(notification_id, user, is_read=True):
    notification = _own_notification(notification_id, user)
    notification.is_read = bool(is_read)
    notification.save(update_fields=["is_read"])
    return notification


def mark_all_read(user):
    return Notification.objects.filter(user=user, is_read=False).update(is_read=True)


def delete_notification(notification_id, user):
    _own_notification(notification_id, user).delete()
