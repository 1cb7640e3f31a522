from unittest import mock

from django.test import TestCase
from kombu.exceptions import OperationalError

from ..exceptions import NotFound
from ..models import Notification, Task
from ..services import (create_resource, delete_notification, edit_resource,
                        list_notifications, mark_read, notify, notify_admins)
from ..tasks import notify_admins_of_submission
from .utils import assign, make_member, make_org, make_project


class NotificationTests(TestCase):
    def setUp(self):
        self.org = make_org("Org A")
        self.admin = make_member(self.org, "anita", role="admin")
        self.admin2 = make_member(self.org, "arjun", role="admin")
        self.user = make_member(self.org, "ravi")

    def test_notify_admins_skips_submitter_and_plain_users(self):
        created = notify_admins(self.org, "New ledger", exclude_user_id=self.admin.pk,
                                item_type="ledger", item_id=3)
        self.assertEqual([n.user for n in created], [self.admin2])
        self.assertEqual(created[0].item_id, "3")

    def test_task_fans_out_to_admins(self):
        count = notify_admins_of_submission(self.org.pk, "hello", self.user.pk, "task", "1")
        self.assertEqual(count, 2)

    def test_notify_without_user_is_a_no_op(self):
        self.assertIsNone(notify(None, "nobody"))
        self.assertEqual(Notification.objects.count(), 0)

    def test_owner_marks_read_and_lists_unread(self):
        note = notify(self.user, "Approved", organization=self.org, type="approved")
        notify(self.user, "Info")
        mark_read(note.pk, self.user)
        unread = list_notifications(self.user, unread_only=True)
        self.assertEqual([n.message for n in unread], ["Info"])

    def test_other_users_notifications_are_not_found(self):
        note = notify(self.admin, "Private")
        with self.assertRaises(NotFound):
            mark_read(note.pk, self.user)
        with self.assertRaises(NotFound):
            delete_notification(note.pk, self.user)
        delete_notification(note.pk, self.admin)
        self.assertFalse(Notification.objects.exists())


class BrokerOutageTests(TestCase):
    """Submissions are saved before admins are notified; a dead broker can't undo that."""

    def setUp(self):
        self.org = make_org("Org A")
        self.admin = make_member(self.org, "anita", role="admin")
        self.user = make_member(self.org, "ravi")
        self.project = make_project(self.org)
        assign(self.project, self.user)
        self.as_user = {"organization": self.org, "user": self.user, "role": "user"}

    def broker_down(self):
        return mock.patch(
            "construction_core.tasks.notify_admins_of_submission.delay",
            side_effect=OperationalError("broker unreachable"),
        )

    def test_create_still_returns_when_broker_is_down(self):
        with self.broker_down():
            with self.assertLogs("construction_core.services.notifications", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    task = create_resource(
                        "task", {"projectId": self.project.pk, "title": "Shuttering"},
                        **self.as_user,
                    )
        self.assertTrue(Task.objects.filter(pk=task.pk).exists())
        self.assertFalse(Notification.objects.exists())

    def test_edit_request_still_returns_when_broker_is_down(self):
        task = Task.objects.create(organization=self.org, project=self.project, title="A")
        with self.broker_down():
            with self.assertLogs("construction_core.services.notifications", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    edited = edit_resource("task", task.pk, {"title": "B"}, **self.as_user)
        self.assertEqual(edited.approval_status, "pending-edit")
        task.refresh_from_db()
        self.assertEqual(task.pending_data, {"title": "B"})
