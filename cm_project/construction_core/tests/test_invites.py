import datetime
from unittest import mock

from django.core import mail
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone
from kombu.exceptions import OperationalError

from ..exceptions import Forbidden, NotFound
from ..models import Invite, Membership, User
from ..services import accept_invite, create_invite, list_invites, revoke_invite
from .utils import make_member, make_org

PASSWORD = "s3cret-pass-123"


class InviteTests(TestCase):
    def setUp(self):
        self.org = make_org("Org A")
        self.admin = make_member(self.org, "anita", role="admin")

    def invite(self, email="new@example.com", role="user"):
        return create_invite(
            self.org, email=email, role=role, name="New Person",
            invited_by=self.admin, inviter_role="admin",
        )

    def test_admin_creates_invite_and_email_goes_out_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            invite = self.invite()
        self.assertEqual(len(invite.token), 64)
        self.assertEqual(invite.status, "pending")
        self.assertGreater(invite.expires_at, timezone.now() + datetime.timedelta(days=6))
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(invite.token, mail.outbox[0].body)
        self.assertEqual(mail.outbox[0].to, ["new@example.com"])

    def test_invite_is_kept_when_the_email_cannot_be_queued(self):
        with mock.patch(
            "construction_core.tasks.send_invite_email.delay",
            side_effect=OperationalError("broker unreachable"),
        ):
            with self.assertLogs("construction_core.services.notifications", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    invite = self.invite()
        self.assertTrue(Invite.objects.filter(pk=invite.pk).exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_non_admin_cannot_invite(self):
        with self.assertRaises(Forbidden):
            create_invite(self.org, email="x@example.com", inviter_role="user")

    def test_existing_member_cannot_be_invited(self):
        with self.assertRaises(ValidationError):
            self.invite(email="ANITA@example.com")

    def test_accept_creates_user_and_membership(self):
        invite = self.invite(role="admin")
        user, membership = accept_invite(invite.token, PASSWORD)

        self.assertEqual(user.email, "new@example.com")
        self.assertTrue(user.check_password(PASSWORD))
        self.assertEqual(user.default_organization, self.org)
        self.assertEqual(membership.role, "admin")
        invite.refresh_from_db()
        self.assertTrue(invite.accepted)
        self.assertEqual(list_invites(self.org), [])

    def test_accept_for_existing_account_only_adds_membership(self):
        other = make_org("Org B")
        existing = make_member(other, "meera")
        invite = self.invite(email=existing.email)

        user, _ = accept_invite(invite.token, PASSWORD)
        self.assertEqual(user.pk, existing.pk)
        self.assertEqual(User.objects.filter(email=existing.email).count(), 1)
        self.assertTrue(Membership.objects.filter(user=existing, organization=self.org).exists())
        # the default organization stays where it was
        self.assertEqual(user.default_organization, other)

    def test_accepted_or_expired_invites_are_rejected(self):
        invite = self.invite()
        accept_invite(invite.token, PASSWORD)
        with self.assertRaises(ValidationError):
            accept_invite(invite.token, PASSWORD)

        expired = self.invite(email="late@example.com")
        Invite.objects.filter(pk=expired.pk).update(
            expires_at=timezone.now() - datetime.timedelta(minutes=1)
        )
        with self.assertRaises(ValidationError):
            accept_invite(expired.token, PASSWORD)
        self.assertFalse(User.objects.filter(email="late@example.com").exists())

        with self.assertRaises(ValidationError):
            accept_invite("nope", PASSWORD)

    def test_revoke_is_tenant_scoped(self):
        invite = self.invite()
        other = make_org("Org B")
        with self.assertRaises(NotFound):
            revoke_invite(invite.pk, other, role="admin")
        revoke_invite(invite.pk, self.org, role="admin")
        self.assertFalse(Invite.objects.filter(pk=invite.pk).exists())
