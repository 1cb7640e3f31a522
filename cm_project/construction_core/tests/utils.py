"""Small builders shared by the test modules."""
import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model

from ..models import (Ledger, Membership, Organization, Project,
                      ProjectAssignment, Record)


def make_org(name="Org A", slug=None):
    return Organization.objects.create(name=name, slug=slug or name.lower().replace(" ", "-"))


def make_member(organization, username, role="user"):
    user = get_user_model().objects.create_user(
        username=username, email=f"{username}@example.com", password="pw-12345678"
    )
    Membership.objects.create(user=user, organization=organization, role=role)
    user.refresh_from_db()
    return user


def make_project(organization, name="Site A"):
    return Project.objects.create(organization=organization, name=name)


def assign(project, user, **flags):
    return ProjectAssignment.objects.create(project=project, user=user, **flags)


def make_ledger(organization, name="Supplier", **extra):
    return Ledger.objects.create(organization=organization, name=name, **extra)


def make_record(organization, project, ledger, amount="1000.00", **extra):
    return Record.objects.create(
        organization=organization,
        project=project,
        ledger=ledger,
        type="expense",
        description="Cement",
        amount=Decimal(amount),
        due_date=datetime.date(2025, 10, 1),
        **extra,
    )
