import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

from construction_core.models import (FinancialAccount, Labor, Membership,
                                      Organization, Project)
from construction_core.services import (add_settlement, assign_user,
                                        create_project, create_resource)

User = get_user_model()


class Command(BaseCommand):
    help = (
        "Create a demo organization with an admin, a site user and sample "
        "project data for testing."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--organization-name",
            default="Demo Builders",
            help="Name of the demo organization to create.",
        )
        parser.add_argument(
            "--username", default="demo", help="Username for the demo admin."
        )
        parser.add_argument(
            "--password", default="demo12345", help="Password for both demo users."
        )

    # Generate unique slug for the organization
    @staticmethod
    def unique_slug(name, max_tries=100):
        base = slugify(name) or "organization"
        slug = base
        i = 1
        # If plain slug is taken, append -1, -2, etc.
        while Organization.objects.filter(slug=slug).exists():
            slug = f"{base}-{i}"
            i += 1
            if i > max_tries:
                raise RuntimeError("Couldn't generate unique slug")
        return slug

    def _user(self, username, password, organization):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                "email": f"{username}@example.com",
                "default_organization": organization,
            },
        )
        if created:
            user.set_password(password)
            user.save()
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        name = options["organization_name"]
        username = options["username"]
        password = options["password"]

        # 1. Organization + people
        organization = Organization.objects.filter(name=name).first()
        if organization is None:
            organization = Organization.objects.create(
                name=name, slug=self.unique_slug(name)
            )
        self.stdout.write(self.style.SUCCESS(f"Created organization: {organization}"))

        admin = self._user(username, password, organization)
        site_user = self._user(f"{username}-site", password, organization)
        Membership.objects.get_or_create(
            user=admin, organization=organization, defaults={"role": "admin"}
        )
        Membership.objects.get_or_create(
            user=site_user, organization=organization, defaults={"role": "user"}
        )
        if organization.owner_id is None:
            organization.owner = admin
            organization.save(update_fields=["owner"])
        self.stdout.write(self.style.SUCCESS(
            f"Created users: {admin.username} (admin), {site_user.username} (user), pw={password}"
        ))

        # 2. Project with the site user assigned
        project = Project.objects.for_organization(organization).filter(
            name="Demo Tower"
        ).first()
        if project is None:
            project = create_project(
                organization, name="Demo Tower", location="Pune", role="admin", user=admin
            )
        assign_user(project, site_user, role="admin")
        cash, _ = FinancialAccount.objects.get_or_create(
            organization=organization,
            name="Site cash",
            defaults={"type": "cash", "opening_balance": Decimal("50000.00")},
        )
        self.stdout.write(self.style.SUCCESS(f"Created project: {project}"))

        # 3. Sample entries, the admin's are approved right away
        today = datetime.date.today()
        caller = {"organization": organization, "user": admin, "role": "admin"}
        ledger = create_resource(
            "ledger",
            {"name": f"Cement supplier {Organization.objects.count()}", "type": "expense"},
            **caller,
        )
        record = create_resource(
            "record",
            {
                "type": "expense",
                "amount": "1000.00",
                "description": "Cement, 100 bags",
                "dueDate": today + datetime.timedelta(days=30),
                "projectId": project.pk,
                "ledgerId": ledger.pk,
            },
            **caller,
        )
        add_settlement(
            record.pk,
            organization=organization,
            user=admin,
            settlement_date=today,
            amount_paid=Decimal("400.00"),
            payment_mode="cash",
            financial_account_id=cash.pk,
            convert_to_transaction=True,
        )
        create_resource(
            "task",
            {"projectId": project.pk, "title": "Pour slab, 3rd floor"},
            **caller,
        )
        labor, _ = Labor.objects.get_or_create(
            organization=organization, name="Ramesh", defaults={"rate": Decimal("800.00")}
        )
        create_resource(
            "hajari",
            {"laborId": labor.pk, "projectId": project.pk, "date": today,
             "status": "present"},
            **caller,
        )
        self.stdout.write(self.style.SUCCESS("Created ledger, record (partly settled), task, hajari"))

        # 4. One pending request from the site user
        create_resource(
            "task",
            {"projectId": project.pk, "title": "Order shuttering plates"},
            organization=organization,
            user=site_user,
            role="user",
        )
        self.stdout.write(self.style.SUCCESS("Demo tenant setup complete!"))
