import decimal

import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import construction_core.managers


def approvable_fields():
    """Columns of the abstract ApprovableModel, repeated on every governed table."""
    return [
        ("approval_status", models.CharField(
            choices=[("approved", "Approved"), ("pending-create", "Pending create"),
                     ("pending-edit", "Pending edit"), ("pending-delete", "Pending delete"),
                     ("rejected", "Rejected")],
            default="approved", max_length=20)),
        ("pending_data", models.JSONField(blank=True, null=True)),
        ("request_message", models.TextField(blank=True, null=True)),
        ("remarks", models.TextField(blank=True, null=True)),
        ("rejection_count", models.PositiveIntegerField(default=0)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("organization", models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE, to="construction_core.organization")),
        ("submitted_by", models.ForeignKey(
            blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
            related_name="+", to=settings.AUTH_USER_MODEL)),
        ("created_by", models.ForeignKey(
            blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
            related_name="+", to=settings.AUTH_USER_MODEL)),
    ]


ENTRY_TYPES = [("income", "Income"), ("expense", "Expense")]
PAYMENT_MODES = [("cash", "Cash"), ("bank", "Bank")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=80, unique=True)),
                ("currency_code", models.CharField(default="INR", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(
                    default=False,
                    help_text="Designates that this user has all permissions without explicitly assigning them.",
                    verbose_name="superuser status")),
                ("username", models.CharField(
                    error_messages={"unique": "A user with that username already exists."},
                    help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.",
                    max_length=150, unique=True,
                    validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                    verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(
                    default=False,
                    help_text="Designates whether the user can log into this admin site.",
                    verbose_name="staff status")),
                ("is_active", models.BooleanField(
                    default=True,
                    help_text="Designates whether this user should be treated as active. "
                              "Unselect this instead of deleting accounts.",
                    verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("must_change_password", models.BooleanField(default=False)),
                ("default_organization", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="default_users", to="construction_core.organization")),
                ("groups", models.ManyToManyField(
                    blank=True,
                    help_text="The groups this user belongs to. A user will get all permissions "
                              "granted to each of their groups.",
                    related_name="user_set", related_query_name="user", to="auth.group",
                    verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(
                    blank=True, help_text="Specific permissions for this user.",
                    related_name="user_set", related_query_name="user", to="auth.permission",
                    verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
                "indexes": [models.Index(fields=["default_organization"], name="user_default_org_idx")],
            },
            managers=[
                ("objects", construction_core.managers.TenantUserManager()),
            ],
        ),
        migrations.AddField(
            model_name="organization",
            name="owner",
            field=models.ForeignKey(
                blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                related_name="owned_organizations", to=settings.AUTH_USER_MODEL),
        ),
        migrations.CreateModel(
            name="Membership",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("admin", "Admin"), ("user", "User")], default="user", max_length=10)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="memberships",
                    to="construction_core.organization")),
                ("user", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="memberships",
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "user"], name="membership_org_user_idx")],
                "constraints": [models.UniqueConstraint(fields=("user", "organization"), name="uq_user_org_membership")],
            },
        ),
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                ("status", models.CharField(
                    choices=[("active", "Active"), ("completed", "Completed"), ("on_hold", "On hold")],
                    default="active", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, to="construction_core.organization")),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "status"], name="project_org_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="ProjectAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive")], default="active", max_length=10)),
                ("can_view_finances", models.BooleanField(default=True)),
                ("can_create_entries", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("project", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="assignments",
                    to="construction_core.project")),
                ("user", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="project_assignments",
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("project", "user"), name="uq_project_user_assignment")],
            },
        ),
        migrations.CreateModel(
            name="FinancialAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("type", models.CharField(choices=PAYMENT_MODES, default="cash", max_length=10)),
                ("account_number", models.CharField(blank=True, max_length=64, null=True)),
                ("bank_name", models.CharField(blank=True, max_length=120, null=True)),
                ("ifsc_code", models.CharField(blank=True, max_length=20, null=True)),
                ("opening_balance", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, to="construction_core.organization")),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("organization", "name"), name="uq_org_financial_account_name")],
            },
        ),
        migrations.CreateModel(
            name="Ledger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("name", models.CharField(max_length=200)),
                ("type", models.CharField(blank=True, choices=ENTRY_TYPES, max_length=10, null=True)),
                ("gst_number", models.CharField(blank=True, max_length=20, null=True)),
                ("is_gst_registered", models.BooleanField(default=False)),
                ("billing_address", models.TextField(blank=True, null=True)),
                ("state", models.CharField(blank=True, max_length=64, null=True)),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "approval_status"], name="ledger_org_status_idx")],
                "constraints": [models.UniqueConstraint(fields=("organization", "name"), name="uq_org_ledger_name")],
            },
        ),
        migrations.CreateModel(
            name="Record",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("type", models.CharField(choices=ENTRY_TYPES, max_length=10)),
                ("description", models.TextField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("paid_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("balance_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("status", models.CharField(
                    choices=[("pending", "Pending"), ("partial", "Partially paid"), ("paid", "Paid")],
                    default="pending", max_length=10)),
                ("due_date", models.DateField()),
                ("payment_mode", models.CharField(choices=PAYMENT_MODES, default="cash", max_length=10)),
                ("bill_url", models.URLField(blank=True, max_length=500, null=True)),
                ("invoice_number", models.CharField(blank=True, max_length=64, null=True)),
                ("invoice_date", models.DateField(blank=True, null=True)),
                ("taxable_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("total_gst_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("project", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="records",
                    to="construction_core.project")),
                ("ledger", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="records",
                    to="construction_core.ledger")),
                ("financial_account", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    to="construction_core.financialaccount")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["organization", "due_date"], name="record_org_due_idx"),
                    models.Index(fields=["organization", "approval_status"], name="record_org_status_idx"),
                ],
                "constraints": [models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="record_positive_amount")],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("type", models.CharField(choices=ENTRY_TYPES, max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("description", models.TextField()),
                ("date", models.DateField()),
                ("payment_mode", models.CharField(choices=PAYMENT_MODES, default="cash", max_length=10)),
                ("bill_url", models.URLField(blank=True, max_length=500, null=True)),
                ("project", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="transactions", to="construction_core.project")),
                ("ledger", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="transactions", to="construction_core.ledger")),
                ("financial_account", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    to="construction_core.financialaccount")),
                ("converted_from_record", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="generated_transactions", to="construction_core.record")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["organization", "date"], name="txn_org_date_idx"),
                    models.Index(fields=["organization", "approval_status"], name="txn_org_status_idx"),
                ],
                "constraints": [models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="txn_positive_amount")],
            },
        ),
        migrations.CreateModel(
            name="RecordSettlement",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("settlement_date", models.DateField()),
                ("amount_paid", models.DecimalField(decimal_places=2, max_digits=18)),
                ("payment_mode", models.CharField(choices=PAYMENT_MODES, max_length=10)),
                ("remarks", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, to="construction_core.organization")),
                ("record", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="settlements",
                    to="construction_core.record")),
                ("financial_account", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    to="construction_core.financialaccount")),
                ("transaction", models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="settlement", to="construction_core.transaction")),
                ("created_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "record"], name="settlement_org_record_idx")],
                "constraints": [models.CheckConstraint(condition=models.Q(("amount_paid__gt", 0)), name="settlement_positive_amount")],
            },
        ),
        migrations.CreateModel(
            name="Task",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, null=True)),
                ("status", models.CharField(
                    choices=[("todo", "To do"), ("in-progress", "In progress"), ("done", "Done")],
                    default="todo", max_length=20)),
                ("due_date", models.DateField(blank=True, null=True)),
                ("project", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="tasks",
                    to="construction_core.project")),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "approval_status"], name="task_org_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="Material",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("name", models.CharField(max_length=120)),
                ("unit", models.CharField(max_length=20)),
            ],
            options={
                "constraints": [models.UniqueConstraint(fields=("organization", "name"), name="uq_org_material_name")],
            },
        ),
        migrations.CreateModel(
            name="MaterialLedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("date", models.DateField()),
                ("type", models.CharField(choices=[("in", "Stock in"), ("out", "Stock out")], max_length=3)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=14)),
                ("description", models.TextField(blank=True, null=True)),
                ("challan_url", models.URLField(blank=True, max_length=500, null=True)),
                ("material", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="entries",
                    to="construction_core.material")),
                ("project", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="material_entries",
                    to="construction_core.project")),
            ],
            options={
                "verbose_name_plural": "material ledger entries",
                "indexes": [models.Index(fields=["organization", "material", "project"], name="matledger_org_mat_proj_idx")],
            },
        ),
        migrations.CreateModel(
            name="Labor",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("type", models.CharField(choices=[("laborer", "Laborer"), ("foreman", "Foreman")], default="laborer", max_length=10)),
                ("rate", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=12)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, to="construction_core.organization")),
            ],
        ),
        migrations.CreateModel(
            name="Hajari",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("date", models.DateField()),
                ("status", models.CharField(
                    choices=[("present", "Present"), ("absent", "Absent"), ("half-day", "Half day"),
                             ("settlement", "Settlement"), ("pending-settlement", "Pending settlement")],
                    max_length=20)),
                ("overtime_hours", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=5)),
                ("upad", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=12)),
                ("labor", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="hajari",
                    to="construction_core.labor")),
                ("project", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.CASCADE,
                    related_name="hajari", to="construction_core.project")),
            ],
            options={
                "verbose_name_plural": "hajari",
                "indexes": [models.Index(fields=["organization", "date"], name="hajari_org_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="Photo",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("image_url", models.URLField(max_length=500)),
                ("description", models.TextField(blank=True, null=True)),
                ("project", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="photos",
                    to="construction_core.project")),
            ],
        ),
        migrations.CreateModel(
            name="Document",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *approvable_fields(),
                ("document_url", models.URLField(max_length=500)),
                ("document_name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("project", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="documents",
                    to="construction_core.project")),
            ],
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("message", models.TextField()),
                ("item_type", models.CharField(blank=True, default="", max_length=40)),
                ("item_id", models.CharField(blank=True, default="", max_length=64)),
                ("type", models.CharField(
                    choices=[("submitted", "Submitted"), ("approved", "Approved"),
                             ("rejected", "Rejected"), ("info", "Info")],
                    default="info", max_length=12)),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.CASCADE,
                    to="construction_core.organization")),
                ("user", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="notifications",
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "indexes": [models.Index(fields=["user", "is_read"], name="notification_user_read_idx")],
            },
        ),
        migrations.CreateModel(
            name="Invite",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(max_length=254)),
                ("name", models.CharField(blank=True, default="", max_length=150)),
                ("role", models.CharField(choices=[("admin", "Admin"), ("user", "User")], default="user", max_length=10)),
                ("token", models.CharField(max_length=64, unique=True)),
                ("expires_at", models.DateTimeField()),
                ("accepted", models.BooleanField(default=False)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="invites",
                    to="construction_core.organization")),
                ("invited_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [models.Index(fields=["organization", "accepted"], name="invite_org_accepted_idx")],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(
                    choices=[("CREATE", "Create"), ("UPDATE", "Update"), ("DELETE", "Delete"),
                             ("SUBMIT", "Submit"), ("APPROVE", "Approve"), ("REJECT", "Reject")],
                    max_length=20)),
                ("entity", models.CharField(max_length=40)),
                ("entity_id", models.CharField(max_length=64)),
                ("details", models.TextField(blank=True, default="")),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("organization", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to="construction_core.organization")),
                ("user", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["organization", "user"], name="auditlog_org_user_idx"),
                    models.Index(fields=["organization", "created_at"], name="auditlog_org_created_idx"),
                ],
            },
        ),
    ]
