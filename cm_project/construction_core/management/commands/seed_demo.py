from django.core.management import call_command
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Seeds the database with demo data (wraps create_demo_tenant)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--organization",
            type=str,
            default="Demo Builders",
            help="Name of the demo organization (default: Demo Builders)",
        )

    def handle(self, *args, **options):
        name = options["organization"]

        self.stdout.write(self.style.NOTICE(f"Seeding demo data for {name}..."))
        call_command("create_demo_tenant", organization_name=name)
        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
