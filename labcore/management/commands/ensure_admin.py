# labcore/management/commands/ensure_admin.py
from django.core.management.base import BaseCommand, CommandError

from labcore.models import Role, User


class Command(BaseCommand):
    help = "Ensure a verified Admin account exists for the given email (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", required=True)
        parser.add_argument("--name", default="Administrator")

    def handle(self, *args, **opts):
        email, password, name = opts["email"], opts["password"], opts["name"]
        if len(password) < 8:
            raise CommandError("password must be at least 8 characters")
        user = User.objects.filter(email=email).first()
        if user is None:
            User.objects.create_superuser(email, password, name=name)
            self.stdout.write(self.style.SUCCESS(f"created admin {email}"))
            return
        # repair an existing account in place
        user.role = Role.ADMIN
        user.name = user.name or name
        user.is_active = True
        user.is_staff = True
        user.is_superuser = True
        user.is_email_verified = True
        user.managed_by = None
        user.set_password(password)
        user.save()
        self.stdout.write(self.style.SUCCESS(f"repaired admin {email}"))
